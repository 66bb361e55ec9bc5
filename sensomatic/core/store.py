"""In-memory entity store and FastAPI dependency for accessing it.

State is volatile: it lives for the lifetime of the process and is lost on
restart.

Concurrency Model:
    - **One lock per collection**: users, groups and pings each have their own
      ``threading.Lock``. Every operation on a collection holds it, so two
      ``update`` calls on unrelated rows of the same collection still run one
      after the other.

    - **Atomic read-modify-write**: ``update`` hands the mutator the latest
      stored value while the lock is held. A second writer's mutator runs
      against whatever the first one left behind; there is no version check.

    - **Copies out, copies in**: callers only ever see deep copies, so the
      canonical value can only change through ``insert`` or ``update``. The
      mutator works on a copy that replaces the stored value when it returns
      normally; if it raises, the stored value is untouched.

    - **No cross-collection atomicity**: an operation touching two collections
      takes two independent locks.
"""

import copy
import threading
from collections.abc import Callable
from typing import Generic, TypeVar
from uuid import UUID

from sensomatic.models import Group, Ping, User

T = TypeVar("T")


class InMemoryStore(Generic[T]):
    """A lockable map from identifier to entity value."""

    def __init__(self, name: str):
        self.name = name
        self._data: dict[UUID, T] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def insert(self, id: UUID, item: T) -> None:
        with self._lock:
            self._data[id] = copy.deepcopy(item)

    def get(self, id: UUID) -> T | None:
        with self._lock:
            item = self._data.get(id)
            return copy.deepcopy(item) if item is not None else None

    def update(self, id: UUID, mutator: Callable[[T], None]) -> T | None:
        """Apply ``mutator`` to the stored value and return the result.

        Returns None if nothing is stored under ``id``. Exceptions raised by
        the mutator propagate to the caller and leave the stored value as it
        was.
        """
        with self._lock:
            current = self._data.get(id)
            if current is None:
                return None
            working = copy.deepcopy(current)
            mutator(working)
            self._data[id] = working
            return copy.deepcopy(working)

    def remove(self, id: UUID) -> T | None:
        with self._lock:
            return self._data.pop(id, None)

    def exists(self, id: UUID) -> bool:
        with self._lock:
            return id in self._data

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        with self._lock:
            for item in self._data.values():
                if predicate(item):
                    return copy.deepcopy(item)
        return None

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        with self._lock:
            return [copy.deepcopy(item) for item in self._data.values() if predicate(item)]


class AppState:
    """The entity collections backing the service."""

    def __init__(self):
        self.users: InMemoryStore[User] = InMemoryStore("users")
        self.groups: InMemoryStore[Group] = InMemoryStore("groups")
        self.pings: InMemoryStore[Ping] = InMemoryStore("pings")

    def get_user_groups(self, user_id: UUID) -> list[Group]:
        return self.groups.filter(lambda g: g.is_member(user_id))

    def find_group_by_invite_code(self, code: str) -> Group | None:
        return self.groups.find(lambda g: g.invite_code == code)

    def get_group_pings(self, group_id: UUID) -> list[Ping]:
        pings = self.pings.filter(lambda p: p.group == group_id)
        return sorted(pings, key=lambda p: p.created_at)


state = AppState()


def get_state() -> AppState:
    """Dependency for getting the application state."""
    return state
