"""Shared test fixtures."""

import pytest
from factories import make_response
from fastapi.testclient import TestClient

from sensomatic.core.store import AppState, get_state
from sensomatic.main import app
from sensomatic.models import Group, Ping, User
from sensomatic.models.ping import Gathering


@pytest.fixture(name="state")
def state_fixture():
    """Create an empty application state for each test."""
    return AppState()


@pytest.fixture(name="client")
def client_fixture(state: AppState):
    """Create a test client backed by the test state."""

    def get_state_override():
        return state

    app.dependency_overrides[get_state] = get_state_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="initiator")
def initiator_fixture(state: AppState) -> User:
    user = User(name="Alex")
    state.users.insert(user.id, user)
    return user


@pytest.fixture(name="friend")
def friend_fixture(state: AppState) -> User:
    user = User(name="Sam")
    state.users.insert(user.id, user)
    return user


@pytest.fixture(name="other_friend")
def other_friend_fixture(state: AppState) -> User:
    user = User(name="Robin")
    state.users.insert(user.id, user)
    return user


@pytest.fixture(name="group")
def group_fixture(
    state: AppState, initiator: User, friend: User, other_friend: User
) -> Group:
    """A group containing the initiator and two friends."""
    group = Group(name="Friday Crew", members=[initiator.id, friend.id, other_friend.id])
    state.groups.insert(group.id, group)
    return group


@pytest.fixture(name="sample_ping")
def sample_ping_fixture(state: AppState, group: Group, initiator: User) -> Ping:
    """A freshly sent ping with no responses."""
    ping = Ping(
        initiator=initiator.id,
        group=group.id,
        activity_type="drinks",
        rough_timing="tonight",
    )
    state.pings.insert(ping.id, ping)
    return ping


@pytest.fixture(name="gathering_ping")
def gathering_ping_fixture(
    state: AppState, group: Group, initiator: User, friend: User, other_friend: User
) -> Ping:
    """A ping gathering two overlapping yes responses (17-21 and 18-22)."""
    ping = Ping(
        initiator=initiator.id,
        group=group.id,
        activity_type="drinks",
        rough_timing="tonight",
        lifecycle=Gathering(
            responses=[
                make_response(friend.id, window=(17, 21)),
                make_response(other_friend.id, window=(18, 22)),
            ]
        ),
    )
    state.pings.insert(ping.id, ping)
    return ping
