"""Group model for circles of friends that pings are sent to.

Members join a group by presenting its invite code. Codes are always
generated with 8 characters, but joining accepts anything from 6 to 8
alphanumeric characters.
"""

import secrets
import string
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

INVITE_CODE_LENGTH = 8
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
INVITE_CODE_PATTERN = r"^[A-Za-z0-9]{6,8}$"


def generate_invite_code() -> str:
    """Return a random 8-character alphanumeric invite code."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


class CreateGroupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    creator_id: UUID


class JoinGroupRequest(BaseModel):
    user_id: UUID
    invite_code: str = Field(pattern=INVITE_CODE_PATTERN)


class LeaveGroupRequest(BaseModel):
    user_id: UUID


class RegenerateInviteRequest(BaseModel):
    user_id: UUID


class Group(BaseModel):
    """A named set of users.

    Members are kept as an ordered list without duplicates; membership checks
    scan the list.

    Attributes:
        id: Unique identifier (UUID).
        name: Display name of the group.
        members: User IDs in join order. The creator is always first.
        invite_code: Code other users present to join.
    """
    id: UUID = Field(default_factory=uuid4)
    name: str
    members: list[UUID] = Field(default_factory=list)
    invite_code: str = Field(default_factory=generate_invite_code)

    @classmethod
    def from_request(cls, request: CreateGroupRequest) -> "Group":
        return cls(name=request.name, members=[request.creator_id])

    def add_member(self, user_id: UUID) -> None:
        if user_id not in self.members:
            self.members.append(user_id)

    def remove_member(self, user_id: UUID) -> None:
        self.members = [m for m in self.members if m != user_id]

    def regenerate_invite_code(self) -> None:
        self.invite_code = generate_invite_code()

    def is_member(self, user_id: UUID) -> bool:
        return user_id in self.members
