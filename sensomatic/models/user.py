"""User model for people who send and answer pings.

Users carry only profile data. Identity is passed per request as an opaque
UUID; the service does not authenticate it.
"""

from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class Location(BaseModel):
    lat: float
    lng: float


class UserPreferences(BaseModel):
    """Defaults a user's responses can fall back on."""
    default_distance: float | None = Field(default=None, ge=0)
    favorite_areas: list[str] | None = None
    home_location: Location | None = None


class CreateUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    avatar: str | None = None
    preferences: UserPreferences | None = None


class UpdateUserRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    avatar: str | None = None
    preferences: UserPreferences | None = None


class User(BaseModel):
    """A person who can belong to groups and take part in pings.

    Attributes:
        id: Unique identifier (UUID).
        name: Display name.
        avatar: Optional avatar URL or token.
        preferences: Optional defaults for distance and areas.
    """
    id: UUID = Field(default_factory=uuid4)
    name: str
    avatar: str | None = None
    preferences: UserPreferences | None = None

    @classmethod
    def from_request(cls, request: CreateUserRequest) -> "User":
        return cls(
            name=request.name,
            avatar=request.avatar,
            preferences=request.preferences,
        )

    def apply_update(self, request: UpdateUserRequest) -> None:
        """Replace the fields present in the request."""
        if request.name is not None:
            self.name = request.name
        if request.avatar is not None:
            self.avatar = request.avatar
        if request.preferences is not None:
            self.preferences = request.preferences
