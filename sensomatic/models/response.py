"""Response model for a group member's answer to a ping.

A response records whether the member is in or out, and optionally when they
are free and how far they are willing to go. Responses live inside the ping's
lifecycle; they are not stored on their own.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import AwareDatetime, BaseModel, Field, model_validator


class Availability(BaseModel):
    """A window of free time, timezone-aware. ``earliest`` must be strictly before ``latest``."""
    earliest: AwareDatetime
    latest: AwareDatetime

    @model_validator(mode="after")
    def check_window(self) -> "Availability":
        if self.latest <= self.earliest:
            raise ValueError("latest must be after earliest")
        return self


class ResponsePreferences(BaseModel):
    max_distance: float | None = Field(default=None, ge=0)
    preferred_areas: list[str] | None = None
    excluded_areas: list[str] | None = None


class CreateResponseRequest(BaseModel):
    user: UUID
    answer: bool
    availability: Availability | None = None
    preferences: ResponsePreferences | None = None


class UpdateResponseRequest(BaseModel):
    user: UUID
    answer: bool | None = None
    availability: Availability | None = None
    preferences: ResponsePreferences | None = None


class Response(BaseModel):
    """One member's answer to a ping.

    Attributes:
        id: Unique identifier (UUID).
        user: ID of the responding user. At most one response per user per ping.
        answer: True if the user is in, False if out.
        availability: When the user is free, if they said.
        preferences: Distance and area preferences, if any.
        updated_at: When the response was created or last changed.
    """
    id: UUID = Field(default_factory=uuid4)
    user: UUID
    answer: bool
    availability: Availability | None = None
    preferences: ResponsePreferences | None = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_request(cls, request: CreateResponseRequest) -> "Response":
        return cls(
            user=request.user,
            answer=request.answer,
            availability=request.availability,
            preferences=request.preferences,
        )

    def apply_update(self, request: UpdateResponseRequest) -> None:
        """Replace the fields present in the request and bump ``updated_at``."""
        if request.answer is not None:
            self.answer = request.answer
        if request.availability is not None:
            self.availability = request.availability
        if request.preferences is not None:
            self.preferences = request.preferences
        self.updated_at = datetime.now(UTC)
