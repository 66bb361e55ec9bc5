"""Hangout and match result models.

Hangout data is a value object embedded in a ping once the ping is confirmed.
It has no identity of its own: the ping ID identifies the hangout.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field, model_validator

from sensomatic.core.errors import NotFoundError


class AttendeeStatus(str, Enum):
    PENDING = "pending"
    ENROUTE = "enroute"
    ARRIVED = "arrived"
    LEFT = "left"


class Timeline(BaseModel):
    """Start and end of a confirmed hangout, timezone-aware, with a positive duration."""
    start: AwareDatetime
    end: AwareDatetime

    @model_validator(mode="after")
    def check_duration(self) -> "Timeline":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class HangoutData(BaseModel):
    """The confirmed plan for a ping.

    Attributes:
        confirmed_attendees: Users who answered "in" at confirmation time.
            Frozen once the hangout is created.
        timeline: When the hangout happens.
        attendee_statuses: Where each confirmed attendee is, starting at
            pending.
    """
    confirmed_attendees: list[UUID]
    timeline: Timeline
    attendee_statuses: dict[UUID, AttendeeStatus] = Field(default_factory=dict)

    @classmethod
    def create(cls, attendees: list[UUID], timeline: Timeline) -> "HangoutData":
        return cls(
            confirmed_attendees=list(attendees),
            timeline=timeline,
            attendee_statuses={user_id: AttendeeStatus.PENDING for user_id in attendees},
        )

    def is_attendee(self, user_id: UUID) -> bool:
        return user_id in self.confirmed_attendees

    def update_attendee_status(self, user_id: UUID, status: AttendeeStatus) -> None:
        if not self.is_attendee(user_id):
            raise NotFoundError.for_resource("Attendee", user_id=str(user_id))
        self.attendee_statuses[user_id] = status


class ConfirmHangoutRequest(BaseModel):
    user_id: UUID
    timeline: Timeline


class UpdateAttendeeStatusRequest(BaseModel):
    user_id: UUID
    status: AttendeeStatus


class TimeOverlap(BaseModel):
    start: datetime
    end: datetime
    attendee_count: int


class MatchResults(BaseModel):
    """Outcome of intersecting the responders' availability.

    Computed by the matching engine, never submitted by clients.
    """
    ping_id: UUID
    overlap: TimeOverlap | None = None
    has_match: bool
