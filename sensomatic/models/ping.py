"""Ping model and its lifecycle.

A ping is an activity proposed to a group. Its ``lifecycle`` is a tagged
union: each variant is a separate model that carries exactly the data that
exists in that phase, discriminated by its ``state`` field.

    ping_sent        no data
    gathering        responses
    matching         responses, match_results
    no_match         responses                    (terminal)
    venue_confirmed  responses, hangout
    active_hangout   responses, hangout
    complete         responses, hangout           (terminal)
    cancelled        responses                    (terminal)

Variants forbid extra fields, so a value carrying data its variant does not
declare cannot be built. Code that reads lifecycle data matches on the
variant exhaustively and ends in ``assert_never`` so that a type checker
reports a forgotten variant.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Literal, assert_never
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field

from sensomatic.core.errors import ConflictError
from sensomatic.models.hangout import HangoutData, MatchResults
from sensomatic.models.response import Response


class PingState(str, Enum):
    PING_SENT = "ping_sent"
    GATHERING = "gathering"
    MATCHING = "matching"
    NO_MATCH = "no_match"
    VENUE_CONFIRMED = "venue_confirmed"
    ACTIVE_HANGOUT = "active_hangout"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class _Variant(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PingSent(_Variant):
    state: Literal["ping_sent"] = "ping_sent"


class Gathering(_Variant):
    state: Literal["gathering"] = "gathering"
    responses: list[Response]


class Matching(_Variant):
    state: Literal["matching"] = "matching"
    responses: list[Response]
    match_results: MatchResults


class NoMatch(_Variant):
    state: Literal["no_match"] = "no_match"
    responses: list[Response]


class VenueConfirmed(_Variant):
    state: Literal["venue_confirmed"] = "venue_confirmed"
    responses: list[Response]
    hangout: HangoutData


class ActiveHangout(_Variant):
    state: Literal["active_hangout"] = "active_hangout"
    responses: list[Response]
    hangout: HangoutData


class Complete(_Variant):
    state: Literal["complete"] = "complete"
    responses: list[Response]
    hangout: HangoutData


class Cancelled(_Variant):
    state: Literal["cancelled"] = "cancelled"
    responses: list[Response]


PingLifecycle = Annotated[
    PingSent
    | Gathering
    | Matching
    | NoMatch
    | VenueConfirmed
    | ActiveHangout
    | Complete
    | Cancelled,
    Field(discriminator="state"),
]


class CreatePingRequest(BaseModel):
    initiator: UUID
    group: UUID
    activity_type: str = Field(min_length=1, max_length=50)
    rough_timing: str = Field(min_length=1, max_length=50)
    vibe: str | None = Field(default=None, max_length=100)


class CancelPingRequest(BaseModel):
    user_id: UUID


class TriggerMatchRequest(BaseModel):
    user_id: UUID


class Ping(BaseModel):
    """An activity proposed to a group.

    Everything except ``lifecycle`` is fixed at creation. The store owns the
    canonical value; handlers work on copies and write back through
    ``InMemoryStore.update``.

    Attributes:
        id: Unique identifier (UUID).
        initiator: User who sent the ping. Only they may trigger matching or
            cancel.
        group: Group the ping was sent to.
        activity_type: What to do, e.g. "drinks".
        rough_timing: Loose timing, e.g. "tonight".
        vibe: Optional free-form mood.
        created_at: When the ping was sent.
        lifecycle: Current phase and the data belonging to it.
    """
    id: UUID = Field(default_factory=uuid4)
    initiator: UUID
    group: UUID
    activity_type: str
    rough_timing: str
    vibe: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    lifecycle: PingLifecycle = Field(default_factory=PingSent)

    @classmethod
    def from_request(cls, request: CreatePingRequest) -> "Ping":
        return cls(
            initiator=request.initiator,
            group=request.group,
            activity_type=request.activity_type,
            rough_timing=request.rough_timing,
            vibe=request.vibe,
        )

    @computed_field
    @property
    def state(self) -> PingState:
        return PingState(self.lifecycle.state)

    @property
    def is_terminal(self) -> bool:
        match self.lifecycle:
            case NoMatch() | Complete() | Cancelled():
                return True
            case PingSent() | Gathering() | Matching() | VenueConfirmed() | ActiveHangout():
                return False
            case _:
                assert_never(self.lifecycle)

    @property
    def responses(self) -> list[Response]:
        match self.lifecycle:
            case PingSent():
                return []
            case (
                Gathering(responses=responses)
                | Matching(responses=responses)
                | NoMatch(responses=responses)
                | VenueConfirmed(responses=responses)
                | ActiveHangout(responses=responses)
                | Complete(responses=responses)
                | Cancelled(responses=responses)
            ):
                return responses
            case _:
                assert_never(self.lifecycle)

    @property
    def hangout(self) -> HangoutData | None:
        match self.lifecycle:
            case (
                VenueConfirmed(hangout=hangout)
                | ActiveHangout(hangout=hangout)
                | Complete(hangout=hangout)
            ):
                return hangout
            case PingSent() | Gathering() | Matching() | NoMatch() | Cancelled():
                return None
            case _:
                assert_never(self.lifecycle)

    @property
    def match_results(self) -> MatchResults | None:
        match self.lifecycle:
            case Matching(match_results=match_results):
                return match_results
            case (
                PingSent()
                | Gathering()
                | NoMatch()
                | VenueConfirmed()
                | ActiveHangout()
                | Complete()
                | Cancelled()
            ):
                return None
            case _:
                assert_never(self.lifecycle)

    def add_response(self, response: Response) -> None:
        """Record a response; the first one moves the ping into gathering."""
        match self.lifecycle:
            case PingSent():
                self.lifecycle = Gathering(responses=[response])
            case Gathering(responses=responses):
                responses.append(response)
            case _:
                raise ConflictError(
                    detail=f"Cannot add response when ping is in {self.state.value} state"
                )

    def find_response(self, response_id: UUID) -> Response | None:
        return next((r for r in self.responses if r.id == response_id), None)

    def find_response_by_user(self, user_id: UUID) -> Response | None:
        return next((r for r in self.responses if r.user == user_id), None)

    def has_user_responded(self, user_id: UUID) -> bool:
        return self.find_response_by_user(user_id) is not None

    def positive_responses(self) -> list[Response]:
        return [r for r in self.responses if r.answer]
