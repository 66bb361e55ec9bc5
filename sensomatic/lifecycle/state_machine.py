"""Guards and transitions for the ping lifecycle.

    ping_sent --response--> gathering --match, overlap--> matching
                                      \\--match, none---> no_match
    matching --confirm--> venue_confirmed --activate--> active_hangout --complete--> complete
    any non-terminal state --cancel (initiator only)--> cancelled

Guards never mutate. They raise ForbiddenError when the caller is not the
required actor and ConflictError when the ping is in the wrong state, checking
the caller first so a non-initiator always gets ForbiddenError.

Transitions replace ``ping.lifecycle`` in one assignment and carry the
responses forward. Each one checks the variant it starts from and raises
ConflictError without touching the ping if it is wrong. Callers run guard and
transition together inside ``InMemoryStore.update`` so they see the latest
stored ping.
"""

import logging
from uuid import UUID

from sensomatic.core.errors import ConflictError, ForbiddenError
from sensomatic.models import AttendeeStatus, HangoutData, MatchResults, Ping, Timeline
from sensomatic.models.ping import (
    ActiveHangout,
    Cancelled,
    Complete,
    Gathering,
    Matching,
    NoMatch,
    PingSent,
    VenueConfirmed,
)

logger = logging.getLogger(__name__)


def _wrong_state(action: str, ping: Ping) -> ConflictError:
    return ConflictError(
        detail=f"Cannot {action} when ping is in {ping.state.value} state",
        ping_id=str(ping.id),
        state=ping.state.value,
    )


def _require_initiator(ping: Ping, user_id: UUID, action: str) -> None:
    if ping.initiator != user_id:
        raise ForbiddenError(detail=f"Only initiator can {action}")


# Guards


def can_add_response(ping: Ping) -> None:
    if not isinstance(ping.lifecycle, PingSent | Gathering):
        raise _wrong_state("add response", ping)


def can_trigger_match(ping: Ping, user_id: UUID) -> None:
    _require_initiator(ping, user_id, "trigger matching")
    if not isinstance(ping.lifecycle, Gathering):
        raise _wrong_state("trigger match", ping)


def can_confirm(ping: Ping) -> None:
    if not isinstance(ping.lifecycle, Matching):
        raise _wrong_state("confirm", ping)


def can_activate(ping: Ping) -> None:
    if not isinstance(ping.lifecycle, VenueConfirmed):
        raise _wrong_state("activate", ping)


def can_complete(ping: Ping) -> None:
    if not isinstance(ping.lifecycle, ActiveHangout):
        raise _wrong_state("complete", ping)


def can_cancel(ping: Ping, user_id: UUID) -> None:
    _require_initiator(ping, user_id, "cancel ping")
    if ping.is_terminal:
        raise _wrong_state("cancel", ping)


# Transitions


def transition_to_matching(ping: Ping, results: MatchResults) -> None:
    """Gathering -> Matching on a match, Gathering -> NoMatch otherwise.

    NoMatch is terminal; there is no way back to gathering.
    """
    match ping.lifecycle:
        case Gathering(responses=responses):
            if results.has_match:
                ping.lifecycle = Matching(responses=responses, match_results=results)
            else:
                ping.lifecycle = NoMatch(responses=responses)
        case _:
            raise _wrong_state("trigger match", ping)
    logger.info(f"Ping {ping.id} matched: has_match={results.has_match}")


def create_hangout_data(ping: Ping, timeline: Timeline) -> HangoutData:
    """Build hangout data from the users who are currently in."""
    attendees = [r.user for r in ping.positive_responses()]
    return HangoutData.create(attendees, timeline)


def transition_to_venue_confirmed(ping: Ping, hangout: HangoutData) -> None:
    match ping.lifecycle:
        case Matching(responses=responses):
            ping.lifecycle = VenueConfirmed(responses=responses, hangout=hangout)
        case _:
            raise _wrong_state("confirm", ping)
    logger.info(
        f"Ping {ping.id} confirmed with {len(hangout.confirmed_attendees)} attendees"
    )


def transition_to_active(ping: Ping) -> None:
    match ping.lifecycle:
        case VenueConfirmed(responses=responses, hangout=hangout):
            ping.lifecycle = ActiveHangout(responses=responses, hangout=hangout)
        case _:
            raise _wrong_state("activate", ping)
    logger.info(f"Ping {ping.id} hangout active")


def transition_to_complete(ping: Ping) -> None:
    match ping.lifecycle:
        case ActiveHangout(responses=responses, hangout=hangout):
            ping.lifecycle = Complete(responses=responses, hangout=hangout)
        case _:
            raise _wrong_state("complete", ping)
    logger.info(f"Ping {ping.id} hangout complete")


def transition_to_cancelled(ping: Ping) -> None:
    """Cancel, keeping only the responses. Match and hangout data are dropped."""
    if ping.is_terminal:
        raise _wrong_state("cancel", ping)
    ping.lifecycle = Cancelled(responses=list(ping.responses))
    logger.info(f"Ping {ping.id} cancelled")


def update_attendee_status(
    ping: Ping, actor: UUID, attendee: UUID, status: AttendeeStatus
) -> None:
    """Set an attendee's status. Attendees may only update themselves."""
    hangout = ping.hangout
    if hangout is None:
        raise ConflictError(detail="Ping does not have a hangout")
    if actor != attendee:
        raise ForbiddenError(detail="Users can only update their own attendee status")
    hangout.update_attendee_status(attendee, status)
