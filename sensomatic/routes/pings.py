"""Ping routes for the ping lifecycle and hangout tracking."""
import logging
from collections.abc import Callable
from uuid import UUID

from fastapi import APIRouter, Depends

from sensomatic.core.errors import ConflictError, ForbiddenError, NotFoundError
from sensomatic.core.store import AppState, get_state
from sensomatic.lifecycle import state_machine
from sensomatic.lifecycle.matching import calculate_match, get_match_results
from sensomatic.models import HangoutData, MatchResults, Ping
from sensomatic.models.hangout import ConfirmHangoutRequest, UpdateAttendeeStatusRequest
from sensomatic.models.ping import (
    CancelPingRequest,
    CreatePingRequest,
    TriggerMatchRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pings", tags=["pings"])


def load_ping(state: AppState, ping_id: UUID) -> Ping:
    ping = state.pings.get(ping_id)
    if ping is None:
        raise NotFoundError.for_resource("Ping")
    return ping


def update_ping(state: AppState, ping_id: UUID, mutator: Callable[[Ping], None]) -> Ping:
    """Run guard and transition against the latest stored ping."""
    updated = state.pings.update(ping_id, mutator)
    if updated is None:
        raise NotFoundError.for_resource("Ping")
    return updated


@router.post("", status_code=201, response_model=Ping)
async def create_ping(request: CreatePingRequest, state: AppState = Depends(get_state)):
    """Send a ping to a group. The initiator must be a member of the group."""
    group = state.groups.get(request.group)
    if group is None:
        raise NotFoundError.for_resource("Group")
    if not group.is_member(request.initiator):
        raise ForbiddenError(detail="User is not a member of the group")

    ping = Ping.from_request(request)
    state.pings.insert(ping.id, ping)
    logger.info(f"Ping {ping.id} sent to group {group.id}: {ping.activity_type}")
    return ping


@router.get("/{ping_id}", response_model=Ping)
async def get_ping(ping_id: UUID, state: AppState = Depends(get_state)):
    return load_ping(state, ping_id)


@router.post("/{ping_id}/cancel", response_model=Ping)
async def cancel_ping(
    ping_id: UUID,
    request: CancelPingRequest,
    state: AppState = Depends(get_state),
):
    """Cancel a ping. Only the initiator may cancel, and only before it ends."""

    def cancel(ping: Ping) -> None:
        state_machine.can_cancel(ping, request.user_id)
        state_machine.transition_to_cancelled(ping)

    return update_ping(state, ping_id, cancel)


@router.post("/{ping_id}/match", response_model=Ping)
async def trigger_match(
    ping_id: UUID,
    request: TriggerMatchRequest,
    state: AppState = Depends(get_state),
):
    """
    Run matching over the responses gathered so far.

    Only the initiator may trigger matching, and only while gathering. The
    ping moves to matching with the results embedded when the responders'
    availability overlaps, and to no_match otherwise.
    """

    def trigger(ping: Ping) -> None:
        state_machine.can_trigger_match(ping, request.user_id)
        state_machine.transition_to_matching(ping, calculate_match(ping))

    return update_ping(state, ping_id, trigger)


@router.get("/{ping_id}/match-results", response_model=MatchResults)
async def match_results(ping_id: UUID, state: AppState = Depends(get_state)):
    """Stored match results, or results recomputed from the current responses."""
    return get_match_results(load_ping(state, ping_id))


@router.post("/{ping_id}/confirm", status_code=201, response_model=Ping)
async def confirm_hangout(
    ping_id: UUID,
    request: ConfirmHangoutRequest,
    state: AppState = Depends(get_state),
):
    """
    Confirm the hangout with a concrete timeline.

    Everyone who answered yes at this point becomes a confirmed attendee with
    status pending.
    """

    def confirm(ping: Ping) -> None:
        state_machine.can_confirm(ping)
        hangout = state_machine.create_hangout_data(ping, request.timeline)
        state_machine.transition_to_venue_confirmed(ping, hangout)

    updated = update_ping(state, ping_id, confirm)
    logger.info(f"Ping {ping_id} confirmed by {request.user_id}")
    return updated


@router.post("/{ping_id}/activate", response_model=Ping)
async def activate_ping(ping_id: UUID, state: AppState = Depends(get_state)):
    """
    Start a confirmed hangout.

    The hangout sweeper also activates hangouts once their timeline starts,
    so a request that arrives after a sweep gets a 409 conflict.
    """

    def activate(ping: Ping) -> None:
        state_machine.can_activate(ping)
        state_machine.transition_to_active(ping)

    return update_ping(state, ping_id, activate)


@router.post("/{ping_id}/complete", response_model=Ping)
async def complete_ping(ping_id: UUID, state: AppState = Depends(get_state)):
    """
    Finish an active hangout.

    The hangout sweeper also completes hangouts once their timeline ends, so
    a request that arrives after a sweep gets a 409 conflict.
    """

    def complete(ping: Ping) -> None:
        state_machine.can_complete(ping)
        state_machine.transition_to_complete(ping)

    return update_ping(state, ping_id, complete)


@router.get("/{ping_id}/hangout", response_model=HangoutData)
async def get_hangout(ping_id: UUID, state: AppState = Depends(get_state)):
    """The hangout data of a confirmed ping."""
    hangout = load_ping(state, ping_id).hangout
    if hangout is None:
        raise ConflictError(detail="Ping does not have a hangout")
    return hangout


@router.put("/{ping_id}/attendees/{user_id}/status", response_model=Ping)
async def update_attendee_status(
    ping_id: UUID,
    user_id: UUID,
    request: UpdateAttendeeStatusRequest,
    state: AppState = Depends(get_state),
):
    """
    Update where an attendee is (pending, enroute, arrived, left).

    The caller in the body must be the attendee in the path.
    """

    def set_status(ping: Ping) -> None:
        state_machine.update_attendee_status(ping, request.user_id, user_id, request.status)

    return update_ping(state, ping_id, set_status)
