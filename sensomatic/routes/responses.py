"""Response routes for answering pings."""
from uuid import UUID

from fastapi import APIRouter, Depends

from sensomatic.core.errors import ConflictError, ForbiddenError, NotFoundError
from sensomatic.core.store import AppState, get_state
from sensomatic.lifecycle import state_machine
from sensomatic.models import Ping, Response
from sensomatic.models.response import CreateResponseRequest, UpdateResponseRequest
from sensomatic.routes.pings import load_ping, update_ping

router = APIRouter(prefix="/api/pings/{ping_id}/responses", tags=["responses"])


@router.post("", status_code=201, response_model=Response)
async def create_response(
    ping_id: UUID,
    request: CreateResponseRequest,
    state: AppState = Depends(get_state),
):
    """
    Answer a ping.

    The ping must still be open for responses, the user must be a member of
    the ping's group, and each user may respond only once. The state and
    duplicate checks are repeated under the store lock when the response is
    recorded, so two concurrent answers from the same user cannot both land.
    """
    ping = load_ping(state, ping_id)
    state_machine.can_add_response(ping)
    if ping.has_user_responded(request.user):
        raise ConflictError(detail="User has already responded to this ping")

    group = state.groups.get(ping.group)
    if group is None:
        raise NotFoundError.for_resource("Group")
    if not group.is_member(request.user):
        raise ForbiddenError(detail="User is not a member of the group")

    response = Response.from_request(request)

    def record(ping: Ping) -> None:
        state_machine.can_add_response(ping)
        if ping.has_user_responded(request.user):
            raise ConflictError(detail="User has already responded to this ping")
        ping.add_response(response)

    update_ping(state, ping_id, record)
    return response


@router.put("/{response_id}", response_model=Response)
async def update_response(
    ping_id: UUID,
    response_id: UUID,
    request: UpdateResponseRequest,
    state: AppState = Depends(get_state),
):
    """
    Change an existing response while the ping is still gathering.

    Users may only change their own response.
    """

    def amend(ping: Ping) -> None:
        state_machine.can_add_response(ping)
        existing = ping.find_response(response_id)
        if existing is None:
            raise NotFoundError.for_resource("Response")
        if existing.user != request.user:
            raise ForbiddenError(detail="User can only update their own response")
        existing.apply_update(request)

    updated = update_ping(state, ping_id, amend)
    return updated.find_response(response_id)
