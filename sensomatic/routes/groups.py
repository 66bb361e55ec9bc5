"""Group routes for membership, invite codes and group ping listings."""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from sensomatic.core.errors import ForbiddenError, NotFoundError
from sensomatic.core.store import AppState, get_state
from sensomatic.models import Group, Ping, PingState
from sensomatic.models.group import (
    CreateGroupRequest,
    JoinGroupRequest,
    LeaveGroupRequest,
    RegenerateInviteRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.post("", status_code=201, response_model=Group)
async def create_group(request: CreateGroupRequest, state: AppState = Depends(get_state)):
    """Create a group with the creator as its first member."""
    group = Group.from_request(request)
    state.groups.insert(group.id, group)
    logger.info(f"Group {group.id} created by {request.creator_id}")
    return group


@router.post("/join", response_model=Group)
async def join_group(request: JoinGroupRequest, state: AppState = Depends(get_state)):
    """
    Join a group by invite code.

    Codes of 6 to 8 alphanumeric characters are accepted; anything else is a
    validation error. An unknown code is reported as a missing group. Joining
    a group you already belong to changes nothing. The code is checked again
    under the store lock, so a code replaced by a concurrent regenerate no
    longer admits anyone.
    """
    group = state.find_group_by_invite_code(request.invite_code)
    if group is None:
        raise NotFoundError.for_resource("Group")

    def join(g: Group) -> None:
        if g.invite_code != request.invite_code:
            raise NotFoundError.for_resource("Group")
        g.add_member(request.user_id)

    updated = state.groups.update(group.id, join)
    if updated is None:
        raise NotFoundError.for_resource("Group")
    return updated


@router.get("/{group_id}", response_model=Group)
async def get_group(group_id: UUID, state: AppState = Depends(get_state)):
    group = state.groups.get(group_id)
    if group is None:
        raise NotFoundError.for_resource("Group")
    return group


@router.post("/{group_id}/leave", status_code=204)
async def leave_group(
    group_id: UUID,
    request: LeaveGroupRequest,
    state: AppState = Depends(get_state),
):
    updated = state.groups.update(group_id, lambda g: g.remove_member(request.user_id))
    if updated is None:
        raise NotFoundError.for_resource("Group")
    return Response(status_code=204)


@router.post("/{group_id}/regenerate-invite", response_model=Group)
async def regenerate_invite_code(
    group_id: UUID,
    request: RegenerateInviteRequest,
    state: AppState = Depends(get_state),
):
    """Replace the invite code. Any member may do this."""

    def regenerate(group: Group) -> None:
        if not group.is_member(request.user_id):
            raise ForbiddenError(detail="Only group members can regenerate invite code")
        group.regenerate_invite_code()

    updated = state.groups.update(group_id, regenerate)
    if updated is None:
        raise NotFoundError.for_resource("Group")
    return updated


@router.get("/{group_id}/pings", response_model=list[Ping])
async def list_group_pings(
    group_id: UUID,
    state: PingState | None = None,
    app_state: AppState = Depends(get_state),
):
    """List the group's pings, oldest first, optionally filtered by state."""
    if not app_state.groups.exists(group_id):
        raise NotFoundError.for_resource("Group")

    pings = app_state.get_group_pings(group_id)
    if state is not None:
        pings = [p for p in pings if p.state == state]
    return pings
