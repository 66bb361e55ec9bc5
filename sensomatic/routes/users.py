"""User routes for profile management."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from sensomatic.core.errors import NotFoundError
from sensomatic.core.store import AppState, get_state
from sensomatic.models import Group, User
from sensomatic.models.user import CreateUserRequest, UpdateUserRequest

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", status_code=201, response_model=User)
async def create_user(request: CreateUserRequest, state: AppState = Depends(get_state)):
    """Create a new user."""
    user = User.from_request(request)
    state.users.insert(user.id, user)
    return user


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: UUID, state: AppState = Depends(get_state)):
    user = state.users.get(user_id)
    if user is None:
        raise NotFoundError.for_resource("User")
    return user


@router.patch("/{user_id}", response_model=User)
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    state: AppState = Depends(get_state),
):
    """Update the fields present in the request body."""
    updated = state.users.update(user_id, lambda u: u.apply_update(request))
    if updated is None:
        raise NotFoundError.for_resource("User")
    return updated


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: UUID, state: AppState = Depends(get_state)):
    """
    Delete a user.

    Group memberships and responses that reference the user are left as they
    are; user IDs elsewhere are opaque references.
    """
    if state.users.remove(user_id) is None:
        raise NotFoundError.for_resource("User")
    return Response(status_code=204)


@router.get("/{user_id}/groups", response_model=list[Group])
async def list_user_groups(user_id: UUID, state: AppState = Depends(get_state)):
    """List the groups the user is a member of."""
    if not state.users.exists(user_id):
        raise NotFoundError.for_resource("User")
    return state.get_user_groups(user_id)
