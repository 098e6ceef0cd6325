"""
Users Router

Own profile: fetch (just-in-time creation), partial saves, sync polling
and profile edits.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status

from pictocat.dependencies import get_current_user
from pictocat.models.user import (
    SaveUserDataRequest,
    SaveUserDataResponse,
    SuccessResponse,
    UpdateProfilePictureRequest,
    UpdateProfileRequest,
    UserProfile,
)
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.sync_service import SyncService
from pictocat.services.user_service import UserService

router = APIRouter()
user_service = UserService()
sync_service = SyncService()


@router.get("/me", response_model=UserProfile)
async def get_user_data(current_user: AuthenticatedUser = Depends(get_current_user)):
    """Full profile. Creates the user on first call."""
    return await user_service.get_or_create(current_user)


@router.post("/me/data", response_model=SaveUserDataResponse)
async def save_user_data(
    request: SaveUserDataRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    return await user_service.save_user_data(current_user.uid, request)


@router.get(
    "/me/sync",
    response_model=UserProfile,
    responses={status.HTTP_304_NOT_MODIFIED: {"description": "Client copy is current"}},
)
async def sync(
    since: datetime = Query(..., description="lastModified of the client's copy"),
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    """Full profile if the server copy is newer than `since` (1s buffer), else 304."""
    profile = await sync_service.reconcile(current_user.uid, since)
    if profile is None:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED)
    return profile


@router.put("/me/profile", response_model=SuccessResponse)
async def update_profile(
    request: UpdateProfileRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    await user_service.update_profile(current_user.uid, request)
    return SuccessResponse(message="Profile updated")


@router.put("/me/profile-picture", response_model=SuccessResponse)
async def update_profile_picture(
    request: UpdateProfilePictureRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    await user_service.update_profile_picture(current_user.uid, request.image_id)
    return SuccessResponse(message="Profile picture updated")
