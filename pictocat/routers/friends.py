"""
Friends Router

Friend requests and friendships.
"""

from fastapi import APIRouter, Depends

from pictocat.dependencies import get_current_user
from pictocat.models.social import FriendData, FriendResponse, RespondFriendRequestBody, TargetUserBody
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.social_service import SocialService

router = APIRouter()
social_service = SocialService()


@router.get("", response_model=FriendData)
async def get_friend_data(current_user: AuthenticatedUser = Depends(get_current_user)):
    """Friends and incoming requests."""
    return await social_service.get_friend_data(current_user.uid)


@router.post("/request", response_model=FriendResponse)
async def add_friend(
    body: TargetUserBody,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    await social_service.send_request(current_user.uid, body.target_user_id)
    return FriendResponse()


@router.post("/respond", response_model=FriendResponse)
async def respond_to_friend_request(
    body: RespondFriendRequestBody,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    unlocks = await social_service.respond(current_user.uid, body.target_user_id, body.response_action)
    return FriendResponse(newly_unlocked_achievements=unlocks)


@router.post("/cancel", response_model=FriendResponse)
async def cancel_friend_request(
    body: TargetUserBody,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    await social_service.cancel_request(current_user.uid, body.target_user_id)
    return FriendResponse()


@router.post("/remove", response_model=FriendResponse)
async def remove_friend(
    body: TargetUserBody,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    await social_service.remove_friend(current_user.uid, body.target_user_id)
    return FriendResponse()
