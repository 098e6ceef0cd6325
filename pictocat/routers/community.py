"""
Community Router

Publishing phrases, likes, the public feed, public profiles and user search.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from pictocat.dependencies import get_current_user
from pictocat.models.social import (
    LikePhraseRequest,
    LikePhraseResponse,
    PublicPhraseView,
    PublicProfileData,
    PublishPhraseRequest,
    PublishPhraseResponse,
    SearchableUser,
)
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.phrase_service import PhraseService
from pictocat.services.user_service import UserService

router = APIRouter()
phrase_service = PhraseService()
user_service = UserService()


@router.get("/feed", response_model=List[PublicPhraseView])
async def get_public_feed(current_user: AuthenticatedUser = Depends(get_current_user)):
    return await phrase_service.get_feed(current_user.uid)


@router.get("/profile/{username}", response_model=PublicProfileData)
async def get_public_profile(
    username: str,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    return await phrase_service.get_public_profile(current_user.uid, username)


@router.get("/search", response_model=List[SearchableUser])
async def search_users(
    q: str = Query("", max_length=50),
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    return await user_service.search(q)


@router.post("/publish", response_model=PublishPhraseResponse)
async def publish_phrase(
    request: PublishPhraseRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    return await phrase_service.publish(current_user.uid, request)


@router.post("/like", response_model=LikePhraseResponse)
async def like_phrase(
    request: LikePhraseRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    liked = await phrase_service.toggle_like(current_user.uid, request.public_phrase_id)
    return LikePhraseResponse(liked=liked)
