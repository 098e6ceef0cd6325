"""
Admin Router

Moderation endpoints. Every route requires the admin role.
"""

from typing import List

from fastapi import APIRouter, Depends

from pictocat.dependencies import require_admin
from pictocat.models.base import CamelModel
from pictocat.models.catalog import Envelope, EnvelopeUpdate
from pictocat.models.social import PublicPhraseView
from pictocat.models.user import AdminUserView, SuccessResponse
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.phrase_service import PhraseService
from pictocat.services.shop_service import ShopService
from pictocat.services.user_service import UserService

router = APIRouter()
user_service = UserService()
phrase_service = PhraseService()
shop_service = ShopService()


class SetVerifiedRequest(CamelModel):
    is_verified: bool


@router.get("/users", response_model=List[AdminUserView])
async def list_users(admin: AuthenticatedUser = Depends(require_admin)):
    return await user_service.list_users()


@router.put("/users/{user_id}/verified", response_model=SuccessResponse)
async def set_verified_status(
    user_id: str,
    request: SetVerifiedRequest,
    admin: AuthenticatedUser = Depends(require_admin)
):
    await user_service.set_verified(user_id, request.is_verified)
    return SuccessResponse(message="Verification status updated")


@router.get("/phrases", response_model=List[PublicPhraseView])
async def list_public_phrases(admin: AuthenticatedUser = Depends(require_admin)):
    return await phrase_service.list_all()


@router.delete("/phrases/{public_phrase_id}", response_model=SuccessResponse)
async def censor_phrase(
    public_phrase_id: str,
    admin: AuthenticatedUser = Depends(require_admin)
):
    """Remove a phrase from the community and make it private again for its owner."""
    await phrase_service.censor(public_phrase_id)
    return SuccessResponse(message="Phrase censored")


@router.patch("/envelopes/{envelope_id}", response_model=Envelope)
async def update_envelope(
    envelope_id: str,
    request: EnvelopeUpdate,
    admin: AuthenticatedUser = Depends(require_admin)
):
    return await shop_service.update_envelope(envelope_id, request)
