"""
Shop Router

Envelope (gacha) and upgrade purchases.
"""

from fastapi import APIRouter, Depends

from pictocat.dependencies import get_current_user
from pictocat.models.economy import (
    PurchaseEnvelopeRequest,
    PurchaseEnvelopeResponse,
    PurchaseUpgradeRequest,
    PurchaseUpgradeResponse,
    ShopData,
)
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.shop_service import ShopService

router = APIRouter()
shop_service = ShopService()


@router.get("", response_model=ShopData)
async def get_shop_data(current_user: AuthenticatedUser = Depends(get_current_user)):
    """Envelopes priced for the caller's level, and all upgrades."""
    return await shop_service.get_shop_data(current_user.uid)


@router.post("/envelopes/purchase", response_model=PurchaseEnvelopeResponse)
async def purchase_envelope(
    request: PurchaseEnvelopeRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    return await shop_service.purchase_envelope(current_user.uid, request.envelope_id)


@router.post("/upgrades/purchase", response_model=PurchaseUpgradeResponse)
async def purchase_upgrade(
    request: PurchaseUpgradeRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    return await shop_service.purchase_upgrade(current_user.uid, request.upgrade_id)
