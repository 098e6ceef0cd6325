"""
Daily Pass Router

Status preview and once-per-24h claim.
"""

from fastapi import APIRouter, Depends

from pictocat.dependencies import get_current_user
from pictocat.models.economy import ClaimDailyPassResponse, DailyPassStatus
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.daily_pass_service import DailyPassService

router = APIRouter()
daily_pass_service = DailyPassService()


@router.get("", response_model=DailyPassStatus)
async def get_daily_pass_status(current_user: AuthenticatedUser = Depends(get_current_user)):
    return await daily_pass_service.get_status(current_user.uid)


@router.post("/claim", response_model=ClaimDailyPassResponse)
async def claim_daily_pass(current_user: AuthenticatedUser = Depends(get_current_user)):
    return await daily_pass_service.claim(current_user.uid)
