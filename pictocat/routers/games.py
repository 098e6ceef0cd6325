"""
Games Router

Minigames hand over a normalized {score, coinsEarned, xpEarned} result.
"""

from fastapi import APIRouter, Depends

from pictocat.dependencies import get_current_user
from pictocat.models.user import GameResult, GameResultResponse
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.user_service import UserService

router = APIRouter()
user_service = UserService()


@router.post("/result", response_model=GameResultResponse)
async def record_game_result(
    result: GameResult,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    return await user_service.record_game_result(current_user.uid, result)
