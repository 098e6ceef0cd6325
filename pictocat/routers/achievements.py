"""
Achievements Router

Static achievement catalog. Per-user progress ships with the profile.
"""

from typing import List

from fastapi import APIRouter, Depends

from pictocat.dependencies import get_current_user
from pictocat.models.achievement import Achievement
from pictocat.services.achievements import ALL_ACHIEVEMENTS
from pictocat.services.auth_service import AuthenticatedUser

router = APIRouter()


@router.get("", response_model=List[Achievement])
async def get_achievements(current_user: AuthenticatedUser = Depends(get_current_user)):
    return ALL_ACHIEVEMENTS
