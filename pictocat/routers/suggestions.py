"""
Suggestions Router

AI phrase ideas for the custom phrase editor.
"""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import Field

from pictocat.dependencies import get_current_user
from pictocat.models.base import CamelModel
from pictocat.services.auth_service import AuthenticatedUser
from pictocat.services.suggestion_service import SuggestionService

router = APIRouter()
suggestion_service = SuggestionService()


class SuggestionRequest(CamelModel):
    topic: str = Field(..., min_length=1, max_length=100)


class SuggestionResponse(CamelModel):
    suggestions: List[str] = []


@router.post("", response_model=SuggestionResponse)
async def generate_suggestions(
    request: SuggestionRequest,
    current_user: AuthenticatedUser = Depends(get_current_user)
):
    """Never fails on provider errors: an empty list comes back instead."""
    return SuggestionResponse(suggestions=await suggestion_service.generate(request.topic))
