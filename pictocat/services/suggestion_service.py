"""
Suggestion Service

Short phrase ideas for a topic from Gemini. Bounded by a timeout; any
failure degrades to an empty list.
"""

import asyncio
import logging
from typing import List, Optional

from google import genai
from google.genai import types

from pictocat.config import settings
from pictocat.constants import SUGGESTION_COUNT
from pictocat.models.base import CamelModel

logger = logging.getLogger(__name__)


class SuggestionList(CamelModel):
    suggestions: List[str] = []


def build_prompt(topic: str) -> str:
    return (
        f"Generate {SUGGESTION_COUNT} short, fun and creative phrases that a person "
        f"could say out loud about the topic: \"{topic}\". "
        "Each phrase must be at most 8 words."
    )


class SuggestionService:
    """Gemini-backed phrase suggestions."""

    def __init__(self, client: Optional[genai.Client] = None):
        self._client = client

    @property
    def client(self) -> Optional[genai.Client]:
        if self._client is None and settings.gemini_api_key:
            self._client = genai.Client(api_key=settings.gemini_api_key)
        return self._client

    async def _generate(self, topic: str) -> List[str]:
        response = await self.client.aio.models.generate_content(
            model=settings.gemini_model,
            contents=build_prompt(topic),
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=SuggestionList,
            ),
        )
        parsed = SuggestionList.model_validate_json(response.text or "{}")
        return [s.strip() for s in parsed.suggestions if s and s.strip()]

    async def generate(self, topic: str) -> List[str]:
        """Up to SUGGESTION_COUNT suggestions, or [] when the provider fails or is slow."""
        topic = (topic or "").strip()
        if not topic:
            return []
        if self.client is None:
            logger.warning("GEMINI_API_KEY not configured, suggestions disabled")
            return []

        try:
            suggestions = await asyncio.wait_for(
                self._generate(topic), timeout=settings.suggestion_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"Suggestion request timed out after {settings.suggestion_timeout_seconds}s")
            return []
        except Exception as e:
            logger.warning(f"Suggestion request failed: {e}")
            return []

        return suggestions[:SUGGESTION_COUNT]
