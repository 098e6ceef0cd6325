"""Shared fixtures and fakes for the service tests."""

import copy
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from pictocat.constants import initial_user_data


def make_user(user_id: str = "user_1", **overrides) -> dict:
    """A stored user document as the users collection would return it."""
    doc = {
        "_id": user_id,
        "username": user_id,
        "email": f"{user_id}@example.com",
        "role": "user",
        "isVerified": False,
        "lastModified": datetime(2025, 1, 1, tzinfo=timezone.utc),
        **initial_user_data(),
    }
    doc.update(copy.deepcopy(overrides))
    return doc


class FakeCursor:
    """Minimal motor cursor: chainable sort/limit, async iteration and to_list."""

    def __init__(self, docs):
        self.docs = list(docs)

    def sort(self, *args, **kwargs):
        return self

    def limit(self, n):
        self.docs = self.docs[:n]
        return self

    async def to_list(self, length=None):
        return list(self.docs)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self.docs:
            yield doc


def update_result(matched: int = 1) -> MagicMock:
    return MagicMock(matched_count=matched, modified_count=matched, upserted_id=None)


@pytest.fixture
def db():
    """AsyncMock database whose writes succeed by default."""
    database = AsyncMock()
    for name in ("users", "cats", "public_phrases", "envelopes", "upgrades", "system_config"):
        collection = getattr(database, name)
        collection.update_one.return_value = update_result()
        collection.find_one.return_value = None
        collection.find = MagicMock(return_value=FakeCursor([]))
    return database
