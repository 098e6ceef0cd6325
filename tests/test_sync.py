"""Tests for the Sync Service."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from pictocat.errors import NotFound
from pictocat.services.sync_service import SyncService, has_changed
from tests.conftest import make_user

SERVER_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)


class TestHasChanged:
    def test_client_two_seconds_behind(self):
        assert has_changed(SERVER_TIME, SERVER_TIME - timedelta(seconds=2))

    def test_client_ahead(self):
        assert not has_changed(SERVER_TIME, SERVER_TIME + timedelta(seconds=2))

    def test_within_buffer_is_unchanged(self):
        assert not has_changed(SERVER_TIME, SERVER_TIME - timedelta(milliseconds=500))
        assert not has_changed(SERVER_TIME, SERVER_TIME - timedelta(milliseconds=1000))

    def test_no_client_copy(self):
        assert has_changed(SERVER_TIME, None)

    def test_naive_datetimes_treated_as_utc(self):
        assert has_changed(SERVER_TIME, datetime(2024, 12, 31, 23, 59, 0))


class TestSyncService:
    @pytest.fixture
    def service(self):
        return SyncService()

    @pytest.mark.asyncio
    async def test_returns_profile_when_stale(self, service, db):
        db.users.find_one.return_value = make_user(coins=750)

        with patch('pictocat.services.sync_service.get_db', return_value=db):
            profile = await service.reconcile("user_1", SERVER_TIME - timedelta(seconds=2))

        assert profile is not None
        assert profile.data.coins == 750
        assert profile.last_modified == SERVER_TIME

    @pytest.mark.asyncio
    async def test_returns_none_when_current(self, service, db):
        db.users.find_one.return_value = make_user()

        with patch('pictocat.services.sync_service.get_db', return_value=db):
            assert await service.reconcile("user_1", SERVER_TIME + timedelta(seconds=2)) is None

    @pytest.mark.asyncio
    async def test_missing_user(self, service, db):
        with patch('pictocat.services.sync_service.get_db', return_value=db):
            with pytest.raises(NotFound):
                await service.reconcile("ghost", None)
