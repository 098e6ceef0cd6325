"""
API tests

Routing, auth dependencies and error rendering through the FastAPI app,
with services patched out.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from pictocat import dependencies
from pictocat.dependencies import get_current_user
from pictocat.errors import InsufficientFunds, Unauthorized
from pictocat.main import app
from pictocat.models.user import UserProfile, UserRole
from pictocat.routers import admin, shop, suggestions, users
from pictocat.services.auth_service import AuthenticatedUser
from tests.conftest import make_user


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def signed_in():
    app.dependency_overrides[get_current_user] = lambda: AuthenticatedUser(uid="user_1")
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in_admin():
    app.dependency_overrides[get_current_user] = lambda: AuthenticatedUser(uid="root", role=UserRole.ADMIN)
    yield
    app.dependency_overrides.clear()


class TestPublic:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Request-ID" in response.headers

    def test_achievement_catalog_needs_auth(self, client):
        response = client.get("/api/achievements")
        assert response.status_code == 401


class TestAuth:
    def test_missing_header(self, client):
        response = client.get("/api/user/me")
        assert response.status_code == 401
        assert response.json() == {"message": "Authorization header required", "error": "Unauthorized"}

    def test_wrong_scheme(self, client):
        response = client.get("/api/user/me", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_bearer_token_verified(self, client):
        verify = AsyncMock(return_value=AuthenticatedUser(uid="user_1"))
        profile = UserProfile.from_doc(make_user())

        with patch.object(dependencies.auth_service, "verify_token", verify), \
                patch.object(users.user_service, "get_or_create", AsyncMock(return_value=profile)):
            response = client.get("/api/user/me", headers={"Authorization": "Bearer good-token"})

        verify.assert_called_once_with("good-token")
        assert response.status_code == 200
        assert response.json()["data"]["coins"] == 500

    def test_rejected_token(self, client):
        verify = AsyncMock(side_effect=Unauthorized("Invalid or expired token"))

        with patch.object(dependencies.auth_service, "verify_token", verify):
            response = client.get("/api/user/me", headers={"Authorization": "Bearer expired"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid or expired token"

    def test_admin_routes_need_admin(self, client, signed_in):
        response = client.get("/api/admin/users")
        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden"


class TestSync:
    def test_not_modified(self, client, signed_in):
        with patch.object(users.sync_service, "reconcile", AsyncMock(return_value=None)):
            response = client.get("/api/user/me/sync", params={"since": "2025-01-01T00:00:00Z"})

        assert response.status_code == 304

    def test_changed_profile_is_camel_case(self, client, signed_in):
        profile = UserProfile.from_doc(make_user(coins=42))
        reconcile = AsyncMock(return_value=profile)

        with patch.object(users.sync_service, "reconcile", reconcile):
            response = client.get("/api/user/me/sync", params={"since": "2024-12-31T00:00:00Z"})

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["coins"] == 42
        assert "lastModified" in body
        assert "unlockedImageIds" in body["data"]
        since = reconcile.call_args[0][1]
        assert since == datetime(2024, 12, 31, tzinfo=timezone.utc)

    def test_since_required(self, client, signed_in):
        assert client.get("/api/user/me/sync").status_code == 422


class TestErrorRendering:
    def test_business_error(self, client, signed_in):
        purchase = AsyncMock(side_effect=InsufficientFunds())

        with patch.object(shop.shop_service, "purchase_envelope", purchase):
            response = client.post("/api/shop/envelopes/purchase", json={"envelopeId": "gold"})

        purchase.assert_called_once_with("user_1", "gold")
        assert response.status_code == 400
        assert response.json() == {"message": "Not enough coins", "error": "InsufficientFunds"}

    def test_unhandled_error_is_generic(self, signed_in):
        client = TestClient(app, raise_server_exceptions=False)

        with patch.object(shop.shop_service, "get_shop_data", AsyncMock(side_effect=RuntimeError("boom"))):
            response = client.get("/api/shop")

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error", "error": "InternalError"}


class TestRoutes:
    def test_suggestions(self, client, signed_in):
        generate = AsyncMock(return_value=["Let's go swimming"])

        with patch.object(suggestions.suggestion_service, "generate", generate):
            response = client.post("/api/suggestions", json={"topic": "the beach"})

        assert response.json() == {"suggestions": ["Let's go swimming"]}

    def test_admin_set_verified(self, client, signed_in_admin):
        set_verified = AsyncMock(return_value=None)

        with patch.object(admin.user_service, "set_verified", set_verified):
            response = client.put("/api/admin/users/user_7/verified", json={"isVerified": True})

        assert response.status_code == 200
        set_verified.assert_called_once_with("user_7", True)
