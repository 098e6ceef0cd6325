"""Tests for token verification and role resolution."""

from unittest.mock import patch

import pytest
from firebase_admin import auth as firebase_auth

from pictocat.config import settings
from pictocat.errors import Unauthorized
from pictocat.models.user import UserRole
from pictocat.services.auth_service import AuthService, role_from_claims


class TestRoleFromClaims:
    def test_plain_user(self):
        assert role_from_claims({"uid": "u1"}) == UserRole.USER

    def test_role_claims(self):
        assert role_from_claims({"roles": ["mod"]}) == UserRole.MOD
        assert role_from_claims({"roles": ["mod", "admin"]}) == UserRole.ADMIN
        assert role_from_claims({"roles": "admin"}) == UserRole.ADMIN

    def test_admin_email(self):
        with patch.object(settings, "admin_email", "Boss@PictoCat.app"):
            assert role_from_claims({"email": "boss@pictocat.app"}) == UserRole.ADMIN
            assert role_from_claims({"email": "kitten@pictocat.app"}) == UserRole.USER


class TestVerifyToken:
    @pytest.fixture
    def service(self):
        return AuthService()

    @pytest.mark.asyncio
    async def test_valid_token(self, service):
        claims = {"uid": "u1", "email": "jane@example.com", "roles": ["mod"]}

        with patch.object(firebase_auth, "verify_id_token", return_value=claims) as verify:
            user = await service.verify_token("token")

        verify.assert_called_once_with("token")
        assert user.uid == "u1"
        assert user.email == "jane@example.com"
        assert user.role == UserRole.MOD
        assert not user.is_admin

    @pytest.mark.asyncio
    async def test_sub_claim_used_as_uid(self, service):
        with patch.object(firebase_auth, "verify_id_token", return_value={"sub": "u2"}):
            assert (await service.verify_token("token")).uid == "u2"

    @pytest.mark.asyncio
    async def test_invalid_token(self, service):
        error = firebase_auth.InvalidIdTokenError("bad signature")

        with patch.object(firebase_auth, "verify_id_token", side_effect=error):
            with pytest.raises(Unauthorized):
                await service.verify_token("token")

    @pytest.mark.asyncio
    async def test_sdk_not_initialized(self, service):
        with patch.object(firebase_auth, "verify_id_token", side_effect=ValueError("no app")):
            with pytest.raises(Unauthorized):
                await service.verify_token("token")

    @pytest.mark.asyncio
    async def test_empty_token(self, service):
        with pytest.raises(Unauthorized):
            await service.verify_token("")
