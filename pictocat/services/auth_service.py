"""
Authentication Service

Firebase Admin SDK integration for ID token verification and role lookup.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth, credentials, exceptions as firebase_exceptions
from starlette.concurrency import run_in_threadpool

from pictocat.config import settings
from pictocat.errors import Unauthorized
from pictocat.models.user import UserRole

logger = logging.getLogger(__name__)


# =============================================================================
# Firebase Initialization
# =============================================================================

def init_firebase() -> bool:
    """Initialize the Admin SDK once. Returns False when no credentials are usable."""
    if firebase_admin._apps:
        return True

    try:
        creds = settings.firebase_credentials
        options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
        if creds:
            firebase_admin.initialize_app(credentials.Certificate(creds), options)
        else:
            # Token verification only needs the project id
            firebase_admin.initialize_app(options=options)
        logger.info("Firebase Admin SDK initialized")
        return True
    except (ValueError, OSError) as e:
        logger.warning(f"Firebase Admin SDK initialization failed: {e}")
        return False


def check_firebase_health() -> bool:
    return bool(firebase_admin._apps)


# =============================================================================
# Identity
# =============================================================================

@dataclass
class AuthenticatedUser:
    """Verified caller identity."""
    uid: str
    email: Optional[str] = None
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def role_from_claims(claims: dict) -> UserRole:
    """Admin beats mod; the configured admin email always resolves to admin."""
    roles = claims.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    email = (claims.get("email") or "").lower()

    if "admin" in roles or (settings.admin_email and email == settings.admin_email.lower()):
        return UserRole.ADMIN
    if "mod" in roles:
        return UserRole.MOD
    return UserRole.USER


class AuthService:
    """Bearer token verification."""

    async def verify_token(self, id_token: str) -> AuthenticatedUser:
        """Verify a Firebase ID token. Raises Unauthorized on any failure."""
        if not id_token:
            raise Unauthorized("Missing token")

        try:
            claims = await run_in_threadpool(firebase_auth.verify_id_token, id_token)
        except (firebase_auth.InvalidIdTokenError, firebase_auth.ExpiredIdTokenError,
                firebase_auth.RevokedIdTokenError) as e:
            logger.warning(f"Firebase token verification failed: {e}")
            raise Unauthorized("Invalid or expired token")
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            logger.error(f"Token verification error: {e}")
            raise Unauthorized("Token verification failed")

        uid = claims.get("uid") or claims.get("sub")
        if not uid:
            raise Unauthorized("Token has no subject")

        return AuthenticatedUser(
            uid=uid,
            email=claims.get("email"),
            role=role_from_claims(claims),
        )
