"""
Authentication Dependencies

FastAPI dependencies for authentication and authorization.
"""

from typing import Optional

from fastapi import Depends, Header

from pictocat.errors import Forbidden, Unauthorized
from pictocat.services.auth_service import AuthenticatedUser, AuthService

auth_service = AuthService()


async def get_current_user(
    authorization: Optional[str] = Header(None)
) -> AuthenticatedUser:
    """
    Resolve the caller from an `Authorization: Bearer <firebase_id_token>` header.
    """
    if not authorization:
        raise Unauthorized("Authorization header required")

    if not authorization.startswith("Bearer "):
        raise Unauthorized("Invalid authorization format. Use: Bearer <token>")

    return await auth_service.verify_token(authorization[7:])


async def require_admin(
    current_user: AuthenticatedUser = Depends(get_current_user)
) -> AuthenticatedUser:
    """Only admins pass."""
    if not current_user.is_admin:
        raise Forbidden("Admins only")
    return current_user
