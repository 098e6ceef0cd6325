"""
PictoCat Errors

Domain error taxonomy. Every rejected action carries a short reason that
the client shows as a transient notification.
"""

from typing import Optional


class PictoCatError(Exception):
    """Base class for expected, recoverable business-rule failures."""

    status_code: int = 400
    default_message: str = "Request rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return type(self).__name__


class Unauthorized(PictoCatError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(PictoCatError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(PictoCatError):
    status_code = 404
    default_message = "Not found"


class Conflict(PictoCatError):
    status_code = 409
    default_message = "Conflict"


class AlreadyOwned(Conflict):
    default_message = "Upgrade already purchased"


class AllItemsOwned(Conflict):
    default_message = "You already own every cat"


class AlreadyClaimed(PictoCatError):
    status_code = 403
    default_message = "Daily pass already claimed"


class InsufficientFunds(PictoCatError):
    default_message = "Not enough coins"


class LevelTooLow(PictoCatError):
    default_message = "Level too low"


class ValidationError(PictoCatError):
    default_message = "Invalid data"


class InvalidTarget(ValidationError):
    default_message = "Invalid target user"
