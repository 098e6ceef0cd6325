"""Sync Service - Conditional-GET style profile reconciliation."""

import logging
from datetime import datetime, timedelta
from typing import Optional

from pictocat.constants import SYNC_BUFFER_MS
from pictocat.database import get_db
from pictocat.errors import NotFound
from pictocat.models.user import UserProfile
from pictocat.utils.timezone_utils import ensure_utc

logger = logging.getLogger(__name__)

SYNC_BUFFER = timedelta(milliseconds=SYNC_BUFFER_MS)


def has_changed(server_last_modified: Optional[datetime], since: Optional[datetime]) -> bool:
    """True when the stored profile is newer than the client's copy by more than the buffer."""
    if since is None:
        return True
    if server_last_modified is None:
        return False
    return ensure_utc(server_last_modified) > ensure_utc(since) + SYNC_BUFFER


class SyncService:
    """Whole-profile pull sync. The client overwrites local state on a change."""

    async def reconcile(self, user_id: str, since: Optional[datetime]) -> Optional[UserProfile]:
        """Return the full profile when changed, None when the client is current."""
        db = get_db()
        user = await db.users.find_one({"_id": user_id})
        if not user:
            raise NotFound("User not found")

        if not has_changed(user.get("lastModified"), since):
            return None

        logger.debug(f"Sync for {user_id}: server copy newer than {since}")
        return UserProfile.from_doc(user)
