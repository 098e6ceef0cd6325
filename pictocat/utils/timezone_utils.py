"""Centralized Timezone Utilities - All datetime operations should use these functions."""

from datetime import datetime, timezone
from typing import Optional

UTC = timezone.utc


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes coming back from MongoDB."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_ms(dt: datetime) -> int:
    """Epoch milliseconds for a datetime."""
    return int(ensure_utc(dt).timestamp() * 1000)


def now_ms() -> int:
    return to_ms(utc_now())
