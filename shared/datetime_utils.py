"""
Date/time helpers: everything is timezone-aware UTC.

MongoDB hands back naive datetimes unless the client is created with
``tz_aware=True``; ``ensure_utc`` covers both cases so expiry comparisons
never mix naive and aware values.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as aware UTC. Naive datetimes are assumed to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def expires_in(seconds: int, now: Optional[datetime] = None) -> datetime:
    """Return the instant *seconds* after *now* (defaults to the current time)."""
    return (now or utcnow()) + timedelta(seconds=seconds)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True when *now* is strictly after *expires_at*.

    A missing expiry counts as expired.
    """
    if expires_at is None:
        return True
    return (now or utcnow()) > ensure_utc(expires_at)
