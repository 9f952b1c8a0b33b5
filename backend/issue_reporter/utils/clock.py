"""Timezone helpers shared by the stores and schemas."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def advance(previous: Optional[datetime], now: Optional[datetime] = None) -> datetime:
    """
    Return a timestamp strictly later than ``previous``.

    Uses the current time unless the clock has not moved past ``previous``,
    in which case ``previous`` is bumped by one microsecond.
    """
    now = now or utcnow()
    if previous is None:
        return now
    floor = as_utc(previous) + timedelta(microseconds=1)
    return now if now >= floor else floor
