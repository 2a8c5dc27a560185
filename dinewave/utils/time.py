"""UTC helpers shared by services that compare stored timestamps."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Return value as aware UTC.

    SQLite drops tzinfo on ``DateTime(timezone=True)`` columns, and every
    timestamp is written in UTC, so naive values read back are UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
