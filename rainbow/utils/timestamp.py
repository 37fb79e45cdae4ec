"""UTC timestamp helpers.

Every datetime persisted or compared by the correlator is naive UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive input is assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_unix(seconds: int | float | None) -> datetime | None:
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)


def to_unix(value: datetime) -> int:
    return int((to_naive_utc(value) - EPOCH).total_seconds())


__all__ = ["EPOCH", "utcnow", "to_naive_utc", "from_unix", "to_unix"]
