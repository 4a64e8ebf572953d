"""Timestamp helpers. Everything inside the engine is timezone-aware UTC."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_iso(value: datetime) -> str:
    """
    Serialize for the persistence boundary.

    Fixed microsecond precision keeps the strings lexicographically ordered,
    so due-date comparisons can run on the stored text.
    """
    return ensure_utc(value).isoformat(timespec="microseconds")


def from_iso(value: str) -> datetime:
    """Parse an ISO-8601 timestamp written by to_iso (or any ISO-8601 string)."""
    return ensure_utc(datetime.fromisoformat(value))
