"""
ISO-8601 timestamp helpers.

Dates are persisted as UTC ISO strings with fixed microsecond precision,
so string order in the database matches chronological order.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Normalize a datetime to the stored representation."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def utcnow_iso() -> str:
    return to_iso(utcnow())


def parse_iso(value: str) -> datetime:
    """Parse a stored timestamp. Raises ValueError on malformed input."""
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_iso_or_now(value: Optional[str]) -> datetime:
    """Parse a stored timestamp, falling back to the current time."""
    try:
        return parse_iso(value)
    except ValueError:
        return utcnow()


def parse_iso_or_none(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp, or None when it is malformed."""
    try:
        return parse_iso(value)
    except ValueError:
        return None
