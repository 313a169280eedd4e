# -*- coding: utf-8 -*-
"""
DateTime Utilities.

All timestamps handled by the core are timezone-aware and normalised to UTC.
Naive values are assumed to already be in UTC.
"""

from datetime import date, datetime, timezone
from typing import Optional, Union

DateLike = Union[datetime, date, str, None]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_isoformat(value: DateLike) -> Optional[datetime]:
    """
    Convert an ISO string, date or datetime to an aware UTC datetime.

    Accepts the trailing ``Z`` produced by JavaScript clients, date-only
    strings and space-separated date/time strings.

    Args:
        value: ISO string, datetime, date, or None

    Returns:
        datetime in UTC, or None when the value is missing or unparseable

    Examples:
        >>> from_isoformat('2024-01-15T10:30:00Z')
        datetime.datetime(2024, 1, 15, 10, 30, tzinfo=datetime.timezone.utc)
        >>> from_isoformat('not a date') is None
        True
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time(), tzinfo=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            if "T" in text or " " in text:
                return ensure_utc(datetime.fromisoformat(text))
            parsed_date = date.fromisoformat(text)
            return datetime.combine(parsed_date, datetime.min.time(), tzinfo=timezone.utc)
        except ValueError:
            return None

    return None


def to_isoformat(value: DateLike) -> Optional[str]:
    """
    Serialise a datetime-like value as a UTC ISO string.

    Returns None for missing or unparseable values.
    """
    parsed = from_isoformat(value)
    if parsed is None:
        return None
    return parsed.isoformat()


def to_sortable_isoformat(value: DateLike) -> Optional[str]:
    """
    Fixed-width UTC ISO string.

    Used where timestamps are stored as text and compared lexically
    (SQLite), so every value carries microseconds and the same offset.
    """
    parsed = from_isoformat(value)
    if parsed is None:
        return None
    return parsed.isoformat(timespec="microseconds")


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional number of days from ``earlier`` to ``later``."""
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 86400.0
