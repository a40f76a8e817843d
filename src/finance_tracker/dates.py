"""Date utilities for the finance tracker.

Pure functions for calendar-date normalization and month/day ranges.

Transactions carry a calendar date with no time-of-day meaning. Every
date-scoped query goes through ``to_calendar_date`` so that ISO strings
with a time component never shift across a day boundary: the leading
``YYYY-MM-DD`` is taken as written and no timezone conversion happens.
"""

from calendar import monthrange
from datetime import date, datetime
from typing import Any, Optional, Tuple


def to_calendar_date(value: Any) -> Optional[date]:
    """Normalize a raw transaction date to a calendar date.

    Args:
        value: A ``date``, a ``datetime`` or an ISO-8601 string such as
            ``"2024-03-05"`` or ``"2024-03-05T23:30:00-05:00"``.

    Returns:
        The calendar date, or None when the value cannot be understood.
    """
    if isinstance(value, datetime):
        # Wall-clock date as recorded
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    for separator in ("T", " "):
        text = text.split(separator, 1)[0]

    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def validate_month(year: int, month: int) -> None:
    """Raise ValueError unless ``month`` is 1-12 and ``year`` is a valid year."""
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
        raise ValueError(f"Invalid year: {year!r}")
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month!r} (expected 1-12)")


def validate_day(year: int, month: int, day: int) -> None:
    """Raise ValueError unless ``day`` exists in the given month."""
    validate_month(year, month)
    _, last_day = monthrange(year, month)
    if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= last_day:
        raise ValueError(f"Invalid day: {day!r} (expected 1-{last_day})")


def month_label(year: int, month: int) -> str:
    """Human-readable month (e.g., "March 2024")."""
    validate_month(year, month)
    return date(year, month, 1).strftime("%B %Y")


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move ``delta`` months forward (or back) from ``year``/``month``."""
    validate_month(year, month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
