"""Date helpers for deadline windows.

Deadlines keep the date string they were given ("2025-03-01",
"2025-03-01T17:00:00Z", "Friday", ...). Only ISO-8601 values can be placed
on the timeline; anything else is kept for display but never matches an
upcoming or overdue window.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

SECONDS_PER_DAY = 24 * 60 * 60

# Widest look-ahead window accepted from callers (about ten years)
MAX_DAYS_AHEAD = 3650


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_due_date(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse a deadline value into an aware UTC datetime.

    Date-only values resolve to midnight UTC of that day. Naive datetimes
    are taken to be UTC.

    Returns:
        The parsed datetime, or None if the value is empty or not ISO-8601
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, floored (negative when end is earlier)."""
    return int((end - start).total_seconds() // SECONDS_PER_DAY)


def add_days(moment: datetime, days: float) -> datetime:
    """Shift a datetime by a (possibly fractional) number of days."""
    return moment + timedelta(days=days)
