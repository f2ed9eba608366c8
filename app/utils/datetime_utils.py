"""
Timezone-aware datetime utilities.

This module provides utilities for working with timezone-aware datetimes,
ensuring consistent handling across the application.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

# UTC timezone constant
UTC = timezone.utc


def now_utc() -> datetime:
    """
    Get current UTC datetime (timezone-aware).

    Replaces datetime.utcnow() which is deprecated in Python 3.12+.

    Returns:
        datetime: Current UTC time with tzinfo set to UTC
    """
    return datetime.now(UTC)


def get_user_today(user_timezone: str, now: Optional[datetime] = None) -> date:
    """
    Get today's date in the user's timezone.

    Args:
        user_timezone: IANA timezone name (e.g., "Asia/Jakarta", "America/New_York")
        now: Reference instant (defaults to the current time)

    Returns:
        date: Today's date in the user's timezone

    Example:
        >>> get_user_today("Asia/Jakarta")  # When UTC is 2024-01-19 20:00
        date(2024, 1, 20)  # WIB is 2024-01-20 03:00
    """
    tz = ZoneInfo(user_timezone)
    reference = ensure_utc(now) if now is not None else now_utc()
    return reference.astimezone(tz).date()


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware and in UTC.

    Args:
        dt: datetime to convert (can be None, naive, or timezone-aware)

    Returns:
        Optional[datetime]: UTC timezone-aware datetime, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=UTC)

    # Already timezone-aware - convert to UTC
    return dt.astimezone(UTC)


def local_date(dt: datetime, user_timezone: str) -> date:
    """Calendar date of an instant in the user's timezone."""
    return ensure_utc(dt).astimezone(ZoneInfo(user_timezone)).date()


def day_bounds(day: date, user_timezone: str) -> tuple[datetime, datetime]:
    """
    Get the UTC instants bounding a local calendar day.

    The day runs from local midnight to the next local midnight, so DST
    transition days come out 23 or 25 hours long.

    Args:
        day: Local calendar date
        user_timezone: IANA timezone name

    Returns:
        tuple[datetime, datetime]: (day_start, day_end) in UTC
    """
    tz = ZoneInfo(user_timezone)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)
