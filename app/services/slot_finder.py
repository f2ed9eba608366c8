"""
Free slot search over a day's busy intervals.

find_slots scans a single day between explicit boundaries; search_slots
drives it across consecutive days until enough suggestions are collected.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Sequence

from app.core.exceptions import InvalidDuration
from app.models.scheduling import Commitment, DayWindow, Interval
from app.utils.datetime_utils import ensure_utc
from app.utils.intervals import merge_intervals

DEFAULT_HORIZON_DAYS = 5
DEFAULT_MAX_RESULTS = 3


def _require_positive(duration: timedelta) -> None:
    if duration <= timedelta(0):
        raise InvalidDuration(
            f"Slot duration must be positive, got {duration}",
            details={"seconds": duration.total_seconds()},
        )


def _busy_intervals(
    day_start: datetime,
    day_end: datetime,
    now_floor: datetime,
    existing: Iterable[Commitment],
) -> list[Interval]:
    busy: list[Interval] = []
    # Elapsed part of the day is unusable
    if now_floor > day_start:
        busy.append(Interval(start=day_start, end=now_floor))
    for commitment in existing:
        if commitment.completed:
            continue
        if commitment.end <= day_start or commitment.start >= day_end:
            continue
        busy.append(commitment.interval)
    return merge_intervals(busy)


def find_slots(
    duration: timedelta,
    day_start: datetime,
    day_end: datetime,
    now_floor: datetime,
    existing: Iterable[Commitment],
) -> list[Interval]:
    """
    Find every gap in a day that can host the requested duration.

    Args:
        duration: Required slot length (must be positive)
        day_start: Start of the day window
        day_end: End of the day window
        now_floor: Earliest usable instant (the current time for today)
        existing: Commitments to avoid; completed ones are ignored

    Returns:
        list[Interval]: One slot per large-enough gap, placed at the gap's
        start and exactly `duration` long, in chronological order

    Raises:
        InvalidDuration: If duration is zero or negative
    """
    _require_positive(duration)
    day_start = ensure_utc(day_start)
    day_end = ensure_utc(day_end)
    now_floor = ensure_utc(now_floor)

    slots: list[Interval] = []
    gap_start = day_start
    for busy in _busy_intervals(day_start, day_end, now_floor, existing):
        gap_end = min(busy.start, day_end)
        if gap_end - gap_start >= duration:
            slots.append(Interval(start=gap_start, end=gap_start + duration))
        gap_start = max(gap_start, busy.end)

    if day_end - gap_start >= duration:
        slots.append(Interval(start=gap_start, end=gap_start + duration))
    return slots


def search_slots(
    duration: timedelta,
    start_day: date,
    now: datetime,
    day_window: Callable[[date], DayWindow],
    commitments_for_day: Callable[[date], Sequence[Commitment]],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[Interval]:
    """
    Collect free slots across consecutive days starting at start_day.

    Every day is floored at `now`: days wholly in the future are searched
    from their own start and no slot ever starts in the past. Stops as soon
    as max_results slots are found. Fewer results, including none, are a
    normal outcome.

    Args:
        duration: Required slot length (must be positive)
        start_day: First calendar day to search (normally today)
        now: Current instant
        day_window: Boundary provider for a calendar day
        commitments_for_day: Commitments provider for a calendar day
        horizon_days: Number of days to search
        max_results: Maximum number of slots to return

    Returns:
        list[Interval]: Slots in chronological order

    Raises:
        InvalidDuration: If duration is zero or negative
    """
    _require_positive(duration)
    now = ensure_utc(now)

    results: list[Interval] = []
    for offset in range(horizon_days):
        if len(results) >= max_results:
            break
        day = start_day + timedelta(days=offset)
        window = day_window(day)
        now_floor = max(now, window.start)
        results.extend(
            find_slots(duration, window.start, window.end, now_floor, commitments_for_day(day))
        )
    return results[:max_results]
