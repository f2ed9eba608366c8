"""
Interval merging utilities.
"""

from typing import Iterable

from app.models.scheduling import Interval


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    """
    Collapse intervals into a sorted list of disjoint intervals.

    Touching intervals are merged too, so no zero-width gap is ever reported
    between back-to-back blocks.

    Args:
        intervals: Intervals in any order, possibly overlapping

    Returns:
        list[Interval]: Sorted by start, pairwise disjoint and non-touching
    """
    ordered = sorted(intervals, key=lambda entry: (entry.start, entry.end))
    merged: list[Interval] = []
    for interval in ordered:
        if merged and interval.start <= merged[-1].end:
            if interval.end > merged[-1].end:
                merged[-1] = Interval(start=merged[-1].start, end=interval.end)
        else:
            merged.append(interval)
    return merged
