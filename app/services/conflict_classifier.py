"""
Conflict classification for proposed commitments.

Overlap takes precedence over overdue: a proposal that has already elapsed
and also collides with pending work is reported as an overlap.
"""

from datetime import datetime, timedelta
from typing import Iterable

from app.models.scheduling import Commitment, ConflictResult, Interval
from app.utils.datetime_utils import ensure_utc

DEFAULT_GRACE_PERIOD = timedelta(seconds=60)


def find_overlapping(proposed: Interval, existing: Iterable[Commitment]) -> list[Commitment]:
    """
    Pending commitments that strictly overlap the proposal.

    Returns:
        list[Commitment]: Ordered by start, then id
    """
    colliding = [
        commitment
        for commitment in existing
        if not commitment.completed and proposed.overlaps(commitment.interval)
    ]
    colliding.sort(key=lambda commitment: (commitment.start, commitment.id))
    return colliding


def classify_conflict(
    proposed: Interval,
    existing: Iterable[Commitment],
    now: datetime,
    grace_period: timedelta = DEFAULT_GRACE_PERIOD,
) -> ConflictResult:
    """
    Classify a proposal against existing commitments.

    Args:
        proposed: Proposed interval
        existing: Commitments of the proposal's day (completed ones are ignored)
        now: Current instant
        grace_period: Slack before an elapsed proposal counts as overdue

    Returns:
        ConflictResult: Exactly one of no-conflict, overlap or overdue
    """
    colliding = find_overlapping(proposed, existing)
    if colliding:
        return ConflictResult.overlap(colliding[0].id)
    if proposed.end < ensure_utc(now) - grace_period:
        return ConflictResult.overdue()
    return ConflictResult.no_conflict()
