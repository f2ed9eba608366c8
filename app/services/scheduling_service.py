"""
Scheduling service wrapping the interval engine for user flows.

Handles day bucketing in the user's timezone, proposal normalization,
conflict review with slot suggestions, and "+N minutes" extensions.
Callers must serialize read-classify-write per owner: two proposals
reviewed concurrently against the same snapshot can both pass.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from app.core.config import get_settings
from app.core.exceptions import InvalidDuration
from app.core.logger import setup_logger
from app.models.enums import ShiftMode
from app.models.scheduling import (
    Commitment,
    ConflictResult,
    DayWindow,
    Interval,
    ProposalReview,
    ShiftResult,
)
from app.services.conflict_classifier import classify_conflict
from app.services.shift_service import apply_shift
from app.services.slot_finder import find_slots, search_slots
from app.utils.datetime_utils import day_bounds, ensure_utc, get_user_today, local_date

logger = setup_logger(__name__)


class SchedulingService:
    """
    Service for conflict-aware task placement.

    Provides:
    - Day windows and commitment bucketing per local day
    - Proposal review (conflict classification + alternative slots)
    - Cascading extension of a running or overdue task
    """

    def __init__(
        self,
        horizon_days: Optional[int] = None,
        max_suggestions: Optional[int] = None,
        grace_seconds: Optional[int] = None,
        min_proposal_seconds: Optional[int] = None,
        default_proposal_minutes: Optional[int] = None,
        default_timezone: Optional[str] = None,
    ):
        """
        Initialize scheduling service.

        Unset arguments fall back to application settings.
        """
        settings = get_settings()
        self.horizon_days = horizon_days if horizon_days is not None else settings.SLOT_SEARCH_HORIZON_DAYS
        self.max_suggestions = (
            max_suggestions if max_suggestions is not None else settings.MAX_SLOT_SUGGESTIONS
        )
        self.grace_period = timedelta(
            seconds=grace_seconds if grace_seconds is not None else settings.OVERDUE_GRACE_SECONDS
        )
        self.min_proposal_duration = timedelta(
            seconds=min_proposal_seconds
            if min_proposal_seconds is not None
            else settings.MIN_PROPOSAL_SECONDS
        )
        self.default_proposal_duration = timedelta(
            minutes=default_proposal_minutes
            if default_proposal_minutes is not None
            else settings.DEFAULT_PROPOSAL_MINUTES
        )
        self.default_timezone = default_timezone or settings.DEFAULT_TIMEZONE

    def _tz(self, user_timezone: Optional[str]) -> str:
        return user_timezone or self.default_timezone

    def day_window(self, day: date, user_timezone: Optional[str] = None) -> DayWindow:
        start, end = day_bounds(day, self._tz(user_timezone))
        return DayWindow(day=day, start=start, end=end)

    def group_by_day(
        self,
        commitments: Iterable[Commitment],
        user_timezone: Optional[str] = None,
    ) -> dict[date, list[Commitment]]:
        """Bucket commitments by the local date of their start."""
        tz = self._tz(user_timezone)
        buckets: dict[date, list[Commitment]] = defaultdict(list)
        for commitment in commitments:
            buckets[local_date(commitment.start, tz)].append(commitment)
        return buckets

    def normalize_proposal(self, start: datetime, end: datetime) -> Interval:
        """
        Build the interval for a proposal coming from the task extractor.

        Proposals shorter than the minimum (or inverted) get the default
        duration from their start.
        """
        start = ensure_utc(start)
        end = ensure_utc(end)
        if end - start < self.min_proposal_duration:
            end = start + self.default_proposal_duration
        return Interval(start=start, end=end)

    def classify(
        self,
        proposed: Interval,
        commitments: Iterable[Commitment],
        now: datetime,
        user_timezone: Optional[str] = None,
    ) -> ConflictResult:
        """Classify a proposal against the commitments of its start day."""
        tz = self._tz(user_timezone)
        same_day = self.group_by_day(commitments, tz).get(local_date(proposed.start, tz), [])
        return classify_conflict(proposed, same_day, now, self.grace_period)

    def find_day_slots(
        self,
        duration: timedelta,
        day: date,
        commitments: Iterable[Commitment],
        now: datetime,
        user_timezone: Optional[str] = None,
    ) -> list[Interval]:
        """Free slots on a single local day, floored at now."""
        tz = self._tz(user_timezone)
        window = self.day_window(day, tz)
        same_day = self.group_by_day(commitments, tz).get(day, [])
        return find_slots(duration, window.start, window.end, now, same_day)

    def suggest_slots(
        self,
        duration: timedelta,
        commitments: Iterable[Commitment],
        now: datetime,
        start_day: Optional[date] = None,
        user_timezone: Optional[str] = None,
    ) -> list[Interval]:
        """Alternative slots over the search horizon, starting today by default."""
        tz = self._tz(user_timezone)
        buckets = self.group_by_day(commitments, tz)
        first_day = start_day or get_user_today(tz, now)
        return search_slots(
            duration,
            first_day,
            now,
            day_window=lambda day: self.day_window(day, tz),
            commitments_for_day=lambda day: buckets.get(day, []),
            horizon_days=self.horizon_days,
            max_results=self.max_suggestions,
        )

    def review_proposal(
        self,
        start: datetime,
        end: datetime,
        commitments: list[Commitment],
        now: datetime,
        user_timezone: Optional[str] = None,
    ) -> ProposalReview:
        """
        Check a proposed task and suggest alternatives if it conflicts.

        Args:
            start: Proposed start
            end: Proposed end
            commitments: The owner's commitments (snapshot)
            now: Current instant
            user_timezone: IANA zone for day bucketing

        Returns:
            ProposalReview: Verdict, the colliding commitment for overlaps,
            and up to max_suggestions slots when there is a conflict
        """
        proposed = self.normalize_proposal(start, end)
        result = self.classify(proposed, commitments, now, user_timezone)

        if not result.is_conflict:
            logger.info(f"Proposal {proposed.start.isoformat()} accepted without conflict")
            return ProposalReview(proposed=proposed, result=result)

        conflicting = None
        if result.commitment_id is not None:
            conflicting = next(
                (commitment for commitment in commitments if commitment.id == result.commitment_id),
                None,
            )

        suggestions = self.suggest_slots(proposed.duration, commitments, now, user_timezone=user_timezone)
        logger.info(
            f"Proposal {proposed.start.isoformat()} conflicts ({result.kind.value}); "
            f"{len(suggestions)}/{self.max_suggestions} slots suggested"
        )
        return ProposalReview(
            proposed=proposed,
            result=result,
            conflicting=conflicting,
            suggestions=suggestions,
        )

    def extend_commitment(
        self,
        anchor: Commitment,
        minutes: int,
        commitments: Iterable[Commitment],
        now: datetime,
        mode: ShiftMode = ShiftMode.RESUME_NOW,
    ) -> ShiftResult:
        """
        Add time to a commitment and cascade the delay downstream.

        RESUME_NOW restarts the anchor at `now` for `minutes`; KEEP_START
        pushes its end out by `minutes`. When a resumed anchor ends no later
        than before, only the anchor moves.

        Raises:
            InvalidDuration: If minutes is not positive
        """
        if minutes <= 0:
            raise InvalidDuration(
                f"Extension must be a positive number of minutes, got {minutes}",
                details={"commitment_id": anchor.id},
            )
        now = ensure_utc(now)
        added = timedelta(minutes=minutes)
        downstream = [
            commitment
            for commitment in commitments
            if commitment.id != anchor.id and not commitment.completed
        ]

        if mode == ShiftMode.RESUME_NOW:
            new_end = now + added
            if new_end <= anchor.end:
                logger.info(f"Commitment {anchor.id} resumed inside its slot; no cascade")
                return ShiftResult(
                    anchor=anchor.model_copy(update={"start": now, "end": new_end}),
                    downstream=downstream,
                )
        else:
            new_end = anchor.end + added

        result = apply_shift(anchor, new_end, downstream, mode=mode, now=now)
        moved = sum(
            1 for before, after in zip(downstream, result.downstream) if before.start != after.start
        )
        logger.info(
            f"Commitment {anchor.id} extended to {new_end.isoformat()}; "
            f"{moved} downstream commitment(s) shifted by {new_end - anchor.end}"
        )
        return result
