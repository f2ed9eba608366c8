"""
Cascading shift of commitments after an anchor is delayed.

Every commitment starting at or after the anchor's original end moves by
the same delta, so their durations, order and mutual non-overlap are kept.
Commitments outside the downstream list are not checked; the caller must
make sure nothing unrelated sits inside the widened window.
"""

from datetime import datetime
from typing import Iterable, Optional

from app.core.exceptions import InvalidShift
from app.models.enums import ShiftMode
from app.models.scheduling import Commitment, Interval, ShiftResult
from app.utils.datetime_utils import ensure_utc


def apply_shift(
    anchor: Commitment,
    new_end: datetime,
    downstream: Iterable[Commitment],
    mode: ShiftMode = ShiftMode.KEEP_START,
    now: Optional[datetime] = None,
) -> ShiftResult:
    """
    Delay an anchor's end and push later commitments by the same amount.

    Args:
        anchor: Commitment being extended
        new_end: New end of the anchor, strictly after its current end
        downstream: The owner's other commitments; entries with the
            anchor's id are dropped
        mode: KEEP_START keeps the anchor's start, RESUME_NOW restarts it at `now`
        now: Current instant, required for RESUME_NOW

    Returns:
        ShiftResult: Updated anchor and the downstream list in input order

    Raises:
        InvalidShift: If new_end is not after the anchor's end, or RESUME_NOW
            is requested without `now`
        InvalidInterval: If the re-placed anchor would be empty
    """
    new_end = ensure_utc(new_end)
    if new_end <= anchor.end:
        raise InvalidShift(
            f"New end {new_end.isoformat()} must be after current end {anchor.end.isoformat()}",
            details={"commitment_id": anchor.id},
        )

    if mode == ShiftMode.RESUME_NOW:
        if now is None:
            raise InvalidShift(
                "Resuming a commitment requires the current instant",
                details={"commitment_id": anchor.id},
            )
        placed = Interval(start=now, end=new_end)
    else:
        placed = Interval(start=anchor.start, end=new_end)

    delta = new_end - anchor.end
    shifted: list[Commitment] = []
    for commitment in downstream:
        if commitment.id == anchor.id:
            continue
        if commitment.start >= anchor.end:
            commitment = commitment.model_copy(
                update={"start": commitment.start + delta, "end": commitment.end + delta}
            )
        shifted.append(commitment)

    return ShiftResult(
        anchor=anchor.model_copy(update={"start": placed.start, "end": placed.end}),
        downstream=shifted,
    )
