"""
Unit tests for cascading shifts.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import InvalidInterval, InvalidShift
from app.models.enums import ShiftMode
from app.models.scheduling import Commitment
from app.services.shift_service import apply_shift


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 10, hour, minute, tzinfo=timezone.utc)


def make_commitment(commitment_id: str, start: datetime, end: datetime, completed: bool = False) -> Commitment:
    return Commitment(id=commitment_id, title=commitment_id.title(), start=start, end=end, completed=completed)


@pytest.fixture
def day_plan() -> list[Commitment]:
    return [
        make_commitment("early", at(7), at(8)),
        make_commitment("anchor", at(9), at(10)),
        make_commitment("next", at(10), at(11)),
        make_commitment("lunch", at(12), at(13)),
        make_commitment("review", at(15), at(15, 30), completed=True),
    ]


def test_rejects_compression(day_plan):
    anchor = day_plan[1]
    with pytest.raises(InvalidShift):
        apply_shift(anchor, at(10), day_plan)
    with pytest.raises(InvalidShift):
        apply_shift(anchor, at(9, 30), day_plan)


def test_resume_requires_now(day_plan):
    with pytest.raises(InvalidShift):
        apply_shift(day_plan[1], at(11), day_plan, mode=ShiftMode.RESUME_NOW)


def test_resume_rejects_now_after_new_end(day_plan):
    with pytest.raises(InvalidInterval):
        apply_shift(day_plan[1], at(10, 15), day_plan, mode=ShiftMode.RESUME_NOW, now=at(10, 30))


def test_keep_start_extends_anchor_and_shifts_downstream(day_plan):
    anchor = day_plan[1]
    result = apply_shift(anchor, at(10, 20), day_plan)

    assert result.anchor.start == at(9)
    assert result.anchor.end == at(10, 20)
    assert result.anchor.id == "anchor"
    assert result.anchor.title == "Anchor"

    by_id = {c.id: c for c in result.downstream}
    assert "anchor" not in by_id
    assert by_id["early"] == day_plan[0]
    assert (by_id["next"].start, by_id["next"].end) == (at(10, 20), at(11, 20))
    assert (by_id["lunch"].start, by_id["lunch"].end) == (at(12, 20), at(13, 20))
    assert (by_id["review"].start, by_id["review"].end) == (at(15, 20), at(15, 50))
    assert by_id["review"].completed is True


def test_resume_now_restarts_anchor(day_plan):
    anchor = day_plan[1]
    result = apply_shift(anchor, at(10, 45), day_plan, mode=ShiftMode.RESUME_NOW, now=at(10, 30))

    assert result.anchor.start == at(10, 30)
    assert result.anchor.end == at(10, 45)
    by_id = {c.id: c for c in result.downstream}
    assert by_id["next"].start == at(10, 45)


def test_downstream_order_and_durations_preserved(day_plan):
    result = apply_shift(day_plan[1], at(11, 5), day_plan)

    assert [c.id for c in result.downstream] == ["early", "next", "lunch", "review"]
    originals = {c.id: c for c in day_plan}
    for commitment in result.downstream:
        assert commitment.duration == originals[commitment.id].duration


def test_shift_keeps_downstream_non_overlapping(day_plan):
    result = apply_shift(day_plan[1], at(12, 40), day_plan)
    shifted = sorted(result.downstream, key=lambda c: c.start)
    for left, right in zip(shifted, shifted[1:]):
        assert not left.interval.overlaps(right.interval)


def test_inputs_are_not_mutated(day_plan):
    snapshot = [c.model_copy() for c in day_plan]
    apply_shift(day_plan[1], at(11), day_plan)
    assert day_plan == snapshot


def test_one_second_shift_is_valid(day_plan):
    result = apply_shift(day_plan[1], day_plan[1].end + timedelta(seconds=1), day_plan)
    by_id = {c.id: c for c in result.downstream}
    assert by_id["next"].start == at(10) + timedelta(seconds=1)
