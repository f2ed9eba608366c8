"""
Scheduling API endpoints.

Stateless: the caller sends the commitments snapshot with every request and
persists whatever comes back.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.config import get_settings
from app.core.exceptions import ValidationError
from app.core.logger import setup_logger
from app.models.scheduling import (
    ClassifyRequest,
    ConflictResult,
    ExtendRequest,
    Interval,
    ProposalReview,
    ReviewRequest,
    SearchRequest,
    ShiftRequest,
    ShiftResult,
    SlotsRequest,
)
from app.services.conflict_classifier import classify_conflict
from app.services.scheduling_service import SchedulingService
from app.services.shift_service import apply_shift
from app.services.slot_finder import find_slots
from app.utils.datetime_utils import now_utc

logger = setup_logger(__name__)

router = APIRouter()


def get_scheduling_service() -> SchedulingService:
    """Get SchedulingService instance."""
    return SchedulingService()


def _bad_request(exc: ValidationError) -> HTTPException:
    logger.info(f"Rejected scheduling request: {exc.message}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=exc.message,
    )


@router.post("/classify", response_model=ConflictResult)
async def classify(payload: ClassifyRequest):
    grace_seconds = payload.grace_seconds
    if grace_seconds is None:
        grace_seconds = get_settings().OVERDUE_GRACE_SECONDS
    return classify_conflict(
        payload.proposed,
        payload.commitments,
        payload.now or now_utc(),
        timedelta(seconds=grace_seconds),
    )


@router.post("/slots", response_model=list[Interval])
async def slots(payload: SlotsRequest):
    try:
        return find_slots(
            timedelta(minutes=payload.duration_minutes),
            payload.day_start,
            payload.day_end,
            payload.now_floor or now_utc(),
            payload.commitments,
        )
    except ValidationError as e:
        raise _bad_request(e)


@router.post("/search", response_model=list[Interval])
async def search(
    payload: SearchRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    if payload.horizon_days is not None:
        service.horizon_days = payload.horizon_days
    if payload.max_results is not None:
        service.max_suggestions = payload.max_results
    try:
        return service.suggest_slots(
            timedelta(minutes=payload.duration_minutes),
            payload.commitments,
            payload.now or now_utc(),
            start_day=payload.start_date,
            user_timezone=payload.timezone,
        )
    except ValidationError as e:
        raise _bad_request(e)


@router.post("/review", response_model=ProposalReview)
async def review(
    payload: ReviewRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.review_proposal(
        payload.start,
        payload.end,
        payload.commitments,
        payload.now or now_utc(),
        user_timezone=payload.timezone,
    )


@router.post("/shift", response_model=ShiftResult)
async def shift(payload: ShiftRequest):
    try:
        return apply_shift(
            payload.anchor,
            payload.new_end,
            payload.downstream,
            mode=payload.mode,
            now=payload.now or now_utc(),
        )
    except ValidationError as e:
        raise _bad_request(e)


@router.post("/extend", response_model=ShiftResult)
async def extend(
    payload: ExtendRequest,
    service: SchedulingService = Depends(get_scheduling_service),
):
    try:
        return service.extend_commitment(
            payload.anchor,
            payload.minutes,
            payload.commitments,
            payload.now or now_utc(),
            mode=payload.mode,
        )
    except ValidationError as e:
        raise _bad_request(e)
