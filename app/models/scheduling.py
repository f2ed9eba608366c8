"""
Scheduling models: intervals, commitments and engine results.

All instants are normalized to timezone-aware UTC datetimes on the way in,
so every comparison is between absolute points in time.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.exceptions import InvalidInterval
from app.models.enums import ConflictKind, ShiftMode
from app.utils.datetime_utils import ensure_utc


def _check_order(start: datetime, end: datetime) -> None:
    if start >= end:
        raise InvalidInterval(
            f"Interval start {start.isoformat()} must be before end {end.isoformat()}",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )


class Interval(BaseModel):
    """Half-open time range [start, end)."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_instant(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def validate_order(self) -> Interval:
        _check_order(self.start, self.end)
        return self

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        instant = ensure_utc(instant)
        return self.start <= instant < self.end

    def overlaps(self, other: Interval) -> bool:
        """Strict overlap; back-to-back intervals do not overlap."""
        return self.start < other.end and other.start < self.end


class Commitment(BaseModel):
    """A scheduled item owned by the persistence layer."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: Optional[str] = None
    start: datetime
    end: datetime
    completed: bool = False

    @field_validator("start", "end")
    @classmethod
    def normalize_instant(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def validate_order(self) -> Commitment:
        _check_order(self.start, self.end)
        return self

    @property
    def interval(self) -> Interval:
        return Interval(start=self.start, end=self.end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class ConflictResult(BaseModel):
    """
    Classification of a proposed commitment.

    commitment_id is only set for overlaps and names the earliest-starting
    colliding commitment.
    """

    model_config = ConfigDict(frozen=True)

    kind: ConflictKind
    commitment_id: Optional[str] = None

    @classmethod
    def no_conflict(cls) -> ConflictResult:
        return cls(kind=ConflictKind.NONE)

    @classmethod
    def overlap(cls, commitment_id: str) -> ConflictResult:
        return cls(kind=ConflictKind.OVERLAP, commitment_id=commitment_id)

    @classmethod
    def overdue(cls) -> ConflictResult:
        return cls(kind=ConflictKind.OVERDUE)

    @property
    def is_conflict(self) -> bool:
        return self.kind != ConflictKind.NONE


class DayWindow(BaseModel):
    """Explicit [start, end) boundary of one calendar day."""

    model_config = ConfigDict(frozen=True)

    day: date
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_instant(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def validate_order(self) -> DayWindow:
        _check_order(self.start, self.end)
        return self


class ShiftResult(BaseModel):
    """Outcome of a cascading shift, ready for the caller to persist."""

    anchor: Commitment
    downstream: list[Commitment] = Field(default_factory=list)


class ProposalReview(BaseModel):
    """Conflict verdict for a proposal plus alternatives when it conflicts."""

    proposed: Interval
    result: ConflictResult
    conflicting: Optional[Commitment] = None
    suggestions: list[Interval] = Field(default_factory=list)


# ===========================================
# API requests
# ===========================================


def _known_timezone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {value}")
    return value


class ClassifyRequest(BaseModel):
    """Classify one proposal against a day's commitments."""

    proposed: Interval
    commitments: list[Commitment] = Field(default_factory=list)
    now: Optional[datetime] = Field(None, description="Current instant (server clock if omitted)")
    grace_seconds: Optional[int] = Field(
        None, ge=0, description="Slack before a proposal counts as overdue (settings default if omitted)"
    )


class SlotsRequest(BaseModel):
    """Find free slots inside one explicit day window."""

    duration_minutes: int = Field(..., description="Required slot length in minutes")
    day_start: datetime
    day_end: datetime
    now_floor: Optional[datetime] = Field(None, description="Earliest usable instant (server clock if omitted)")
    commitments: list[Commitment] = Field(default_factory=list)


class SearchRequest(BaseModel):
    """Search slots across several days in the user's timezone."""

    duration_minutes: int = Field(..., description="Required slot length in minutes")
    start_date: Optional[date] = Field(None, description="First day to search (today if omitted)")
    timezone: Optional[str] = Field(None, description="IANA timezone for day boundaries")
    horizon_days: Optional[int] = Field(None, ge=1, le=60)
    max_results: Optional[int] = Field(None, ge=1, le=50)
    now: Optional[datetime] = None
    commitments: list[Commitment] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: Optional[str]) -> Optional[str]:
        return _known_timezone(value)


class ReviewRequest(BaseModel):
    """Review a proposed task coming from the task extractor."""

    start: datetime
    end: datetime
    timezone: Optional[str] = None
    now: Optional[datetime] = None
    commitments: list[Commitment] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: Optional[str]) -> Optional[str]:
        return _known_timezone(value)


class ShiftRequest(BaseModel):
    """Delay an anchor commitment to a new end instant."""

    anchor: Commitment
    new_end: datetime
    mode: ShiftMode = ShiftMode.KEEP_START
    now: Optional[datetime] = None
    downstream: list[Commitment] = Field(default_factory=list)


class ExtendRequest(BaseModel):
    """Add minutes to a commitment ("+N minutes")."""

    anchor: Commitment
    minutes: int
    mode: ShiftMode = ShiftMode.RESUME_NOW
    now: Optional[datetime] = None
    commitments: list[Commitment] = Field(default_factory=list)
