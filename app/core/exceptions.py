"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class SchedulingError(Exception):
    """Base exception for the scheduling engine."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(SchedulingError):
    """Validation error."""

    pass


class InvalidInterval(ValidationError):
    """Interval start is not strictly before its end."""

    pass


class InvalidDuration(ValidationError):
    """Requested duration is zero or negative."""

    pass


class InvalidShift(ValidationError):
    """Shift would compress the anchor instead of delaying it."""

    pass
