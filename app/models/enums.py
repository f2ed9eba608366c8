"""
Enum definitions for the application.

These enums are used across models and provide type-safe scheduling values.
"""

from enum import Enum


class ConflictKind(str, Enum):
    """Outcome of classifying a proposed commitment."""

    NONE = "none"
    OVERLAP = "overlap"
    OVERDUE = "overdue"


class ShiftMode(str, Enum):
    """
    How the anchor of a cascading shift is re-placed.

    KEEP_START = Anchor keeps its start and only its end moves
    RESUME_NOW = Anchor was overdue and restarts at the current instant
    """

    KEEP_START = "keep_start"
    RESUME_NOW = "resume_now"
