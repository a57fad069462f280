"""
Domain-specific exception hierarchy for the scheduling engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import ConflictKind, TimeRange


class SchedulingError(Exception):
    """Base class for all application-level errors."""


class InvalidIntervalError(SchedulingError):
    """Raised when an interval ends at or before its start."""


class SlotConflictError(SchedulingError):
    """Raised when a booking would overlap an existing one."""

    def __init__(self, message: str, kind: "ConflictKind", time_range: Optional["TimeRange"] = None):
        super().__init__(message)
        self.kind = kind
        self.time_range = time_range


class StaleSnapshotConflict(SlotConflictError):
    """
    Raised when a slot computed as free was taken before it could be committed.

    Callers are expected to re-plan, not to abort.
    """


class SnapshotError(SchedulingError):
    """Raised when schedule or booking data cannot be loaded or parsed."""
