"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .busy import BusyIntervalCollector
from .calendar import WorkingCalendarResolver
from .conflict_validator import ConflictValidator
from .gap_calculator import MIN_GAP_MINUTES, GapCalculator
from .models import (
    Appointment,
    AppointmentStatus,
    BusyInterval,
    ConflictKind,
    Gap,
    Priority,
    ScheduleItem,
    ScheduleResult,
    SuggestedSlot,
    TimeRange,
    ValidationOutcome,
    ValidationReport,
    WorkingPeriod,
)
from .rules import AppointmentRules, RuleThresholds
from .scheduler import PrioritySlotScheduler, SpacingPolicy

__all__ = [
    "Appointment",
    "AppointmentRules",
    "AppointmentStatus",
    "BusyInterval",
    "BusyIntervalCollector",
    "ConflictKind",
    "ConflictValidator",
    "Gap",
    "GapCalculator",
    "MIN_GAP_MINUTES",
    "Priority",
    "PrioritySlotScheduler",
    "RuleThresholds",
    "ScheduleItem",
    "ScheduleResult",
    "SpacingPolicy",
    "SuggestedSlot",
    "TimeRange",
    "ValidationOutcome",
    "ValidationReport",
    "WorkingCalendarResolver",
    "WorkingPeriod",
]
