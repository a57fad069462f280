"""
Domain models for working hours, bookings and scheduling results.
"""

from dataclasses import dataclass, field
from datetime import time
from enum import Enum, IntEnum
from typing import List, Optional

import pendulum
from pendulum import Date, DateTime


def weekday_of(day: Date) -> int:
    """
    Return the schedule weekday for a date.

    Schedule rows number weekdays from Sunday: 0=Sunday, 1=Monday, ..., 6=Saturday.
    """
    return day.isoweekday() % 7


def combine(day: Date, moment: time, timezone: str) -> DateTime:
    """Build an aware instant from a calendar date and a time of day."""
    return pendulum.datetime(
        day.year,
        day.month,
        day.day,
        moment.hour,
        moment.minute,
        tz=timezone,
    )


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable half-open time range [start, end).

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """Check if this range overlaps with another. Touching ranges do not overlap."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeRange") -> bool:
        """Check if another range lies entirely within this one."""
        return self.start <= other.start and other.end <= self.end

    def intersect(self, other: "TimeRange") -> "TimeRange | None":
        """
        Calculate the intersection of two time ranges.
        Returns None if there is no overlap.
        """
        if not self.overlaps(other):
            return None

        return TimeRange(start=max(self.start, other.start), end=min(self.end, other.end))

    def __str__(self) -> str:
        return f"{self.start.format('DD/MM/YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class WorkingPeriod:
    """
    One row of a professional's recurring weekly working hours.

    Several rows may share a weekday (split shifts).
    """
    professional_id: str
    weekday: int  # 0=Sunday, 6=Saturday
    start: time
    end: time

    def __post_init__(self):
        if not 0 <= self.weekday <= 6:
            raise ValueError(f"Weekday must be between 0 and 6, got {self.weekday}")
        if self.start >= self.end:
            raise ValueError(
                f"Working period start {self.start} must be before end {self.end}"
            )

    def on(self, day: Date, timezone: str) -> TimeRange:
        """Materialize this period on a concrete date."""
        return TimeRange(
            start=combine(day, self.start, timezone),
            end=combine(day, self.end, timezone),
        )


class AppointmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "NoShow"


@dataclass(frozen=True)
class Appointment:
    """A booking row as supplied by the calling application."""
    id: str
    professional_id: str
    start: DateTime
    end: DateTime
    patient_id: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED

    @property
    def is_active(self) -> bool:
        """Every status except Cancelled keeps the slot occupied."""
        return self.status != AppointmentStatus.CANCELLED

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)


@dataclass(frozen=True)
class BusyInterval:
    """Professional time occupied by a non-cancelled appointment."""
    professional_id: str
    time_range: TimeRange
    appointment_id: Optional[str] = None
    patient_id: Optional[str] = None

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end


@dataclass(frozen=True)
class Gap:
    """
    A free block inside a working period.
    """
    professional_id: str
    professional_name: str
    start: DateTime
    end: DateTime
    duration_minutes: int

    @classmethod
    def from_range(
        cls,
        time_range: TimeRange,
        professional_id: str,
        professional_name: str = "",
    ) -> "Gap":
        return cls(
            professional_id=professional_id,
            professional_name=professional_name,
            start=time_range.start,
            end=time_range.end,
            duration_minutes=time_range.duration_minutes(),
        )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def format_display(self) -> str:
        """
        Format the gap for display.
        Format: Weekday, DD/MM/YYYY | HH:mm - HH:mm (N min)
        """
        date_str = self.start.format("dddd, DD/MM/YYYY")
        time_str = f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"
        return f"{date_str} | {time_str} ({self.duration_minutes} min)"


class Priority(IntEnum):
    NORMAL = 1
    MEDIUM = 2
    HIGH = 3


@dataclass(frozen=True)
class ScheduleItem:
    """
    A pending treatment-plan procedure waiting for a slot.
    """
    id: str
    estimated_duration_minutes: int = 60
    priority: int = Priority.NORMAL
    treatment_id: Optional[str] = None
    tooth_number: Optional[int] = None
    description: str = ""

    def __post_init__(self):
        if self.estimated_duration_minutes <= 0:
            raise ValueError(
                f"Estimated duration must be positive, got {self.estimated_duration_minutes}"
            )
        if self.priority not in tuple(Priority):
            raise ValueError(f"Priority must be 1, 2 or 3, got {self.priority}")


@dataclass(frozen=True)
class SuggestedSlot:
    """A proposed placement for one schedule item."""
    item_id: str
    date: Date
    start: DateTime
    end: DateTime
    reason: str

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def format_display(self) -> str:
        return (
            f"{self.start.format('ddd DD/MM/YYYY')} | "
            f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')} | {self.reason}"
        )


@dataclass
class ScheduleResult:
    """Outcome of one batch scheduling run."""
    placed: List[SuggestedSlot] = field(default_factory=list)
    unplaced: List[str] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.unplaced


class ConflictKind(str, Enum):
    INVALID_INTERVAL = "InvalidInterval"
    PROFESSIONAL_CONFLICT = "ProfessionalConflict"
    PATIENT_CONFLICT = "PatientConflict"


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of a conflict check: success, or the first conflict found.
    """
    ok: bool
    conflict_kind: Optional[ConflictKind] = None
    conflicting: Optional[Appointment] = None
    message: str = ""

    @classmethod
    def success(cls) -> "ValidationOutcome":
        return cls(ok=True)

    @classmethod
    def conflict(
        cls,
        kind: ConflictKind,
        message: str,
        conflicting: Optional[Appointment] = None,
    ) -> "ValidationOutcome":
        return cls(ok=False, conflict_kind=kind, conflicting=conflicting, message=message)

    def raise_for_conflict(self) -> None:
        """Raise the matching SchedulingError if this outcome is a conflict."""
        from .exceptions import InvalidIntervalError, SlotConflictError

        if self.ok:
            return
        if self.conflict_kind is ConflictKind.INVALID_INTERVAL:
            raise InvalidIntervalError(self.message)
        raise SlotConflictError(
            self.message,
            kind=self.conflict_kind,
            time_range=self.conflicting.time_range if self.conflicting else None,
        )


@dataclass
class ValidationReport:
    """Errors block a booking, warnings are advisory."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def merge(self, other: "ValidationReport") -> "ValidationReport":
        return ValidationReport(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )
