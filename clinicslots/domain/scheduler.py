"""
Greedy batch placement of pending procedures into future slots.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional

from pendulum import Date, DateTime

from .calendar import WorkingCalendarResolver
from .conflict_validator import ConflictValidator
from .models import (
    Appointment,
    Priority,
    ScheduleItem,
    ScheduleResult,
    SuggestedSlot,
    TimeRange,
)

logger = logging.getLogger(__name__)


DEFAULT_PRIORITY_LABELS: Dict[int, str] = {
    Priority.HIGH: "High priority",
    Priority.MEDIUM: "Medium priority",
    Priority.NORMAL: "Normal priority",
}


class SpacingPolicy(str, Enum):
    """
    How a placement pushes back later searches.

    GLOBAL: the next item, whatever it is, starts searching ``spacing`` days
    after the date just used.
    PER_TREATMENT: only later items for the same treatment reference are
    pushed back; every other item starts searching from tomorrow.
    """
    GLOBAL = "global"
    PER_TREATMENT = "per_treatment"


class PrioritySlotScheduler:
    """
    Assigns each schedule item the earliest feasible slot, highest priority first.

    Items of equal priority keep their input order. Each candidate is checked
    against the known bookings and against every slot already placed in the
    same run, so a batch never collides with itself.
    """

    def __init__(
        self,
        resolver: WorkingCalendarResolver,
        validator: ConflictValidator | None = None,
        horizon_days: int = 60,
        step_minutes: int = 30,
        high_priority_spacing_days: int = 3,
        default_spacing_days: int = 7,
        spacing_policy: SpacingPolicy = SpacingPolicy.GLOBAL,
        priority_labels: Optional[Dict[int, str]] = None,
    ):
        self.resolver = resolver
        self.validator = validator or ConflictValidator()
        self.horizon_days = horizon_days
        self.step_minutes = step_minutes
        self.high_priority_spacing_days = high_priority_spacing_days
        self.default_spacing_days = default_spacing_days
        self.spacing_policy = SpacingPolicy(spacing_policy)
        self.priority_labels = dict(priority_labels or DEFAULT_PRIORITY_LABELS)

    def schedule(
        self,
        items: Iterable[ScheduleItem],
        professional_id: str,
        appointments: Iterable[Appointment],
        today: Date,
        patient_id: Optional[str] = None,
    ) -> ScheduleResult:
        """
        Place a batch of items.

        Args:
            items: Pending procedures, in the caller's order
            professional_id: Professional who will perform them
            appointments: Booking snapshot covering the horizon
            today: Current date; searching starts the day after
            patient_id: Patient of the treatment plan, checked for double-booking

        Returns:
            ScheduleResult with placed slots in placement order and the ids
            of items that found no slot within the horizon
        """
        bookings: List[Appointment] = list(appointments)
        result = ScheduleResult()

        first_day = today.add(days=1)
        last_day = today.add(days=self.horizon_days)
        cursor_date = first_day
        treatment_cursors: Dict[str, Date] = {}

        # sorted() is stable, so equal priorities keep input order
        ordered = sorted(items, key=lambda item: item.priority, reverse=True)

        for item in ordered:
            search_date = self._search_start(item, cursor_date, first_day, treatment_cursors)
            slot = None

            while slot is None and search_date < last_day:
                slot = self._find_slot_on(item, professional_id, search_date, bookings, patient_id)
                if slot is None:
                    search_date = search_date.add(days=1)

            if slot is None:
                logger.warning(
                    "No slot for item %s (%s min) within %s days",
                    item.id, item.estimated_duration_minutes, self.horizon_days,
                )
                result.unplaced.append(item.id)
                continue

            logger.debug("Placed item %s at %s", item.id, slot.time_range)
            result.placed.append(slot)
            bookings.append(
                Appointment(
                    id=f"suggested:{item.id}",
                    professional_id=professional_id,
                    start=slot.start,
                    end=slot.end,
                    patient_id=patient_id,
                )
            )

            next_date = search_date.add(days=self.spacing_days(item.priority))
            if self.spacing_policy is SpacingPolicy.GLOBAL:
                cursor_date = next_date
            elif item.treatment_id:
                treatment_cursors[item.treatment_id] = next_date

        return result

    def spacing_days(self, priority: int) -> int:
        """Days between a placement and the next search start."""
        if priority == Priority.HIGH:
            return self.high_priority_spacing_days
        return self.default_spacing_days

    def reason_for(self, item: ScheduleItem) -> str:
        label = self.priority_labels.get(item.priority, self.priority_labels[Priority.NORMAL])
        return f"{label} - next available opening"

    def _search_start(
        self,
        item: ScheduleItem,
        cursor_date: Date,
        first_day: Date,
        treatment_cursors: Dict[str, Date],
    ) -> Date:
        if self.spacing_policy is SpacingPolicy.GLOBAL:
            return cursor_date
        if item.treatment_id:
            return treatment_cursors.get(item.treatment_id, first_day)
        return first_day

    def _find_slot_on(
        self,
        item: ScheduleItem,
        professional_id: str,
        day: Date,
        bookings: List[Appointment],
        patient_id: Optional[str],
    ) -> SuggestedSlot | None:
        for period in self.resolver.ranges_for(professional_id, day):
            for candidate in self._candidates(period, item.estimated_duration_minutes):
                outcome = self.validator.validate_range(
                    candidate, professional_id, bookings, patient_id=patient_id
                )
                if outcome.ok:
                    return SuggestedSlot(
                        item_id=item.id,
                        date=day,
                        start=candidate.start,
                        end=candidate.end,
                        reason=self.reason_for(item),
                    )
        return None

    def _candidates(self, period: TimeRange, duration_minutes: int) -> Iterable[TimeRange]:
        """Yield fixed-step candidate ranges that fit entirely inside ``period``."""
        start: DateTime = period.start
        while start.add(minutes=duration_minutes) <= period.end:
            yield TimeRange(start=start, end=start.add(minutes=duration_minutes))
            start = start.add(minutes=self.step_minutes)
