"""
Application service exposing the scheduling engine's call-boundary operations.

The service wires configuration into the pure domain components and adds the
commit step, where every suggested slot is re-validated against fresh data
from the booking store right before it is inserted. Snapshots are passed in
per call; nothing is cached between calls.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Mapping, Optional, Protocol, Sequence

from pendulum import Date, DateTime

from ..config import AppConfig
from ..domain.calendar import WorkingCalendarResolver
from ..domain.conflict_validator import ConflictValidator
from ..domain.exceptions import SlotConflictError, StaleSnapshotConflict
from ..domain.gap_calculator import GapCalculator
from ..domain.models import (
    Appointment,
    AppointmentStatus,
    Gap,
    ScheduleItem,
    ScheduleResult,
    SuggestedSlot,
    ValidationOutcome,
    ValidationReport,
    WorkingPeriod,
)
from ..domain.rules import AppointmentRules
from ..domain.scheduler import PrioritySlotScheduler

logger = logging.getLogger(__name__)


class BookingStoreProtocol(Protocol):
    """Protocol describing the booking store behaviour needed at commit time."""

    def list_appointments(
        self,
        professional_id: str,
        start: DateTime,
        end: DateTime,
    ) -> List[Appointment]:
        """Return the current bookings of a professional overlapping [start, end)."""

    def list_patient_appointments(
        self,
        patient_id: str,
        start: DateTime,
        end: DateTime,
    ) -> List[Appointment]:
        """Return the current bookings of a patient, with any professional, overlapping [start, end)."""

    def insert_appointment(self, appointment: Appointment) -> Appointment:
        """Persist a booking, raising SlotConflictError if the slot is taken."""


@dataclass
class CommitReport:
    """Slots that became real bookings and slots that were lost to a concurrent writer."""
    committed: List[Appointment] = field(default_factory=list)
    stale: List[StaleSnapshotConflict] = field(default_factory=list)

    @property
    def needs_replanning(self) -> bool:
        return bool(self.stale)


class AvailabilityService:
    """
    Orchestrates gap calculation, conflict checks and batch scheduling.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self._validator = ConflictValidator(
            check_patient=self.config.check_patient_conflicts,
            block_patient_id=self.config.block_patient_id,
        )

    def compute_gaps(
        self,
        professional_id: str,
        day: Date,
        working_periods: Iterable[WorkingPeriod],
        appointments: Iterable[Appointment],
        professional_name: Optional[str] = None,
    ) -> List[Gap]:
        """Free gaps of a professional on one date."""
        if professional_name is None:
            professional_name = self.config.professional_name(professional_id)
        return self._gap_calculator(working_periods).compute(
            professional_id, day, appointments, professional_name=professional_name
        )

    def compute_gaps_between(
        self,
        professional_id: str,
        start_date: Date,
        end_date: Date,
        working_periods: Iterable[WorkingPeriod],
        appointments: Iterable[Appointment],
    ) -> List[Gap]:
        """Free gaps over an inclusive date range."""
        return self._gap_calculator(working_periods).gaps_between(
            professional_id,
            start_date,
            end_date,
            appointments,
            professional_name=self.config.professional_name(professional_id),
        )

    def validate_appointment(
        self,
        start: DateTime,
        end: DateTime,
        professional_id: str,
        appointments: Iterable[Appointment],
        patient_id: Optional[str] = None,
        exclude_appointment_id: Optional[str] = None,
    ) -> ValidationOutcome:
        """First collision of a proposed appointment, or success."""
        return self._validator.validate(
            start,
            end,
            professional_id,
            appointments,
            patient_id=patient_id,
            exclude_appointment_id=exclude_appointment_id,
        )

    def check_rules(
        self,
        start: DateTime,
        end: DateTime,
        professional_id: str,
        working_periods: Iterable[WorkingPeriod],
        appointments: Iterable[Appointment],
        patient_id: Optional[str] = None,
        now: Optional[DateTime] = None,
        exclude_appointment_id: Optional[str] = None,
    ) -> ValidationReport:
        """Clinic business rules for a proposed appointment."""
        rules = AppointmentRules(
            self._resolver(working_periods),
            thresholds=self.config.rules.to_thresholds(),
        )
        return rules.check(
            start,
            end,
            professional_id,
            appointments,
            patient_id=patient_id,
            now=now,
            exclude_appointment_id=exclude_appointment_id,
        )

    def schedule_batch(
        self,
        items: Sequence[ScheduleItem],
        professional_id: str,
        working_periods: Iterable[WorkingPeriod],
        appointments: Iterable[Appointment],
        today: Date,
        patient_id: Optional[str] = None,
    ) -> ScheduleResult:
        """Place pending procedures, highest priority first."""
        engine = self.config.engine
        scheduler = PrioritySlotScheduler(
            self._resolver(working_periods),
            validator=self._validator,
            horizon_days=engine.horizon_days,
            step_minutes=engine.step_minutes,
            high_priority_spacing_days=engine.high_priority_spacing_days,
            default_spacing_days=engine.default_spacing_days,
            spacing_policy=engine.spacing_policy,
            priority_labels=engine.priority_labels,
        )
        result = scheduler.schedule(items, professional_id, appointments, today, patient_id=patient_id)

        if result.unplaced:
            logger.warning(
                "%d of %d items could not be placed for professional %s",
                len(result.unplaced), len(items), professional_id,
            )
        return result

    def resolve_durations(
        self,
        items: Iterable[ScheduleItem],
        treatment_durations: Mapping[str, int],
    ) -> List[ScheduleItem]:
        """
        Give each item the default duration of its treatment.

        Items without a treatment reference, or whose treatment has no known
        duration, keep their own estimate.
        """
        resolved = []
        for item in items:
            duration = treatment_durations.get(item.treatment_id) if item.treatment_id else None
            resolved.append(replace(item, estimated_duration_minutes=duration) if duration else item)
        return resolved

    def commit_slots(
        self,
        slots: Iterable[SuggestedSlot],
        professional_id: str,
        store: BookingStoreProtocol,
        patient_id: Optional[str] = None,
    ) -> CommitReport:
        """
        Turn suggested slots into bookings, re-checking each one just before insert.

        A slot taken since planning is reported as stale and the remaining
        slots are still committed.
        """
        report = CommitReport()

        for slot in slots:
            current = list(store.list_appointments(professional_id, slot.start, slot.end))
            if patient_id:
                seen = {appointment.id for appointment in current}
                current += [
                    appointment
                    for appointment in store.list_patient_appointments(patient_id, slot.start, slot.end)
                    if appointment.id not in seen
                ]
            outcome = self._validator.validate(
                slot.start, slot.end, professional_id, current, patient_id=patient_id
            )

            if not outcome.ok:
                report.stale.append(self._stale(slot, outcome.message, outcome.conflict_kind))
                continue

            appointment = Appointment(
                id=str(uuid.uuid4()),
                professional_id=professional_id,
                start=slot.start,
                end=slot.end,
                patient_id=patient_id,
                status=AppointmentStatus.SCHEDULED,
            )
            try:
                report.committed.append(store.insert_appointment(appointment))
            except SlotConflictError as exc:
                report.stale.append(self._stale(slot, str(exc), exc.kind))

        return report

    def _stale(self, slot: SuggestedSlot, detail: str, kind) -> StaleSnapshotConflict:
        logger.warning("Slot for item %s at %s is no longer free: %s", slot.item_id, slot.time_range, detail)
        return StaleSnapshotConflict(
            f"Slot {slot.time_range} for item {slot.item_id} was taken, please re-plan ({detail})",
            kind=kind,
            time_range=slot.time_range,
        )

    def _resolver(self, working_periods: Iterable[WorkingPeriod]) -> WorkingCalendarResolver:
        return WorkingCalendarResolver(working_periods, timezone=self.config.timezone)

    def _gap_calculator(self, working_periods: Iterable[WorkingPeriod]) -> GapCalculator:
        return GapCalculator(
            self._resolver(working_periods),
            min_gap_minutes=self.config.engine.min_gap_minutes,
        )
