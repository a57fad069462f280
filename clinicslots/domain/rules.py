"""
Clinic business rules applied on top of the collision check.

Each rule contributes errors (the booking must not be made) or warnings
(the booking is allowed but worth a second look).
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from pendulum import DateTime

from .busy import BusyIntervalCollector
from .calendar import WorkingCalendarResolver
from .models import Appointment, TimeRange, ValidationReport


@dataclass(frozen=True)
class RuleThresholds:
    max_appointments_per_day: int = 8
    daily_limit_warning_margin: int = 2
    min_hours_between_same_patient: int = 24
    max_daily_hours: int = 10
    min_appointment_minutes: int = 15
    max_appointment_minutes: int = 240


class AppointmentRules:
    """Checks a proposed appointment against the clinic's booking rules."""

    def __init__(self, resolver: WorkingCalendarResolver, thresholds: RuleThresholds | None = None):
        self.resolver = resolver
        self.thresholds = thresholds or RuleThresholds()
        self.collector = BusyIntervalCollector(timezone=resolver.timezone)

    def check(
        self,
        start: DateTime,
        end: DateTime,
        professional_id: str,
        appointments: Iterable[Appointment],
        patient_id: Optional[str] = None,
        now: Optional[DateTime] = None,
        exclude_appointment_id: Optional[str] = None,
    ) -> ValidationReport:
        """
        Run every rule and combine their findings.

        ``exclude_appointment_id`` names the booking being edited, which must
        not count as the patient's nearby appointment.
        """
        report = self.check_duration(start, end)
        if not report.is_valid:
            return report

        snapshot = list(appointments)
        proposed = TimeRange(start=start, end=end)

        if now is not None:
            report = report.merge(self.check_not_in_past(proposed, now))
        report = report.merge(self.check_working_hours(proposed, professional_id))
        report = report.merge(self.check_daily_limit(proposed, professional_id, snapshot))
        report = report.merge(self.check_daily_workload(proposed, professional_id, snapshot))
        if patient_id:
            report = report.merge(
                self.check_patient_interval(
                    proposed, professional_id, patient_id, snapshot,
                    exclude_appointment_id=exclude_appointment_id,
                )
            )
        return report

    def check_duration(self, start: DateTime, end: DateTime) -> ValidationReport:
        report = ValidationReport()
        if end <= start:
            report.errors.append("End time must be after start time")
            return report

        minutes = (end - start).total_seconds() / 60
        if minutes < self.thresholds.min_appointment_minutes:
            report.errors.append(
                f"Minimum appointment duration: {self.thresholds.min_appointment_minutes} minutes"
            )
        if minutes > self.thresholds.max_appointment_minutes:
            report.errors.append(
                f"Maximum appointment duration: {self.thresholds.max_appointment_minutes} minutes"
            )
        return report

    def check_not_in_past(self, proposed: TimeRange, now: DateTime) -> ValidationReport:
        report = ValidationReport()
        if proposed.start < now:
            report.errors.append("Cannot book an appointment in the past")
        return report

    def check_working_hours(self, proposed: TimeRange, professional_id: str) -> ValidationReport:
        report = ValidationReport()
        day = proposed.start.in_timezone(self.resolver.timezone).date()
        periods = self.resolver.ranges_for(professional_id, day)

        if not periods:
            report.errors.append("Professional has no working hours configured for this day")
            return report

        if not any(period.contains(proposed) for period in periods):
            hours = ", ".join(
                f"{p.start.format('HH:mm')}-{p.end.format('HH:mm')}" for p in periods
            )
            report.errors.append(f"Outside working hours. Working hours: {hours}")
        return report

    def check_daily_limit(
        self,
        proposed: TimeRange,
        professional_id: str,
        appointments: List[Appointment],
    ) -> ValidationReport:
        report = ValidationReport()
        count = len(self._same_day(proposed, professional_id, appointments))
        limit = self.thresholds.max_appointments_per_day

        if count >= limit:
            report.errors.append(f"Daily limit of {limit} appointments reached ({count} appointments)")
        elif count >= limit - self.thresholds.daily_limit_warning_margin:
            report.warnings.append(f"{count} appointments on this day (limit: {limit})")
        return report

    def check_daily_workload(
        self,
        proposed: TimeRange,
        professional_id: str,
        appointments: List[Appointment],
    ) -> ValidationReport:
        report = ValidationReport()
        booked = sum(
            busy.time_range.duration_minutes()
            for busy in self._same_day(proposed, professional_id, appointments)
        )
        total_hours = (booked + proposed.duration_minutes()) / 60

        if total_hours > self.thresholds.max_daily_hours:
            report.warnings.append(
                f"High workload: {total_hours:.1f}h (recommended: up to "
                f"{self.thresholds.max_daily_hours}h)"
            )
        return report

    def check_patient_interval(
        self,
        proposed: TimeRange,
        professional_id: str,
        patient_id: str,
        appointments: List[Appointment],
        exclude_appointment_id: Optional[str] = None,
    ) -> ValidationReport:
        report = ValidationReport()
        min_seconds = self.thresholds.min_hours_between_same_patient * 3600

        too_close = [
            busy for busy in self.collector.collect_all(professional_id, appointments)
            if busy.patient_id == patient_id
            and busy.appointment_id != exclude_appointment_id
            and abs((busy.start - proposed.start).total_seconds()) < min_seconds
        ]
        if too_close:
            report.warnings.append(
                "Patient already has a nearby appointment (recommended minimum interval: "
                f"{self.thresholds.min_hours_between_same_patient}h)"
            )
        return report

    def _same_day(self, proposed: TimeRange, professional_id: str, appointments: List[Appointment]):
        day = proposed.start.in_timezone(self.resolver.timezone).date()
        return self.collector.collect(professional_id, day, appointments)
