"""
Conversion of booking rows into busy intervals.
"""

from typing import Iterable, List

from pendulum import Date

from .models import Appointment, BusyInterval


class BusyIntervalCollector:
    """Filters a booking snapshot down to one professional's occupied time."""

    def __init__(self, timezone: str = "America/Sao_Paulo"):
        self.timezone = timezone

    def collect(
        self,
        professional_id: str,
        day: Date,
        appointments: Iterable[Appointment],
    ) -> List[BusyInterval]:
        """
        Return the busy intervals of ``professional_id`` starting on ``day``.

        Cancelled appointments and other professionals' bookings are skipped.
        The result is sorted by start.
        """
        return [
            busy for busy in self.collect_all(professional_id, appointments)
            if busy.start.in_timezone(self.timezone).date() == day
        ]

    def collect_all(
        self,
        professional_id: str,
        appointments: Iterable[Appointment],
    ) -> List[BusyInterval]:
        """Return every busy interval of ``professional_id``, sorted by start."""
        busy = [
            to_busy_interval(appointment)
            for appointment in appointments
            if appointment.professional_id == professional_id and appointment.is_active
        ]
        return sorted(busy, key=lambda b: b.start)


def to_busy_interval(appointment: Appointment) -> BusyInterval:
    return BusyInterval(
        professional_id=appointment.professional_id,
        time_range=appointment.time_range,
        appointment_id=appointment.id,
        patient_id=appointment.patient_id,
    )
