"""
In-memory booking store with the overlap guard a real database must enforce.
"""

from typing import Iterable, List, Optional

from pendulum import DateTime

from ..domain.conflict_validator import ConflictValidator
from ..domain.models import Appointment, TimeRange


class InMemoryBookingStore:
    """
    Booking store backed by a list.

    ``insert_appointment`` rejects any active booking that overlaps another
    active booking of the same professional, like an exclusion constraint on
    (professional, time range).
    """

    def __init__(self, appointments: Optional[Iterable[Appointment]] = None):
        self._appointments: List[Appointment] = list(appointments or [])
        self._guard = ConflictValidator(check_patient=False)

    @property
    def appointments(self) -> List[Appointment]:
        return list(self._appointments)

    def list_appointments(
        self,
        professional_id: str,
        start: DateTime,
        end: DateTime,
    ) -> List[Appointment]:
        window = TimeRange(start=start, end=end)
        return [
            appointment for appointment in self._appointments
            if appointment.professional_id == professional_id
            and appointment.time_range.overlaps(window)
        ]

    def list_patient_appointments(
        self,
        patient_id: str,
        start: DateTime,
        end: DateTime,
    ) -> List[Appointment]:
        window = TimeRange(start=start, end=end)
        return [
            appointment for appointment in self._appointments
            if appointment.patient_id == patient_id
            and appointment.time_range.overlaps(window)
        ]

    def insert_appointment(self, appointment: Appointment) -> Appointment:
        """
        Raises:
            InvalidIntervalError: If the booking ends at or before its start
            SlotConflictError: If the professional is already booked
        """
        if appointment.is_active:
            self._guard.validate(
                appointment.start,
                appointment.end,
                appointment.professional_id,
                self._appointments,
            ).raise_for_conflict()

        self._appointments.append(appointment)
        return appointment
