"""
Collision checks for a proposed appointment.
"""

import logging
from typing import Iterable, Optional

from pendulum import DateTime

from .interval_math import overlaps
from .models import Appointment, ConflictKind, TimeRange, ValidationOutcome

logger = logging.getLogger(__name__)


class ConflictValidator:
    """
    Reports whether a proposed interval collides with existing bookings.

    Only the first conflict found is reported. This is a fast pre-check for
    planning and user feedback; the booking store remains the authority.
    """

    def __init__(self, check_patient: bool = True, block_patient_id: Optional[str] = None):
        self.check_patient = check_patient
        self.block_patient_id = block_patient_id

    def validate(
        self,
        start: DateTime,
        end: DateTime,
        professional_id: str,
        appointments: Iterable[Appointment],
        patient_id: Optional[str] = None,
        exclude_appointment_id: Optional[str] = None,
    ) -> ValidationOutcome:
        """
        Validate the interval [start, end) for a professional and optionally a patient.

        Args:
            start: Proposed start instant
            end: Proposed end instant
            professional_id: Professional who would attend
            appointments: Booking snapshot covering the proposed window
            patient_id: Patient to check for double-booking, if any
            exclude_appointment_id: Booking being edited, ignored in the checks

        Returns:
            ValidationOutcome with the first conflict kind, or success
        """
        if end <= start:
            return ValidationOutcome.conflict(
                ConflictKind.INVALID_INTERVAL,
                f"End time {end} must be after start time {start}",
            )

        proposed = TimeRange(start=start, end=end)
        active = [
            appointment for appointment in appointments
            if appointment.is_active and appointment.id != exclude_appointment_id
        ]

        for appointment in active:
            if appointment.professional_id != professional_id:
                continue
            if overlaps(proposed, appointment.time_range):
                logger.debug(
                    "Professional %s busy at %s (appointment %s)",
                    professional_id, proposed, appointment.id,
                )
                return ValidationOutcome.conflict(
                    ConflictKind.PROFESSIONAL_CONFLICT,
                    f"Slot unavailable: overlaps existing appointment "
                    f"{appointment.start.format('HH:mm')} - {appointment.end.format('HH:mm')}",
                    conflicting=appointment,
                )

        if patient_id and self.check_patient and patient_id != self.block_patient_id:
            for appointment in active:
                if appointment.patient_id != patient_id:
                    continue
                if overlaps(proposed, appointment.time_range):
                    return ValidationOutcome.conflict(
                        ConflictKind.PATIENT_CONFLICT,
                        f"Patient already has an appointment "
                        f"{appointment.start.format('HH:mm')} - {appointment.end.format('HH:mm')}",
                        conflicting=appointment,
                    )

        return ValidationOutcome.success()

    def validate_range(
        self,
        proposed: TimeRange,
        professional_id: str,
        appointments: Iterable[Appointment],
        patient_id: Optional[str] = None,
    ) -> ValidationOutcome:
        return self.validate(
            proposed.start, proposed.end, professional_id, appointments, patient_id=patient_id
        )
