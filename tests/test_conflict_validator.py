"""
Tests for the conflict validator.
"""

import pendulum

from clinicslots.domain.conflict_validator import ConflictValidator
from clinicslots.domain.models import Appointment, AppointmentStatus, ConflictKind

TZ = "America/Sao_Paulo"
BLOCK = "block"


def at(value: str):
    return pendulum.parse(value, tz=TZ)


def booking(id, start, end, professional_id="dr-ana", patient_id=None, status=AppointmentStatus.SCHEDULED):
    return Appointment(
        id=id,
        professional_id=professional_id,
        patient_id=patient_id,
        start=at(start),
        end=at(end),
        status=status,
    )


EXISTING = [booking("a1", "2024-11-25 10:00", "2024-11-25 10:30", patient_id="pat-1")]


class TestConflictValidator:

    def test_overlapping_booking_is_a_professional_conflict(self):
        outcome = ConflictValidator().validate(
            at("2024-11-25 10:15"), at("2024-11-25 10:45"), "dr-ana", EXISTING
        )

        assert not outcome.ok
        assert outcome.conflict_kind is ConflictKind.PROFESSIONAL_CONFLICT
        assert outcome.conflicting.id == "a1"
        assert "10:00 - 10:30" in outcome.message

    def test_touching_booking_is_free(self):
        validator = ConflictValidator()

        assert validator.validate(at("2024-11-25 10:30"), at("2024-11-25 11:00"), "dr-ana", EXISTING).ok
        assert validator.validate(at("2024-11-25 09:30"), at("2024-11-25 10:00"), "dr-ana", EXISTING).ok

    def test_malformed_interval(self):
        validator = ConflictValidator()

        for start, end in [("10:00", "10:00"), ("11:00", "10:00")]:
            outcome = validator.validate(
                at(f"2024-11-25 {start}"), at(f"2024-11-25 {end}"), "dr-ana", []
            )
            assert outcome.conflict_kind is ConflictKind.INVALID_INTERVAL

    def test_cancelled_and_other_professionals_do_not_block(self):
        appointments = [
            booking("a1", "2024-11-25 10:00", "2024-11-25 11:00", status=AppointmentStatus.CANCELLED),
            booking("a2", "2024-11-25 10:00", "2024-11-25 11:00", professional_id="dr-bia"),
        ]

        assert ConflictValidator().validate(
            at("2024-11-25 10:00"), at("2024-11-25 11:00"), "dr-ana", appointments
        ).ok

    def test_patient_double_booking_across_professionals(self):
        appointments = [
            booking("a2", "2024-11-25 10:00", "2024-11-25 11:00", professional_id="dr-bia", patient_id="pat-1"),
        ]
        validator = ConflictValidator()

        outcome = validator.validate(
            at("2024-11-25 10:30"), at("2024-11-25 11:30"), "dr-ana", appointments, patient_id="pat-1"
        )
        assert outcome.conflict_kind is ConflictKind.PATIENT_CONFLICT

        assert validator.validate(
            at("2024-11-25 10:30"), at("2024-11-25 11:30"), "dr-ana", appointments
        ).ok
        assert ConflictValidator(check_patient=False).validate(
            at("2024-11-25 10:30"), at("2024-11-25 11:30"), "dr-ana", appointments, patient_id="pat-1"
        ).ok

    def test_professional_conflict_reported_first(self):
        appointments = [
            booking("a1", "2024-11-25 10:00", "2024-11-25 11:00", patient_id="pat-1"),
        ]

        outcome = ConflictValidator().validate(
            at("2024-11-25 10:00"), at("2024-11-25 11:00"), "dr-ana", appointments, patient_id="pat-1"
        )

        assert outcome.conflict_kind is ConflictKind.PROFESSIONAL_CONFLICT

    def test_block_patient_is_never_double_booked(self):
        appointments = [
            booking("b1", "2024-11-25 10:00", "2024-11-25 11:00", professional_id="dr-bia", patient_id=BLOCK),
        ]

        assert ConflictValidator(block_patient_id=BLOCK).validate(
            at("2024-11-25 10:00"), at("2024-11-25 11:00"), "dr-ana", appointments, patient_id=BLOCK
        ).ok

    def test_excluded_appointment_is_ignored(self):
        outcome = ConflictValidator().validate(
            at("2024-11-25 10:00"),
            at("2024-11-25 10:45"),
            "dr-ana",
            EXISTING,
            exclude_appointment_id="a1",
        )

        assert outcome.ok

    def test_success_iff_no_overlap(self):
        """Sweep a day in 15-minute steps and compare with a direct overlap check."""
        validator = ConflictValidator()
        start = at("2024-11-25 08:00")
        while start < at("2024-11-25 12:00"):
            end = start.add(minutes=30)
            expected = not any(
                start < b.end and end > b.start for b in EXISTING
            )
            assert validator.validate(start, end, "dr-ana", EXISTING).ok is expected
            start = start.add(minutes=15)
