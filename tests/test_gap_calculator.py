"""
Tests for gap calculator.
"""

from datetime import time

import pendulum

from clinicslots.domain.calendar import WorkingCalendarResolver
from clinicslots.domain.gap_calculator import GapCalculator
from clinicslots.domain.models import Appointment, AppointmentStatus, WorkingPeriod

TZ = "America/Sao_Paulo"
MONDAY = pendulum.date(2024, 11, 25)
SUNDAY = pendulum.date(2024, 11, 24)


def at(value: str):
    return pendulum.parse(value, tz=TZ)


def booking(id, start, end, professional_id="dr-ana", status=AppointmentStatus.SCHEDULED):
    return Appointment(
        id=id,
        professional_id=professional_id,
        start=at(start),
        end=at(end),
        status=status,
    )


def build_calculator(*periods, min_gap_minutes=30) -> GapCalculator:
    resolver = WorkingCalendarResolver(list(periods), timezone=TZ)
    return GapCalculator(resolver, min_gap_minutes=min_gap_minutes)


def spans(gaps):
    return [(g.start.format("HH:mm"), g.end.format("HH:mm"), g.duration_minutes) for g in gaps]


class TestGapCalculator:
    """Tests for GapCalculator."""

    def test_single_booking_splits_morning(self):
        """Mon 09:00-12:00 with a 10:00-10:30 booking leaves two gaps."""
        calculator = build_calculator(WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)))

        gaps = calculator.compute(
            "dr-ana",
            MONDAY,
            [booking("a1", "2024-11-25 10:00", "2024-11-25 10:30")],
            professional_name="Dra. Ana",
        )

        assert spans(gaps) == [("09:00", "10:00", 60), ("10:30", "12:00", 90)]
        assert all(g.professional_name == "Dra. Ana" for g in gaps)

    def test_day_without_working_period_is_empty(self):
        """A professional with no Sunday row does not work on Sunday."""
        calculator = build_calculator(WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)))

        assert calculator.compute("dr-ana", SUNDAY, []) == []

    def test_short_gaps_are_filtered(self):
        calculator = build_calculator(WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)))
        appointments = [
            booking("a1", "2024-11-25 09:00", "2024-11-25 09:45"),
            booking("a2", "2024-11-25 10:00", "2024-11-25 11:50"),
        ]

        assert calculator.compute("dr-ana", MONDAY, appointments) == []
        relaxed = build_calculator(
            WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)), min_gap_minutes=10
        )
        assert spans(relaxed.compute("dr-ana", MONDAY, appointments)) == [
            ("09:45", "10:00", 15),
            ("11:50", "12:00", 10),
        ]

    def test_split_shifts_are_kept_apart_and_ordered(self):
        """Adjacent periods are not merged, and unsorted rows come out by start."""
        calculator = build_calculator(
            WorkingPeriod("dr-ana", 1, time(14, 0), time(18, 0)),
            WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)),
            WorkingPeriod("dr-ana", 1, time(12, 0), time(13, 0)),
        )

        gaps = calculator.compute("dr-ana", MONDAY, [])

        assert spans(gaps) == [
            ("09:00", "12:00", 180),
            ("12:00", "13:00", 60),
            ("14:00", "18:00", 240),
        ]

    def test_booking_across_periods_clips_both(self):
        calculator = build_calculator(
            WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)),
            WorkingPeriod("dr-ana", 1, time(12, 0), time(15, 0)),
        )

        gaps = calculator.compute(
            "dr-ana", MONDAY, [booking("a1", "2024-11-25 11:00", "2024-11-25 13:00")]
        )

        assert spans(gaps) == [("09:00", "11:00", 120), ("13:00", "15:00", 120)]

    def test_ignores_cancelled_other_professionals_and_other_days(self):
        calculator = build_calculator(WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)))
        appointments = [
            booking("a1", "2024-11-25 09:00", "2024-11-25 10:00", status=AppointmentStatus.CANCELLED),
            booking("a2", "2024-11-25 10:00", "2024-11-25 11:00", professional_id="dr-bia"),
            booking("a3", "2024-11-26 09:00", "2024-11-26 12:00"),
        ]

        assert spans(calculator.compute("dr-ana", MONDAY, appointments)) == [("09:00", "12:00", 180)]

    def test_gaps_never_overlap_bookings(self):
        calculator = build_calculator(
            WorkingPeriod("dr-ana", 1, time(8, 0), time(12, 0)),
            WorkingPeriod("dr-ana", 1, time(13, 0), time(19, 0)),
        )
        appointments = [
            booking("a1", "2024-11-25 08:15", "2024-11-25 09:00"),
            booking("a2", "2024-11-25 09:40", "2024-11-25 10:10"),
            booking("a3", "2024-11-25 11:50", "2024-11-25 13:20"),
            booking("a4", "2024-11-25 16:00", "2024-11-25 17:30"),
        ]

        gaps = calculator.compute("dr-ana", MONDAY, appointments)

        assert gaps
        for gap in gaps:
            assert gap.duration_minutes >= 30
            assert gap.duration_minutes == gap.time_range.duration_minutes()
            for appointment in appointments:
                assert not gap.time_range.overlaps(appointment.time_range)

    def test_gaps_between_walks_each_day(self):
        calculator = build_calculator(
            WorkingPeriod("dr-ana", 1, time(9, 0), time(12, 0)),
            WorkingPeriod("dr-ana", 3, time(14, 0), time(16, 0)),
        )

        gaps = calculator.gaps_between(
            "dr-ana", SUNDAY, pendulum.date(2024, 11, 30), []
        )

        assert [g.start for g in gaps] == [at("2024-11-25 09:00"), at("2024-11-27 14:00")]
