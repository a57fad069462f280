"""
Core business logic for calculating free gaps in a professional's day.

Pure domain logic without any external dependencies (no database, no I/O).
"""

from typing import Iterable, List

from pendulum import Date

from .busy import BusyIntervalCollector
from .calendar import WorkingCalendarResolver
from .interval_math import overlaps, subtract
from .models import Appointment, Gap, TimeRange

MIN_GAP_MINUTES = 30


class GapCalculator:
    """
    Calculates free gaps from working periods and bookings.

    Algorithm:
    1. Resolve the working periods of the day
    2. Collect the day's busy intervals
    3. Subtract busy time from each period independently
    4. Drop sub-ranges shorter than the minimum gap
    5. Concatenate in period order
    """

    def __init__(
        self,
        resolver: WorkingCalendarResolver,
        collector: BusyIntervalCollector | None = None,
        min_gap_minutes: int = MIN_GAP_MINUTES,
    ):
        self.resolver = resolver
        self.collector = collector or BusyIntervalCollector(timezone=resolver.timezone)
        self.min_gap_minutes = min_gap_minutes

    def compute(
        self,
        professional_id: str,
        day: Date,
        appointments: Iterable[Appointment],
        professional_name: str = "",
    ) -> List[Gap]:
        """
        Find the free gaps of one professional on one date.

        Args:
            professional_id: Professional whose agenda is inspected
            day: Calendar date
            appointments: Booking snapshot; may contain other days and professionals
            professional_name: Copied onto each Gap for display

        Returns:
            Gaps ordered by working period, then by start
        """
        working_ranges = self.resolver.ranges_for(professional_id, day)

        if not working_ranges:
            return []

        busy_ranges = [
            busy.time_range
            for busy in self.collector.collect(professional_id, day, appointments)
        ]

        gaps: List[Gap] = []
        for period in working_ranges:
            gaps.extend(
                Gap.from_range(free, professional_id, professional_name)
                for free in self._free_ranges(period, busy_ranges)
            )

        return gaps

    def gaps_between(
        self,
        professional_id: str,
        start_date: Date,
        end_date: Date,
        appointments: Iterable[Appointment],
        professional_name: str = "",
    ) -> List[Gap]:
        """Compute gaps for every date from ``start_date`` to ``end_date`` inclusive."""
        snapshot = list(appointments)
        gaps: List[Gap] = []

        current = start_date
        while current <= end_date:
            gaps.extend(self.compute(professional_id, current, snapshot, professional_name))
            current = current.add(days=1)

        return gaps

    def _free_ranges(self, period: TimeRange, busy_ranges: List[TimeRange]) -> List[TimeRange]:
        within_period = [busy for busy in busy_ranges if overlaps(period, busy)]

        return [
            free for free in subtract(period, within_period)
            if free.duration_minutes() >= self.min_gap_minutes
        ]
