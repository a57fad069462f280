"""
Resolution of recurring weekly working hours into concrete daily ranges.
"""

from typing import Iterable, List

from pendulum import Date

from .models import TimeRange, WorkingPeriod, weekday_of


class WorkingCalendarResolver:
    """
    Answers "when does this professional work on this date?".

    A date without matching rows means the professional does not work that
    day; the result is an empty list, not an error.
    """

    def __init__(self, working_periods: Iterable[WorkingPeriod], timezone: str = "America/Sao_Paulo"):
        self._periods = list(working_periods)
        self.timezone = timezone

    def periods_for(self, professional_id: str, day: Date) -> List[WorkingPeriod]:
        """Return the professional's rows for the weekday of ``day``, ordered by start."""
        weekday = weekday_of(day)
        matching = [
            period for period in self._periods
            if period.professional_id == professional_id and period.weekday == weekday
        ]
        return sorted(matching, key=lambda p: p.start)

    def ranges_for(self, professional_id: str, day: Date) -> List[TimeRange]:
        """Return the working periods of ``day`` as concrete time ranges."""
        return [
            period.on(day, self.timezone)
            for period in self.periods_for(professional_id, day)
        ]

    def works_on(self, professional_id: str, day: Date) -> bool:
        return bool(self.periods_for(professional_id, day))
