"""
Working-day calendar.

Date stepping counts working days only: weekends (or whatever weekdays are
not configured as working) and holidays are walked over but never counted.
Durations are plain inclusive calendar-day counts and ignore the calendar.
"""

from datetime import date, timedelta
from typing import Iterable

from gantt.exceptions import ValidationError

ONE_DAY = timedelta(days=1)


class CalendarService:
    """Working-day arithmetic for one engine instance."""

    def __init__(
        self,
        working_days: Iterable[int] = (1, 2, 3, 4, 5),
        holidays: Iterable[date] = (),
    ):
        self.working_days = frozenset(working_days)
        if not self.working_days:
            raise ValidationError("At least one working day is required")
        invalid = [d for d in self.working_days if d < 1 or d > 7]
        if invalid:
            raise ValidationError(f"Working days must be ISO weekdays 1-7, got {sorted(invalid)}")
        self.holidays = frozenset(holidays)

    def is_working_day(self, day: date) -> bool:
        return day.isoweekday() in self.working_days and day not in self.holidays

    def add_working_days(self, day: date, days: int) -> date:
        """
        Step forward until ``days`` working days have been consumed.

        The start date itself is never counted, so ``add_working_days(d, 0)``
        is ``d`` even when ``d`` is a weekend. Negative values step backward.
        """
        if days < 0:
            return self.subtract_working_days(day, -days)
        return self._step(day, days, ONE_DAY)

    def subtract_working_days(self, day: date, days: int) -> date:
        """Mirror of add_working_days."""
        if days < 0:
            return self.add_working_days(day, -days)
        return self._step(day, days, -ONE_DAY)

    def _step(self, day: date, days: int, step: timedelta) -> date:
        # Terminates because the working-day set is non-empty and holidays are finite
        result = day
        counted = 0
        while counted < days:
            result += step
            if self.is_working_day(result):
                counted += 1
        return result

    @staticmethod
    def calculate_duration(start: date, end: date) -> int:
        """Inclusive calendar-day count: the same day twice is 1."""
        return (end - start).days + 1

    def count_working_days(self, start: date, end: date) -> int:
        """Working days in the inclusive range [start, end]."""
        count = 0
        current = start
        while current <= end:
            if self.is_working_day(current):
                count += 1
            current += ONE_DAY
        return count

    def next_working_day(self, day: date) -> date:
        """``day`` itself when it is a working day, otherwise the next one."""
        if self.is_working_day(day):
            return day
        return self.add_working_days(day, 1)
