"""
Work-week boundaries.

Hour caps are accounted per work week, a 7-day period that starts on a fixed
anchor weekday (Tuesday by default) instead of the calendar week.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

# Python weekday() numbering: Monday=0 ... Sunday=6. Work weeks run Tuesday..Monday.
DEFAULT_WORK_WEEK_ANCHOR = 1


def week_start(d: date, anchor: int = DEFAULT_WORK_WEEK_ANCHOR) -> date:
    """Most recent anchor weekday on or before `d`."""
    return d - timedelta(days=(d.weekday() - anchor) % 7)


def week_end(d: date, anchor: int = DEFAULT_WORK_WEEK_ANCHOR) -> date:
    """Last day of the work week containing `d` (inclusive)."""
    return week_start(d, anchor) + timedelta(days=6)


@dataclass(frozen=True)
class WorkWeek:
    start: date
    end: date

    @classmethod
    def containing(cls, d: date, anchor: int = DEFAULT_WORK_WEEK_ANCHOR) -> WorkWeek:
        start = week_start(d, anchor)
        return cls(start, start + timedelta(days=6))

    def __contains__(self, d: date) -> bool:
        return self.start <= d <= self.end

    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range(7)]
