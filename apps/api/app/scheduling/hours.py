from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol

from app.scheduling.types import ShiftEntry

# Cap used when an employee has no scheduling preference on file.
DEFAULT_MAX_WEEKLY_HOURS = 40


class ExistingHoursSource(Protocol):
    def sum_scheduled_hours(
        self,
        employee_id: int,
        date_range_start: date,
        date_range_end: date,
        exclude_date: Optional[date] = None,
        exclude_entry_ids: Iterable[int] = (),
    ) -> float: ...


def scheduled_hours(entry: ShiftEntry) -> float:
    return entry.scheduled_range.duration()


def proposed_total(
    employee_id: int,
    week_start: date,
    week_end: date,
    entries: Iterable[ShiftEntry],
) -> float:
    """Hours of the in-memory entries for one employee inside the window."""
    return sum(
        scheduled_hours(e)
        for e in entries
        if e.employee_id == employee_id and week_start <= e.date_of_day <= week_end
    )


def weekly_total(
    source: ExistingHoursSource,
    employee_id: int,
    week_start: date,
    week_end: date,
    new_entries: Iterable[ShiftEntry],
    exclude_entry_ids: Iterable[int] = (),
) -> float:
    """
    Persisted hours in [week_start, week_end] plus the proposed entries.

    Entries being updated are already persisted; their ids must be excluded so
    the stored copy is not counted next to the proposed one.
    """
    existing = source.sum_scheduled_hours(
        employee_id,
        week_start,
        week_end,
        exclude_entry_ids=tuple(exclude_entry_ids),
    )
    return existing + proposed_total(employee_id, week_start, week_end, new_entries)


def exceeds_cap(total: float, cap: float) -> bool:
    # Hitting the cap exactly is allowed.
    return total > cap
