"""Tests for weekly hour accounting."""

from datetime import date, time

from app.scheduling import hours
from app.scheduling.types import ShiftEntry

WEEK_START = date(2024, 1, 16)
WEEK_END = date(2024, 1, 22)


class FakeSource:
    """Returns a fixed persisted total and records the arguments it got."""

    def __init__(self, existing: float):
        self.existing = existing
        self.calls = []

    def sum_scheduled_hours(self, employee_id, date_range_start, date_range_end, exclude_date=None, exclude_entry_ids=()):
        self.calls.append((employee_id, date_range_start, date_range_end, tuple(exclude_entry_ids)))
        return self.existing


def shift(day, start, end, employee_id=1, id=None):
    return ShiftEntry(
        id=id,
        employee_id=employee_id,
        date_of_day=day,
        scheduled_start_time=start,
        scheduled_end_time=end,
        status_id=1,
    )


class TestProposedTotal:
    def test_only_counts_employee_inside_window(self):
        entries = [
            shift(date(2024, 1, 16), time(9), time(17)),
            shift(date(2024, 1, 17), time(9), time(13), employee_id=2),
            shift(date(2024, 1, 23), time(9), time(17)),  # next week
            shift(date(2024, 1, 22), time(13), time(14, 30)),
        ]
        assert hours.proposed_total(1, WEEK_START, WEEK_END, entries) == 9.5


class TestWeeklyTotal:
    def test_existing_plus_proposed(self):
        source = FakeSource(24)
        total = hours.weekly_total(source, 1, WEEK_START, WEEK_END, [shift(WEEK_START, time(9), time(17))])
        assert total == 32
        assert source.calls == [(1, WEEK_START, WEEK_END, ())]

    def test_additive_over_entries(self):
        a = shift(date(2024, 1, 17), time(8), time(12))
        b = shift(date(2024, 1, 18), time(12), time(18))
        source = FakeSource(10)
        assert hours.weekly_total(source, 1, WEEK_START, WEEK_END, [a, b]) == 10 + 4 + 6

    def test_excluded_ids_are_passed_to_source(self):
        source = FakeSource(0)
        hours.weekly_total(source, 1, WEEK_START, WEEK_END, [], exclude_entry_ids=[7, 9])
        assert source.calls[0][3] == (7, 9)


class TestExceedsCap:
    def test_exactly_at_cap_is_allowed(self):
        assert not hours.exceeds_cap(40, 40)

    def test_one_minute_over_is_flagged(self):
        assert hours.exceeds_cap(40 + 1 / 60, 40)

    def test_under_cap(self):
        assert not hours.exceeds_cap(12.5, 20)
