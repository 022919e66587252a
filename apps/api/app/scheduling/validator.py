"""
Schedule validation at three granularities.

Each check is a plain function returning its own list of violations; the
validator runs them in a fixed order and concatenates the results, so every
violation of a batch is reported in one pass and in a stable order.

Order of checks:
  single entry : employee skills -> weekly hours (persisted + this entry)
  day batch    : overlaps per employee -> roster skills per entry -> weekly hours
  week batch   : week span (short-circuits) -> skill coverage per date ->
                 weekly hours per employee -> overlaps per employee/date ->
                 structural integrity per row
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Sequence

from app.core.errors import EmployeeNotFoundError, InvalidShiftError, MalformedTimeError
from app.scheduling import hours, skills
from app.scheduling.hours import DEFAULT_MAX_WEEKLY_HOURS
from app.scheduling.normalization import WeekRow, parse_date
from app.scheduling.overlaps import find_overlaps
from app.scheduling.time_range import TimeRange, parse_time
from app.scheduling.types import (
    Conflict,
    EmployeeProfile,
    HoursSummary,
    ShiftEntry,
    SkillCoverage,
    SkillRef,
    Verdict,
    Violation,
    ViolationKind,
    format_hours,
)
from app.scheduling.work_week import DEFAULT_WORK_WEEK_ANCHOR, WorkWeek

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("date_of_day", "scheduled_start_time", "scheduled_end_time", "status_id", "employee_id")
MAX_WEEK_SPAN_DAYS = 6

SkillNamer = Callable[[Iterable[int]], str]


class ScheduleReader(hours.ExistingHoursSource, Protocol):
    def find_employee_with_skills_and_preference(self, employee_id: int) -> Optional[EmployeeProfile]: ...

    def find_skills_by_ids(self, ids: Iterable[int]) -> list[SkillRef]: ...


def _employee_label(e: EmployeeProfile) -> str:
    return f"Employee {e.full_name} (ID {e.id})"


# ---------- checks ----------
def check_employee_skills(entry: ShiftEntry, employee: EmployeeProfile, skill_names: SkillNamer) -> list[Violation]:
    coverage = skills.evaluate(entry.required_skills, employee.skill_ids)
    if coverage.fully_covered:
        return []
    return [
        Violation(
            kind=ViolationKind.missing_skills,
            message=f"Employee does not possess required skills: {skill_names(coverage.missing)}",
            employee_id=employee.id,
            date=entry.date_of_day,
            detail={"missing_skills": sorted(coverage.missing)},
        )
    ]


def check_weekly_hours(
    employee: EmployeeProfile,
    total: float,
    cap: float,
    label: Optional[str] = None,
) -> list[Violation]:
    if not hours.exceeds_cap(total, cap):
        return []
    prefix = f"{label}: " if label else ""
    return [
        Violation(
            kind=ViolationKind.weekly_hours_exceeded,
            message=f"{prefix}Weekly hours limit exceeded. Total: {format_hours(total)}, Maximum: {format_hours(cap)}",
            employee_id=employee.id,
            detail={"total_hours": total, "max_weekly_hours": cap},
        )
    ]


def check_day_overlaps(
    indexed: Sequence[tuple[int, ShiftEntry]],
    employees: Mapping[int, EmployeeProfile],
) -> tuple[list[Violation], list[Conflict]]:
    """Group one day's entries by employee, then compare every pair."""
    by_employee: dict[int, list[tuple[int, TimeRange]]] = defaultdict(list)
    for idx, e in indexed:
        by_employee[e.employee_id].append((idx, e.scheduled_range))

    violations: list[Violation] = []
    conflicts: list[Conflict] = []
    for employee_id, ranges in by_employee.items():
        found = find_overlaps(ranges)
        if not found:
            continue
        emp = employees[employee_id]
        day = indexed[0][1].date_of_day
        conflicts.append(Conflict(employee_id, emp.full_name, day, tuple(found)))
        for o in found:
            violations.append(
                Violation(
                    kind=ViolationKind.time_overlap,
                    message=(
                        f"{_employee_label(emp)} has overlapping shifts: "
                        f"Schedule #{o.first_index} ({o.first}) overlaps with Schedule #{o.second_index} ({o.second})"
                    ),
                    employee_id=employee_id,
                    date=day,
                    entry_indexes=(o.first_index, o.second_index),
                )
            )
    return violations, conflicts


def check_roster_skills(
    indexed: Sequence[tuple[int, ShiftEntry]],
    roster: frozenset[int],
    skill_names: SkillNamer,
) -> list[Violation]:
    violations = []
    for idx, e in indexed:
        coverage = skills.evaluate(e.required_skills, roster)
        if coverage.missing:
            violations.append(
                Violation(
                    kind=ViolationKind.missing_skills,
                    message=f"Schedule #{idx}: Missing required skills - {skill_names(coverage.missing)}",
                    employee_id=e.employee_id,
                    date=e.date_of_day,
                    entry_indexes=(idx,),
                    detail={"missing_skills": sorted(coverage.missing)},
                )
            )
    return violations


def check_week_span(dates: Iterable[date]) -> list[Violation]:
    distinct = sorted(set(dates))
    if not distinct or (distinct[-1] - distinct[0]).days <= MAX_WEEK_SPAN_DAYS:
        return []
    return [
        Violation(
            kind=ViolationKind.week_span,
            message=(
                "All schedule dates must fall within a single work week (7-day range). "
                f"Found {len(distinct)} dates from {distinct[0].isoformat()} to {distinct[-1].isoformat()}"
            ),
            detail={"distinct_dates": len(distinct), "first": distinct[0].isoformat(), "last": distinct[-1].isoformat()},
        )
    ]


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _check_time_pair(index: int, start: Any, end: Any, label: str) -> list[Violation]:
    def v(kind: ViolationKind, text: str) -> Violation:
        return Violation(kind=kind, message=f"Schedule entry {index}: {text}", entry_indexes=(index,))

    try:
        TimeRange(parse_time(start), parse_time(end))
    except MalformedTimeError:
        return [v(ViolationKind.invalid_time_format, "Invalid time format")]
    except InvalidShiftError:
        return [v(ViolationKind.invalid_time_order, f"{label} end time must be after {label.lower()} start time")]
    return []


def check_structure(row: WeekRow) -> list[Violation]:
    """Required fields, embedded employee linkage, time format and ordering."""
    i, raw = row.index, row.raw
    violations: list[Violation] = []

    def add(kind: ViolationKind, text: str, **detail) -> None:
        violations.append(
            Violation(kind=kind, message=f"Schedule entry {i}: {text}", entry_indexes=(i,), detail=detail)
        )

    if row.shape_error:
        add(ViolationKind.missing_field, row.shape_error)
        return violations

    for f in REQUIRED_FIELDS:
        if _is_blank(raw.get(f)):
            add(ViolationKind.missing_field, f"Missing required field '{f}'", field=f)

    for f in ("employee_id", "status_id"):
        value = raw.get(f)
        if not _is_blank(value) and (isinstance(value, bool) or not str(value).strip().isdigit()):
            add(ViolationKind.missing_field, f"Field '{f}' must be an integer identifier", field=f)

    if not _is_blank(raw.get("date_of_day")):
        try:
            parse_date(raw["date_of_day"])
        except (TypeError, ValueError):
            add(ViolationKind.invalid_date, f"Invalid date '{raw['date_of_day']}'")

    required = raw.get("required_skills")
    if required is not None and (
        not isinstance(required, (list, tuple, set, frozenset))
        or not all(isinstance(s, int) and not isinstance(s, bool) for s in required)
    ):
        add(ViolationKind.missing_field, "Required skills must be a list of skill IDs", field="required_skills")

    embedded = raw.get("employee")
    if embedded is not None:
        if not isinstance(embedded, Mapping) or str(embedded.get("id")) != str(raw.get("employee_id")):
            add(ViolationKind.employee_mismatch, "Employee ID mismatch between employee_id and embedded employee data")
        if not isinstance(embedded, Mapping) or not isinstance(embedded.get("skills"), list):
            add(ViolationKind.employee_skills_invalid, "Employee skills data is missing or invalid")

    start, end = raw.get("scheduled_start_time"), raw.get("scheduled_end_time")
    if not _is_blank(start) and not _is_blank(end):
        violations.extend(_check_time_pair(i, start, end, "Scheduled"))

    a_start, a_end = raw.get("actual_start_time"), raw.get("actual_end_time")
    if not _is_blank(a_start) and not _is_blank(a_end):
        violations.extend(_check_time_pair(i, a_start, a_end, "Actual"))
    elif not _is_blank(a_start) or not _is_blank(a_end):
        try:
            parse_time(a_start if not _is_blank(a_start) else a_end)
        except MalformedTimeError:
            add(ViolationKind.invalid_time_format, "Invalid time format")

    return violations


# ---------- orchestration ----------
class ScheduleValidator:
    def __init__(
        self,
        repository: ScheduleReader,
        default_max_weekly_hours: float = DEFAULT_MAX_WEEKLY_HOURS,
        anchor_weekday: int = DEFAULT_WORK_WEEK_ANCHOR,
    ):
        self.repository = repository
        self.default_max_weekly_hours = default_max_weekly_hours
        self.anchor_weekday = anchor_weekday

    def load_employees(self, employee_ids: Iterable[int]) -> dict[int, EmployeeProfile]:
        """One repository read per distinct employee; an unknown id aborts the whole call."""
        found: dict[int, EmployeeProfile] = {}
        for eid in employee_ids:
            if eid in found:
                continue
            emp = self.repository.find_employee_with_skills_and_preference(eid)
            if emp is None:
                raise EmployeeNotFoundError(eid)
            found[eid] = emp
        return found

    def skill_names(self, ids: Iterable[int]) -> str:
        wanted = sorted(set(ids))
        names = {s.id: s.name for s in self.repository.find_skills_by_ids(wanted)}
        return ", ".join(names.get(sid, f"#{sid}") for sid in wanted)

    def work_week(self, d: date) -> WorkWeek:
        return WorkWeek.containing(d, self.anchor_weekday)

    def _cap(self, employee: EmployeeProfile) -> float:
        return employee.weekly_cap(self.default_max_weekly_hours)

    def validate_entry(self, entry: ShiftEntry) -> Verdict:
        employee = self.load_employees([entry.employee_id])[entry.employee_id]
        week = self.work_week(entry.date_of_day)
        total = hours.weekly_total(
            self.repository,
            entry.employee_id,
            week.start,
            week.end,
            [entry],
            exclude_entry_ids=[entry.id] if entry.id is not None else (),
        )
        cap = self._cap(employee)

        violations = check_employee_skills(entry, employee, self.skill_names) + check_weekly_hours(employee, total, cap)
        return Verdict(
            violations=tuple(violations),
            hours_summary={employee.id: HoursSummary(employee.id, employee.full_name, total, cap)},
        )

    def validate_day(self, day: date, entries: Sequence[ShiftEntry]) -> Verdict:
        indexed = list(enumerate(entries))
        employees = self.load_employees(e.employee_id for e in entries)
        week = self.work_week(day)

        overlap_violations, conflicts = check_day_overlaps(indexed, employees) if indexed else ([], [])

        roster = skills.roster_skills(employees.values())
        required = frozenset().union(*(e.required_skills for e in entries))
        skill_violations = check_roster_skills(indexed, roster, self.skill_names)

        hour_violations: list[Violation] = []
        summary: dict[int, HoursSummary] = {}
        for eid, emp in employees.items():
            updated_ids = [e.id for e in entries if e.employee_id == eid and e.id is not None]
            total = hours.weekly_total(self.repository, eid, week.start, week.end, entries, exclude_entry_ids=updated_ids)
            cap = self._cap(emp)
            summary[eid] = HoursSummary(eid, emp.full_name, total, cap)
            hour_violations += check_weekly_hours(emp, total, cap, label=_employee_label(emp))

        return Verdict(
            violations=tuple(overlap_violations + skill_violations + hour_violations),
            skill_coverage={day: skills.evaluate(required, roster)},
            hours_summary=summary,
            conflicts=tuple(conflicts),
        )

    def validate_week(self, rows: Sequence[WeekRow]) -> Verdict:
        parsed = [(r.index, r.entry) for r in rows if r.entry is not None]

        span = check_week_span(self._row_dates(rows))
        if span:
            logger.warning("Week batch rejected: %s", span[0].message)
            return Verdict(violations=tuple(span))

        employees = self.load_employees(e.employee_id for _, e in parsed)

        coverage_violations, coverage = self._week_skill_coverage(parsed, employees)
        hour_violations, summary = self._week_hours(parsed, employees)
        overlap_violations, conflicts = self._week_overlaps(parsed, employees)
        structural: list[Violation] = []
        for r in rows:
            structural += check_structure(r)

        return Verdict(
            violations=tuple(coverage_violations + hour_violations + overlap_violations + structural),
            skill_coverage=coverage,
            hours_summary=summary,
            conflicts=tuple(conflicts),
        )

    # ---------- week helpers ----------
    @staticmethod
    def _row_dates(rows: Sequence[WeekRow]) -> list[date]:
        dates = []
        for r in rows:
            if r.entry is not None:
                dates.append(r.entry.date_of_day)
                continue
            try:
                dates.append(parse_date(r.raw.get("date_of_day")))
            except (TypeError, ValueError):
                pass
        return dates

    def _week_skill_coverage(
        self,
        parsed: Sequence[tuple[int, ShiftEntry]],
        employees: Mapping[int, EmployeeProfile],
    ) -> tuple[list[Violation], dict[date, SkillCoverage]]:
        by_date: dict[date, list[ShiftEntry]] = defaultdict(list)
        for _, e in parsed:
            by_date[e.date_of_day].append(e)

        violations: list[Violation] = []
        coverage: dict[date, SkillCoverage] = {}
        for d in sorted(by_date):
            day_entries = by_date[d]
            required = frozenset().union(*(e.required_skills for e in day_entries))
            roster = skills.roster_skills(employees[eid] for eid in dict.fromkeys(e.employee_id for e in day_entries))
            c = skills.evaluate(required, roster)
            coverage[d] = c
            if c.missing:
                violations.append(
                    Violation(
                        kind=ViolationKind.missing_skills,
                        message=f"Date {d.isoformat()}: Missing required skills - {self.skill_names(c.missing)}",
                        date=d,
                        detail={"missing_skills": sorted(c.missing)},
                    )
                )
        return violations, coverage

    def _week_hours(
        self,
        parsed: Sequence[tuple[int, ShiftEntry]],
        employees: Mapping[int, EmployeeProfile],
    ) -> tuple[list[Violation], dict[int, HoursSummary]]:
        # The whole week is supplied, so no persisted hours are added.
        totals: dict[int, float] = defaultdict(float)
        for _, e in parsed:
            totals[e.employee_id] += hours.scheduled_hours(e)

        violations: list[Violation] = []
        summary: dict[int, HoursSummary] = {}
        for eid, total in totals.items():
            emp = employees[eid]
            cap = self._cap(emp)
            summary[eid] = HoursSummary(eid, emp.full_name, total, cap)
            if hours.exceeds_cap(total, cap):
                violations.append(
                    Violation(
                        kind=ViolationKind.weekly_hours_exceeded,
                        message=(
                            f"Employee {emp.full_name}: Weekly hours limit exceeded. "
                            f"Scheduled: {format_hours(total)}, Maximum: {format_hours(cap)}"
                        ),
                        employee_id=eid,
                        detail={"total_hours": total, "max_weekly_hours": cap},
                    )
                )
        return violations, summary

    def _week_overlaps(
        self,
        parsed: Sequence[tuple[int, ShiftEntry]],
        employees: Mapping[int, EmployeeProfile],
    ) -> tuple[list[Violation], list[Conflict]]:
        groups: dict[tuple[int, date], list[tuple[int, TimeRange]]] = defaultdict(list)
        for idx, e in parsed:
            groups[(e.employee_id, e.date_of_day)].append((idx, e.scheduled_range))

        violations: list[Violation] = []
        conflicts: list[Conflict] = []
        for (eid, d), ranges in groups.items():
            found = find_overlaps(ranges)
            if not found:
                continue
            emp = employees[eid]
            conflicts.append(Conflict(eid, emp.full_name, d, tuple(found)))
            violations.append(
                Violation(
                    kind=ViolationKind.time_overlap,
                    message=f"Employee {emp.full_name} has overlapping schedules on {d.isoformat()}",
                    employee_id=eid,
                    date=d,
                    entry_indexes=tuple(dict.fromkeys(i for o in found for i in (o.first_index, o.second_index))),
                )
            )
        return violations, conflicts
