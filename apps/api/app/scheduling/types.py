from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Optional

from app.scheduling.time_range import TimeRange, format_time


def format_hours(hours: float) -> str:
    return f"{hours:g}h"


@dataclass(frozen=True)
class ShiftEntry:
    """One proposed or persisted block of work for one employee on one date."""

    employee_id: int
    date_of_day: date
    scheduled_start_time: time
    scheduled_end_time: time
    status_id: int
    actual_start_time: Optional[time] = None
    actual_end_time: Optional[time] = None
    vci: Optional[bool] = None
    agree_on_exception: bool = False
    exception_notes: Optional[str] = None
    required_skills: frozenset[int] = frozenset()
    id: Optional[int] = None

    def __post_init__(self):
        # Raises InvalidShiftError when end <= start
        TimeRange(self.scheduled_start_time, self.scheduled_end_time)
        if self.actual_start_time is not None and self.actual_end_time is not None:
            TimeRange(self.actual_start_time, self.actual_end_time)
        if not isinstance(self.required_skills, frozenset):
            object.__setattr__(self, "required_skills", frozenset(self.required_skills))

    @property
    def scheduled_range(self) -> TimeRange:
        return TimeRange(self.scheduled_start_time, self.scheduled_end_time)

    @property
    def scheduled_hours(self) -> float:
        return self.scheduled_range.duration()

    @property
    def actual_hours(self) -> float:
        if self.actual_start_time is None or self.actual_end_time is None:
            return 0.0
        return TimeRange(self.actual_start_time, self.actual_end_time).duration()

    @property
    def is_update(self) -> bool:
        return self.id is not None

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "date_of_day": self.date_of_day.isoformat(),
            "scheduled_start_time": format_time(self.scheduled_start_time),
            "scheduled_end_time": format_time(self.scheduled_end_time),
            "actual_start_time": format_time(self.actual_start_time) if self.actual_start_time else None,
            "actual_end_time": format_time(self.actual_end_time) if self.actual_end_time else None,
            "vci": self.vci,
            "status_id": self.status_id,
            "agree_on_exception": self.agree_on_exception,
            "exception_notes": self.exception_notes,
            "required_skills": sorted(self.required_skills),
            "scheduled_hours": self.scheduled_hours,
            "actual_hours": self.actual_hours,
        }


@dataclass(frozen=True)
class SkillRef:
    id: int
    name: str


@dataclass(frozen=True)
class EmployeeProfile:
    """Read-only view of an employee: skills (id -> rating) and hour preference."""

    id: int
    full_name: str
    skills: dict[int, Optional[int]] = field(default_factory=dict)
    max_weekly_hours: Optional[float] = None
    employment_type: Optional[str] = None

    @property
    def skill_ids(self) -> frozenset[int]:
        return frozenset(self.skills)

    def weekly_cap(self, default: float) -> float:
        return default if self.max_weekly_hours is None else self.max_weekly_hours


class ViolationKind(str, enum.Enum):
    missing_skills = "missing_skills"
    weekly_hours_exceeded = "weekly_hours_exceeded"
    time_overlap = "time_overlap"
    missing_field = "missing_field"
    employee_mismatch = "employee_mismatch"
    employee_skills_invalid = "employee_skills_invalid"
    invalid_time_format = "invalid_time_format"
    invalid_time_order = "invalid_time_order"
    invalid_date = "invalid_date"
    week_span = "week_span"


STRUCTURAL_KINDS = frozenset(
    {
        ViolationKind.missing_field,
        ViolationKind.employee_mismatch,
        ViolationKind.employee_skills_invalid,
        ViolationKind.invalid_time_format,
        ViolationKind.invalid_time_order,
        ViolationKind.invalid_date,
        ViolationKind.week_span,
    }
)


@dataclass(frozen=True)
class Violation:
    kind: ViolationKind
    message: str
    employee_id: Optional[int] = None
    date: Optional[date] = None
    entry_indexes: tuple[int, ...] = ()
    detail: dict[str, Any] = field(default_factory=dict)

    @property
    def is_structural(self) -> bool:
        return self.kind in STRUCTURAL_KINDS

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "employee_id": self.employee_id,
            "date": self.date.isoformat() if self.date else None,
            "entry_indexes": list(self.entry_indexes),
            "detail": self.detail,
        }


@dataclass(frozen=True)
class SkillCoverage:
    required: frozenset[int]
    available: frozenset[int]
    covered: frozenset[int]
    missing: frozenset[int]

    @property
    def fully_covered(self) -> bool:
        return not self.missing

    def as_dict(self) -> dict[str, Any]:
        return {
            "required_skills": sorted(self.required),
            "available_skills": sorted(self.available),
            "covered_skills": sorted(self.covered),
            "missing_skills": sorted(self.missing),
            "fully_covered": self.fully_covered,
        }


@dataclass(frozen=True)
class HoursSummary:
    employee_id: int
    employee_name: str
    total_scheduled_hours: float
    max_weekly_hours: float

    @property
    def hours_remaining(self) -> float:
        return max(0.0, self.max_weekly_hours - self.total_scheduled_hours)

    @property
    def is_over_limit(self) -> bool:
        return self.total_scheduled_hours > self.max_weekly_hours

    def as_dict(self) -> dict[str, Any]:
        return {
            "employee_name": self.employee_name,
            "total_scheduled_hours": self.total_scheduled_hours,
            "max_weekly_hours": self.max_weekly_hours,
            "hours_remaining": self.hours_remaining,
            "is_over_limit": self.is_over_limit,
        }


@dataclass(frozen=True)
class Overlap:
    """Two entries of one employee on one date whose times overlap."""

    first_index: int
    first: TimeRange
    second_index: int
    second: TimeRange

    def as_dict(self) -> dict[str, Any]:
        return {
            "schedule_1": {"index": self.first_index, "start": format_time(self.first.start), "end": format_time(self.first.end)},
            "schedule_2": {"index": self.second_index, "start": format_time(self.second.start), "end": format_time(self.second.end)},
        }


@dataclass(frozen=True)
class Conflict:
    employee_id: int
    employee_name: str
    date: date
    overlaps: tuple[Overlap, ...]
    type: str = "time_overlap"

    def as_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "date": self.date.isoformat(),
            "type": self.type,
            "details": [o.as_dict() for o in self.overlaps],
        }


@dataclass(frozen=True)
class Verdict:
    """Outcome of one validation call. Valid iff there are no violations."""

    violations: tuple[Violation, ...] = ()
    skill_coverage: dict[date, SkillCoverage] = field(default_factory=dict)
    hours_summary: dict[int, HoursSummary] = field(default_factory=dict)
    conflicts: tuple[Conflict, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    @property
    def structural_violations(self) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if v.is_structural)

    def of_kind(self, kind: ViolationKind) -> tuple[Violation, ...]:
        return tuple(v for v in self.violations if v.kind == kind)

    def as_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "violations": self.messages,
            "violation_details": [v.as_dict() for v in self.violations],
            "skill_coverage": {d.isoformat(): c.as_dict() for d, c in self.skill_coverage.items()},
            "hours_summary": {str(eid): s.as_dict() for eid, s in self.hours_summary.items()},
            "conflicts": [c.as_dict() for c in self.conflicts],
        }
