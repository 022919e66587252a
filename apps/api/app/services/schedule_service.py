"""
Validate-then-save entry points for shift schedules.

Flow for every save:
  1. resolve employees (unknown id -> EmployeeNotFoundError, nothing written)
  2. run the validator for the granularity
  3. stamp entries through the exception policy
  4. persist in one transaction and build the summary
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from app.core.config import Settings, settings as default_settings
from app.core.errors import BatchRejectedError, ScheduleNotFoundError
from app.repositories.schedule_repository import ScheduleRepository
from app.scheduling import exception_policy, skills
from app.scheduling.exception_policy import Granularity
from app.scheduling.normalization import normalize_week
from app.scheduling.types import ShiftEntry, Verdict
from app.scheduling.validator import ScheduleValidator
from app.scheduling.work_week import WorkWeek
from app.services.locks import KeyedLocks, work_week_locks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveResult:
    entry: ShiftEntry
    verdict: Verdict


@dataclass(frozen=True)
class BatchSaveResult:
    entries: list[ShiftEntry]
    verdict: Verdict
    summary: dict[str, Any] = field(default_factory=dict)


def _exception_count(entries: Iterable[ShiftEntry]) -> int:
    return sum(1 for e in entries if e.agree_on_exception)


def _total_hours(entries: Iterable[ShiftEntry]) -> float:
    return sum(e.scheduled_hours for e in entries)


class ScheduleService:
    def __init__(
        self,
        db: Session,
        settings: Settings = default_settings,
        locks: KeyedLocks = work_week_locks,
    ):
        self.db = db
        self.settings = settings
        self.locks = locks
        self.repository = ScheduleRepository(db)
        self.validator = ScheduleValidator(
            self.repository,
            default_max_weekly_hours=settings.default_max_weekly_hours,
            anchor_weekday=settings.work_week_anchor_weekday,
        )

    def _lock_keys(self, entries: Iterable[ShiftEntry]) -> set[tuple[int, date]]:
        return {(e.employee_id, self.validator.work_week(e.date_of_day).start) for e in entries}

    def _persist(self, entries: Sequence[ShiftEntry]) -> list[ShiftEntry]:
        try:
            saved = self.repository.persist(entries)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return saved

    def _log_outcome(self, what: str, verdict: Verdict, count: int) -> None:
        if verdict.valid:
            logger.info("Saved %s (%d entries), no violations", what, count)
        else:
            logger.warning(
                "Saved %s (%d entries) as exception: %d violation(s)", what, count, len(verdict.violations)
            )

    # ---------- writes ----------
    def validate_and_save(self, entry: ShiftEntry) -> SaveResult:
        """Create (no id) or update (id set) one entry."""
        with self.locks.hold(self._lock_keys([entry])):
            result = self._save_single(entry)
        self._log_single(result)
        return result

    def update_schedule(self, entry_id: int, changes: Mapping[str, Any]) -> SaveResult:
        """
        Apply a partial update and re-run the full single-entry validation.

        The stored row is re-read and merged while holding the locks of both
        the old and the new work week. If the row moved to another
        employee or week between the unlocked and the locked read, the
        locks are released and taken again for the new keys.
        """
        keys = self._lock_keys(self._merge(self.get_schedule(entry_id), changes))
        while True:
            with self.locks.hold(keys):
                current, merged = self._merge(self.get_schedule(entry_id, fresh=True), changes)
                needed = self._lock_keys([current, merged])
                if needed <= keys:
                    result = self._save_single(merged)
                    break
            keys = needed
        self._log_single(result)
        return result

    def _merge(self, current: ShiftEntry, changes: Mapping[str, Any]) -> tuple[ShiftEntry, ShiftEntry]:
        return current, replace(current, **{k: v for k, v in changes.items() if k != "id"})

    def _save_single(self, entry: ShiftEntry) -> SaveResult:
        # Caller holds the work-week lock.
        verdict = self.validator.validate_entry(entry)
        stamped = exception_policy.stamp(entry, verdict, Granularity.single)
        return SaveResult(self._persist([stamped])[0], verdict)

    def _log_single(self, result: SaveResult) -> None:
        saved = result.entry
        self._log_outcome(f"schedule {saved.id} for employee {saved.employee_id}", result.verdict, 1)

    def validate_and_save_day(self, day: date, entries: Sequence[ShiftEntry]) -> BatchSaveResult:
        entries = [e if e.date_of_day == day else replace(e, date_of_day=day) for e in entries]

        with self.locks.hold(self._lock_keys(entries)):
            verdict = self.validator.validate_day(day, entries)
            stamped = exception_policy.apply(entries, verdict, Granularity.day)
            saved = self._persist(stamped)

        self._log_outcome(f"day {day.isoformat()}", verdict, len(saved))
        return BatchSaveResult(saved, verdict, self.day_summary(day, saved, verdict))

    def validate_and_save_week(self, weekly_schedule: Sequence[Mapping[str, Any]]) -> BatchSaveResult:
        rows = normalize_week(weekly_schedule)
        entries = [r.entry for r in rows if r.entry is not None]

        with self.locks.hold(self._lock_keys(entries)):
            verdict = self.validator.validate_week(rows)
            if verdict.structural_violations:
                logger.warning(
                    "Weekly schedule rejected with %d structural violation(s)", len(verdict.structural_violations)
                )
                raise BatchRejectedError(verdict)
            stamped = exception_policy.apply(entries, verdict, Granularity.week)
            saved = self._persist(stamped)

        self._log_outcome("weekly schedule", verdict, len(saved))
        return BatchSaveResult(saved, verdict, self.week_summary(saved, verdict))

    def delete_schedule(self, entry_id: int) -> None:
        self.repository.delete_entry(entry_id)
        self.db.commit()

    def attach_skill(self, entry_id: int, skill_id: int, is_required: bool = True) -> None:
        self.repository.attach_skill(entry_id, skill_id, is_required)
        self.db.commit()

    def detach_skill(self, entry_id: int, skill_id: int) -> None:
        self.repository.detach_skill(entry_id, skill_id)
        self.db.commit()

    # ---------- summaries ----------
    def day_summary(self, day: date, saved: Sequence[ShiftEntry], verdict: Verdict) -> dict[str, Any]:
        coverage = verdict.skill_coverage.get(day)
        return {
            "date": day.isoformat(),
            "total_schedules": len(saved),
            "unique_employees": len({e.employee_id for e in saved}),
            "total_hours": _total_hours(saved),
            "schedules_with_exceptions": _exception_count(saved),
            "required_skills": sorted(coverage.required) if coverage else [],
            "available_skills": sorted(coverage.available) if coverage else [],
            "skill_coverage_complete": coverage.fully_covered if coverage else True,
            "hours_summary": {str(k): v.as_dict() for k, v in verdict.hours_summary.items()},
            "conflicts": [c.as_dict() for c in verdict.conflicts],
        }

    def week_summary(self, saved: Sequence[ShiftEntry], verdict: Verdict) -> dict[str, Any]:
        dates = sorted({e.date_of_day for e in saved})
        employees = {e.employee_id for e in saved}
        return {
            "week_start": dates[0].isoformat() if dates else None,
            "week_end": dates[-1].isoformat() if dates else None,
            "total_schedules": len(saved),
            "unique_employees": len(employees),
            "unique_dates": len(dates),
            "total_hours": _total_hours(saved),
            "schedules_with_exceptions": _exception_count(saved),
            "validation_status": "passed" if verdict.valid else "failed",
            "total_violations": len(verdict.violations),
            "skill_coverage_summary": {d.isoformat(): c.as_dict() for d, c in verdict.skill_coverage.items()},
            "hours_summary": {str(k): v.as_dict() for k, v in verdict.hours_summary.items()},
            "conflicts_summary": [c.as_dict() for c in verdict.conflicts],
        }

    # ---------- reads ----------
    def list_schedules(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        employee_id: Optional[int] = None,
    ) -> list[ShiftEntry]:
        return self.repository.list_entries(start, end, [employee_id] if employee_id is not None else None)

    def get_schedule(self, entry_id: int, fresh: bool = False) -> ShiftEntry:
        entry = self.repository.get_entry(entry_id, fresh=fresh)
        if entry is None:
            raise ScheduleNotFoundError(entry_id)
        return entry

    def weekly_schedule(self, d: date, employee_id: Optional[int] = None) -> tuple[WorkWeek, list[ShiftEntry]]:
        week = self.validator.work_week(d)
        return week, self.list_schedules(week.start, week.end, employee_id)

    def employee_weekly_summary(self, d: date, employee_id: int) -> dict[str, Any]:
        employee = self.validator.load_employees([employee_id])[employee_id]
        week, entries = self.weekly_schedule(d, employee_id)
        cap = employee.weekly_cap(self.settings.default_max_weekly_hours)
        total = _total_hours(entries)
        return {
            "week_start": week.start.isoformat(),
            "week_end": week.end.isoformat(),
            "employee": {"id": employee.id, "full_name": employee.full_name},
            "schedules": [e.as_dict() for e in entries],
            "total_scheduled_hours": total,
            "total_actual_hours": sum(e.actual_hours for e in entries),
            "max_weekly_hours": cap,
            "hours_remaining": max(0.0, cap - total),
            "is_over_limit": total > cap,
        }

    def day_skill_coverage(self, d: date, required: Iterable[int]) -> dict[str, Any]:
        """Coverage of `required` by everyone already scheduled on `d`."""
        entries = self.list_schedules(d, d)
        employees = self.validator.load_employees(e.employee_id for e in entries)
        c = skills.evaluate(required, skills.roster_skills(employees.values()))
        return {
            "date": d.isoformat(),
            "all_skills_covered": c.fully_covered,
            "covered_skills": sorted(c.covered),
            "missing_skills": sorted(c.missing),
        }

    def weekly_analysis(self, d: date, employee_ids: Optional[Sequence[int]] = None) -> dict[str, Any]:
        week = self.validator.work_week(d)
        entries = self.repository.list_entries(week.start, week.end, employee_ids)
        employees = self.validator.load_employees(e.employee_id for e in entries)

        by_date: dict[date, list[ShiftEntry]] = {}
        for e in entries:
            by_date.setdefault(e.date_of_day, []).append(e)

        daily = {}
        for day, day_entries in sorted(by_date.items()):
            required = frozenset().union(*(e.required_skills for e in day_entries))
            roster = skills.roster_skills(employees[e.employee_id] for e in day_entries)
            c = skills.evaluate(required, roster)
            daily[day.isoformat()] = {
                "date": day.isoformat(),
                "total_schedules": len(day_entries),
                "total_employees": len({e.employee_id for e in day_entries}),
                "total_hours": _total_hours(day_entries),
                "skill_coverage_complete": c.fully_covered,
                **{k: v for k, v in c.as_dict().items() if k != "fully_covered"},
                "schedules": [e.as_dict() for e in day_entries],
            }

        return {
            "week_start": week.start.isoformat(),
            "week_end": week.end.isoformat(),
            "total_schedules": len(entries),
            "unique_employees": len({e.employee_id for e in entries}),
            "daily_analysis": daily,
            "week_totals": {
                "total_hours": _total_hours(entries),
                "total_actual_hours": sum(e.actual_hours for e in entries),
                "schedules_with_exceptions": _exception_count(entries),
            },
        }
