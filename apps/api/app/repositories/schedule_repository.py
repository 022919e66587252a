from __future__ import annotations

from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from sqlalchemy import and_, delete, select
from sqlalchemy.orm import Session

from app.core.errors import ScheduleNotFoundError
from app.models.daily_schedule import DailySchedule
from app.models.daily_schedule_skill import DailyScheduleSkill
from app.models.employee import Employee
from app.models.employee_skill import EmployeeSkill
from app.models.schedule_preference import SchedulePreference
from app.models.skill import Skill
from app.scheduling.time_range import TimeRange
from app.scheduling.types import EmployeeProfile, ShiftEntry, SkillRef

_ENTRY_FIELDS = (
    "employee_id",
    "date_of_day",
    "scheduled_start_time",
    "scheduled_end_time",
    "actual_start_time",
    "actual_end_time",
    "vci",
    "status_id",
    "agree_on_exception",
    "exception_notes",
)


class ScheduleRepository:
    """
    Storage access for the validation core.

    Reads return plain ShiftEntry / EmployeeProfile values; writes only flush.
    Committing (or rolling back) is left to the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    # ---------- employees / skills ----------
    def find_employee_with_skills_and_preference(self, employee_id: int) -> Optional[EmployeeProfile]:
        emp = self.db.get(Employee, employee_id)
        if not emp:
            return None

        skill_rows = self.db.execute(
            select(EmployeeSkill.skill_id, EmployeeSkill.rating).where(EmployeeSkill.employee_id == employee_id)
        ).all()
        pref = (
            self.db.execute(select(SchedulePreference).where(SchedulePreference.employee_id == employee_id))
            .scalars()
            .first()
        )

        return EmployeeProfile(
            id=emp.employee_id,
            full_name=emp.name,
            skills={int(sid): rating for sid, rating in skill_rows},
            max_weekly_hours=pref.maximum_hours if pref else None,
            employment_type=pref.employment_type.value if pref else None,
        )

    def find_skills_by_ids(self, ids: Iterable[int]) -> list[SkillRef]:
        wanted = list(ids)
        if not wanted:
            return []
        rows = self.db.execute(
            select(Skill.skill_id, Skill.name).where(Skill.skill_id.in_(wanted)).order_by(Skill.skill_id)
        ).all()
        return [SkillRef(id=sid, name=name) for sid, name in rows]

    # ---------- hours ----------
    def sum_scheduled_hours(
        self,
        employee_id: int,
        date_range_start: date,
        date_range_end: date,
        exclude_date: Optional[date] = None,
        exclude_entry_ids: Iterable[int] = (),
    ) -> float:
        q = select(DailySchedule.scheduled_start_time, DailySchedule.scheduled_end_time).where(
            and_(
                DailySchedule.employee_id == employee_id,
                DailySchedule.date_of_day >= date_range_start,
                DailySchedule.date_of_day <= date_range_end,
            )
        )
        if exclude_date is not None:
            q = q.where(DailySchedule.date_of_day != exclude_date)
        excluded = list(exclude_entry_ids)
        if excluded:
            q = q.where(DailySchedule.daily_schedule_id.not_in(excluded))

        return sum(TimeRange(start, end).duration() for start, end in self.db.execute(q).all())

    # ---------- entries ----------
    def _required_skills(self, entry_ids: Sequence[int]) -> dict[int, frozenset[int]]:
        if not entry_ids:
            return {}
        found: dict[int, set[int]] = defaultdict(set)
        rows = self.db.execute(
            select(DailyScheduleSkill.daily_schedule_id, DailyScheduleSkill.skill_id).where(
                DailyScheduleSkill.daily_schedule_id.in_(list(entry_ids))
            )
        ).all()
        for entry_id, skill_id in rows:
            found[entry_id].add(skill_id)
        return {eid: frozenset(s) for eid, s in found.items()}

    def _to_entries(self, rows: Sequence[DailySchedule]) -> list[ShiftEntry]:
        required = self._required_skills([r.daily_schedule_id for r in rows])
        return [
            ShiftEntry(
                id=r.daily_schedule_id,
                required_skills=required.get(r.daily_schedule_id, frozenset()),
                **{f: getattr(r, f) for f in _ENTRY_FIELDS},
            )
            for r in rows
        ]

    def get_entry(self, entry_id: int, fresh: bool = False) -> Optional[ShiftEntry]:
        """`fresh` reloads the row from the database instead of the session's identity map."""
        row = self.db.get(DailySchedule, entry_id, populate_existing=fresh)
        if not row:
            return None
        return self._to_entries([row])[0]

    def list_entries(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        employee_ids: Optional[Iterable[int]] = None,
    ) -> list[ShiftEntry]:
        q = select(DailySchedule)
        if start is not None:
            q = q.where(DailySchedule.date_of_day >= start)
        if end is not None:
            q = q.where(DailySchedule.date_of_day <= end)
        if employee_ids is not None:
            q = q.where(DailySchedule.employee_id.in_(list(employee_ids)))
        q = q.order_by(DailySchedule.date_of_day, DailySchedule.scheduled_start_time, DailySchedule.daily_schedule_id)
        return self._to_entries(self.db.execute(q).scalars().all())

    def persist(self, entries: Sequence[ShiftEntry]) -> list[ShiftEntry]:
        """
        Bulk create/update, then attach (new) or sync (updated) required skills
        keyed by the stored identity.
        """
        rows: list[tuple[ShiftEntry, DailySchedule]] = []
        for e in entries:
            values = {f: getattr(e, f) for f in _ENTRY_FIELDS}
            if e.id is None:
                row = DailySchedule(**values)
                self.db.add(row)
            else:
                row = self.db.get(DailySchedule, e.id)
                if not row:
                    raise ScheduleNotFoundError(e.id)
                for k, v in values.items():
                    setattr(row, k, v)
            rows.append((e, row))
        self.db.flush()

        saved = []
        for e, row in rows:
            current = self._required_skills([row.daily_schedule_id]).get(row.daily_schedule_id, frozenset())
            stale = current - e.required_skills
            if stale:
                self.db.execute(
                    delete(DailyScheduleSkill).where(
                        and_(
                            DailyScheduleSkill.daily_schedule_id == row.daily_schedule_id,
                            DailyScheduleSkill.skill_id.in_(sorted(stale)),
                        )
                    )
                )
            for skill_id in sorted(e.required_skills - current):
                self.db.add(DailyScheduleSkill(daily_schedule_id=row.daily_schedule_id, skill_id=skill_id, is_required=True))
            saved.append(replace(e, id=row.daily_schedule_id))
        self.db.flush()
        return saved

    def delete_entry(self, entry_id: int) -> None:
        row = self.db.get(DailySchedule, entry_id)
        if not row:
            raise ScheduleNotFoundError(entry_id)
        self.db.execute(delete(DailyScheduleSkill).where(DailyScheduleSkill.daily_schedule_id == entry_id))
        self.db.delete(row)
        self.db.flush()

    def attach_skill(self, entry_id: int, skill_id: int, is_required: bool = True) -> None:
        if not self.db.get(DailySchedule, entry_id):
            raise ScheduleNotFoundError(entry_id)
        link = self.db.get(DailyScheduleSkill, (entry_id, skill_id))
        if link:
            link.is_required = is_required
        else:
            self.db.add(DailyScheduleSkill(daily_schedule_id=entry_id, skill_id=skill_id, is_required=is_required))
        self.db.flush()

    def detach_skill(self, entry_id: int, skill_id: int) -> None:
        self.db.execute(
            delete(DailyScheduleSkill).where(
                and_(
                    DailyScheduleSkill.daily_schedule_id == entry_id,
                    DailyScheduleSkill.skill_id == skill_id,
                )
            )
        )
        self.db.flush()
