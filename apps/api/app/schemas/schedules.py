from datetime import date, time
from typing import Any, ClassVar, Optional

from pydantic import BaseModel, Field, model_validator

from app.scheduling.types import ShiftEntry
from app.services.validators import validate_optional_time_range, validate_time_range


class DayScheduleEntry(BaseModel):
    """One shift inside a day batch; the date comes from the enclosing day."""

    employee_id: int
    scheduled_start_time: time
    scheduled_end_time: time
    actual_start_time: Optional[time] = None
    actual_end_time: Optional[time] = None
    vci: Optional[bool] = None
    status_id: int
    agree_on_exception: bool = False
    exception_notes: Optional[str] = Field(default=None, max_length=1000)
    required_skills: list[int] = Field(default_factory=list)
    id: Optional[int] = None

    @model_validator(mode="after")
    def _check_times(self):
        validate_time_range(self.scheduled_start_time, self.scheduled_end_time, "scheduled")
        validate_optional_time_range(self.actual_start_time, self.actual_end_time, "actual")
        return self

    def to_entry(self, date_of_day: date) -> ShiftEntry:
        return ShiftEntry(
            id=self.id,
            employee_id=self.employee_id,
            date_of_day=date_of_day,
            scheduled_start_time=self.scheduled_start_time,
            scheduled_end_time=self.scheduled_end_time,
            actual_start_time=self.actual_start_time,
            actual_end_time=self.actual_end_time,
            vci=self.vci,
            status_id=self.status_id,
            agree_on_exception=self.agree_on_exception,
            exception_notes=self.exception_notes,
            required_skills=frozenset(self.required_skills),
        )


class ShiftEntryCreate(DayScheduleEntry):
    date_of_day: date

    def to_entry(self, date_of_day: Optional[date] = None) -> ShiftEntry:
        return super().to_entry(date_of_day or self.date_of_day)


class DaySchedulesCreate(BaseModel):
    date_of_day: date
    schedules: list[DayScheduleEntry] = Field(min_length=1)

    def to_entries(self) -> list[ShiftEntry]:
        return [s.to_entry(self.date_of_day) for s in self.schedules]


class ShiftEntryUpdate(BaseModel):
    """Partial update. Only the actual times, `vci`, the note and the skill list may be sent as null."""

    NULLABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"actual_start_time", "actual_end_time", "vci", "exception_notes", "required_skills"}
    )

    employee_id: Optional[int] = None
    date_of_day: Optional[date] = None
    scheduled_start_time: Optional[time] = None
    scheduled_end_time: Optional[time] = None
    actual_start_time: Optional[time] = None
    actual_end_time: Optional[time] = None
    vci: Optional[bool] = None
    status_id: Optional[int] = None
    exception_notes: Optional[str] = Field(default=None, max_length=1000)
    required_skills: Optional[list[int]] = None

    @model_validator(mode="after")
    def _check_nulls(self):
        cleared = sorted(
            f for f in self.model_fields_set if f not in self.NULLABLE_FIELDS and getattr(self, f) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self

    @model_validator(mode="after")
    def _check_times(self):
        validate_optional_time_range(self.scheduled_start_time, self.scheduled_end_time, "scheduled")
        validate_optional_time_range(self.actual_start_time, self.actual_end_time, "actual")
        return self

    def changes(self) -> dict[str, Any]:
        out = self.model_dump(exclude_unset=True)
        if "required_skills" in out:
            out["required_skills"] = frozenset(out["required_skills"] or ())
        return out


class WeeklyScheduleSubmit(BaseModel):
    """
    Rows are kept raw: either flat entries with their own `date_of_day`, or
    day groups `{"date_of_day": ..., "schedules": [...]}`. Structural problems
    are reported by the weekly validator, not rejected here.
    """

    weekly_schedule: list[dict[str, Any]] = Field(min_length=1)


class SkillAttach(BaseModel):
    is_required: bool = True
