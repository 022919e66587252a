from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.schedules import (
    DaySchedulesCreate,
    ShiftEntryCreate,
    ShiftEntryUpdate,
    SkillAttach,
)
from app.services.schedule_service import ScheduleService

router = APIRouter()


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)


@router.get("")
def list_schedules(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    employee_id: Optional[int] = Query(None),
    service: ScheduleService = Depends(get_schedule_service),
):
    return [e.as_dict() for e in service.list_schedules(start_date, end_date, employee_id)]


@router.post("", status_code=201)
def create_schedule(payload: ShiftEntryCreate, service: ScheduleService = Depends(get_schedule_service)):
    """Create one shift; business-rule violations are saved as an approved exception."""
    result = service.validate_and_save(payload.to_entry())
    return {"data": result.entry.as_dict(), "validation_result": result.verdict.as_dict()}


@router.post("/day", status_code=201)
def create_day_schedules(payload: DaySchedulesCreate, service: ScheduleService = Depends(get_schedule_service)):
    """
    Create all shifts of one day (split shifts allowed).
    Day-level violations flag every shift of the batch as an exception.
    """
    result = service.validate_and_save_day(payload.date_of_day, payload.to_entries())
    return {
        "data": [e.as_dict() for e in result.entries],
        "validation_result": result.verdict.as_dict(),
        "day_summary": result.summary,
    }


@router.get("/coverage")
def get_day_skill_coverage(
    date_of_day: date = Query(..., alias="date"),
    required_skills: list[int] = Query([]),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.day_skill_coverage(date_of_day, required_skills)


@router.get("/weekly/{employee_id}")
def get_weekly_schedule(
    employee_id: int,
    on_date: date = Query(..., alias="date"),
    service: ScheduleService = Depends(get_schedule_service),
):
    week, entries = service.weekly_schedule(on_date, employee_id)
    return {
        "week_start": week.start.isoformat(),
        "week_end": week.end.isoformat(),
        "schedules": [e.as_dict() for e in entries],
    }


@router.get("/weekly/{employee_id}/summary")
def get_weekly_summary(
    employee_id: int,
    on_date: date = Query(..., alias="date"),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.employee_weekly_summary(on_date, employee_id)


@router.get("/{schedule_id}")
def get_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    return service.get_schedule(schedule_id).as_dict()


@router.put("/{schedule_id}")
def update_schedule(
    schedule_id: int,
    payload: ShiftEntryUpdate,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Re-validates the whole entry; a now-compliant entry loses its exception stamp."""
    result = service.update_schedule(schedule_id, payload.changes())
    return {"data": result.entry.as_dict(), "validation_result": result.verdict.as_dict()}


@router.delete("/{schedule_id}", status_code=204)
def delete_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    service.delete_schedule(schedule_id)
    return Response(status_code=204)


@router.post("/{schedule_id}/skills/{skill_id}", status_code=204)
def attach_skill(
    schedule_id: int,
    skill_id: int,
    payload: Optional[SkillAttach] = None,
    service: ScheduleService = Depends(get_schedule_service),
):
    service.attach_skill(schedule_id, skill_id, payload.is_required if payload else True)
    return Response(status_code=204)


@router.delete("/{schedule_id}/skills/{skill_id}", status_code=204)
def detach_skill(schedule_id: int, skill_id: int, service: ScheduleService = Depends(get_schedule_service)):
    service.detach_skill(schedule_id, skill_id)
    return Response(status_code=204)
