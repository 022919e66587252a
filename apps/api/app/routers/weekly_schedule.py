from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.routers.schedule import get_schedule_service
from app.schemas.schedules import WeeklyScheduleSubmit
from app.services.schedule_service import ScheduleService

router = APIRouter()


@router.post("/process", status_code=201)
def process_weekly_schedule(payload: WeeklyScheduleSubmit, service: ScheduleService = Depends(get_schedule_service)):
    """
    Validate and store a full work week.

    Accepts day groups:
      [{"date_of_day": "2024-01-16", "schedules": [{"employee_id": 1, ...}, ...]}, ...]
    or flat rows (legacy):
      [{"date_of_day": "2024-01-16", "employee_id": 1, ...}, ...]
    """
    result = service.validate_and_save_week(payload.weekly_schedule)
    return {
        "success": True,
        "message": "Weekly schedule processed successfully",
        "data": {
            "schedules": [e.as_dict() for e in result.entries],
            "week_summary": result.summary,
        },
        "validation_result": result.verdict.as_dict(),
    }


@router.get("/analysis")
def get_weekly_analysis(
    on_date: date = Query(..., alias="date"),
    employee_ids: Optional[list[int]] = Query(None),
    service: ScheduleService = Depends(get_schedule_service),
):
    return {"success": True, "data": service.weekly_analysis(on_date, employee_ids)}
