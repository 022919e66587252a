from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.admin import (
    EmployeeCreate,
    EmployeeSkillsAssign,
    SchedulePreferenceUpsert,
    SkillCreate,
    StatusCreate,
)

from app.models.employee import Employee
from app.models.employee_skill import EmployeeSkill
from app.models.schedule_preference import EmploymentType, SchedulePreference
from app.models.skill import Skill
from app.models.status import Status

router = APIRouter()


def _slugify(name: str) -> str:
    return "-".join(name.strip().lower().split())


def _employee_out(e: Employee) -> dict:
    return {
        "employee_id": e.employee_id,
        "name": e.name,
        "hire_date": e.hire_date.isoformat() if e.hire_date else None,
        "is_active": e.is_active,
    }


def _skill_out(s: Skill) -> dict:
    return {"skill_id": s.skill_id, "name": s.name, "slug": s.slug}


def _get_employee_or_404(db: Session, employee_id: int) -> Employee:
    e = db.get(Employee, employee_id)
    if not e:
        raise HTTPException(status_code=404, detail="Employee not found")
    return e


# --- Employees ---
@router.post("/employees", status_code=201)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    e = Employee(name=payload.name, hire_date=payload.hire_date, is_active=payload.is_active)
    db.add(e)
    db.commit()
    db.refresh(e)
    return _employee_out(e)


@router.get("/employees")
def list_employees(db: Session = Depends(get_db)):
    rows = db.execute(select(Employee).order_by(Employee.employee_id)).scalars().all()
    return [_employee_out(e) for e in rows]


@router.put("/employees/{employee_id}/skills")
def assign_employee_skills(employee_id: int, payload: EmployeeSkillsAssign, db: Session = Depends(get_db)):
    """Replace the employee's skill set (with optional 1-5 rating)."""
    _get_employee_or_404(db, employee_id)

    skill_ids = [s.skill_id for s in payload.skills]
    if skill_ids:
        found = set(db.execute(select(Skill.skill_id).where(Skill.skill_id.in_(skill_ids))).scalars().all())
        missing = sorted(set(skill_ids) - found)
        if missing:
            raise HTTPException(status_code=404, detail=f"Skill(s) not found: {missing}")

    db.execute(delete(EmployeeSkill).where(EmployeeSkill.employee_id == employee_id))
    for s in payload.skills:
        db.add(EmployeeSkill(employee_id=employee_id, skill_id=s.skill_id, rating=s.rating))
    db.commit()

    return {
        "ok": True,
        "employee_id": employee_id,
        "skills": [{"skill_id": s.skill_id, "rating": s.rating} for s in payload.skills],
    }


@router.put("/employees/{employee_id}/schedule-preference")
def upsert_schedule_preference(employee_id: int, payload: SchedulePreferenceUpsert, db: Session = Depends(get_db)):
    _get_employee_or_404(db, employee_id)

    pref = db.execute(
        select(SchedulePreference).where(SchedulePreference.employee_id == employee_id)
    ).scalar_one_or_none()
    if pref is None:
        pref = SchedulePreference(employee_id=employee_id)
        db.add(pref)

    pref.maximum_hours = payload.maximum_hours
    pref.employment_type = EmploymentType(payload.employment_type)
    db.commit()

    return {
        "employee_id": employee_id,
        "maximum_hours": pref.maximum_hours,
        "employment_type": pref.employment_type.value,
    }


# --- Skills ---
@router.post("/skills", status_code=201)
def create_skill(payload: SkillCreate, db: Session = Depends(get_db)):
    slug = payload.slug or _slugify(payload.name)
    exists = db.execute(select(Skill).where(Skill.slug == slug)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail=f"Skill with slug '{slug}' already exists")

    s = Skill(name=payload.name, slug=slug)
    db.add(s)
    db.commit()
    db.refresh(s)
    return _skill_out(s)


@router.get("/skills")
def list_skills(db: Session = Depends(get_db)):
    rows = db.execute(select(Skill).order_by(Skill.skill_id)).scalars().all()
    return [_skill_out(s) for s in rows]


# --- Statuses ---
@router.post("/statuses", status_code=201)
def create_status(payload: StatusCreate, db: Session = Depends(get_db)):
    exists = db.execute(select(Status).where(Status.name == payload.name)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail=f"Status '{payload.name}' already exists")

    st = Status(name=payload.name)
    db.add(st)
    db.commit()
    db.refresh(st)
    return {"status_id": st.status_id, "name": st.name}


@router.get("/statuses")
def list_statuses(db: Session = Depends(get_db)):
    rows = db.execute(select(Status).order_by(Status.status_id)).scalars().all()
    return [{"status_id": st.status_id, "name": st.name} for st in rows]
