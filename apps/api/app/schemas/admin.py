from pydantic import BaseModel, Field
from datetime import date
from typing import Literal, Optional

class EmployeeCreate(BaseModel):
    name: str
    hire_date: date | None = None
    is_active: bool = True

class SkillCreate(BaseModel):
    name: str
    slug: str | None = None

class StatusCreate(BaseModel):
    name: str

class EmployeeSkillIn(BaseModel):
    skill_id: int
    rating: Optional[int] = Field(default=None, ge=1, le=5)

class EmployeeSkillsAssign(BaseModel):
    skills: list[EmployeeSkillIn] = Field(default_factory=list)

class SchedulePreferenceUpsert(BaseModel):
    maximum_hours: int = Field(gt=0, le=168)
    employment_type: Literal["FT", "PT"]
