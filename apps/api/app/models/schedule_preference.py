import enum
from sqlalchemy import Column, Integer, Enum, DateTime, ForeignKey
from sqlalchemy.sql import func

from app.core.database import Base

class EmploymentType(str, enum.Enum):
    FT = "FT"
    PT = "PT"

class SchedulePreference(Base):
    __tablename__ = "schedule_preferences"

    preference_id = Column(Integer, primary_key=True, autoincrement=True)

    # At most one preference record per employee
    employee_id = Column(
        Integer,
        ForeignKey("employees.employee_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    maximum_hours = Column(Integer, nullable=False)
    employment_type = Column(Enum(EmploymentType, name="employment_type"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
