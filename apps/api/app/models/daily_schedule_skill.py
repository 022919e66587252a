from sqlalchemy import Boolean, Column, ForeignKey, Integer

from app.core.database import Base

from app.models.daily_schedule import DailySchedule  # noqa: F401
from app.models.skill import Skill  # noqa: F401


class DailyScheduleSkill(Base):
    __tablename__ = "daily_schedule_skills"

    daily_schedule_id = Column(
        Integer,
        ForeignKey("daily_schedules.daily_schedule_id", ondelete="CASCADE"),
        primary_key=True,
    )

    skill_id = Column(
        Integer,
        ForeignKey("skills.skill_id", ondelete="CASCADE"),
        primary_key=True,
    )

    is_required = Column(Boolean, nullable=False, default=True)
