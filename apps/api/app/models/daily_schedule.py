from sqlalchemy import Boolean, Column, Date, ForeignKey, Index, Integer, Text, Time
from sqlalchemy.sql import func
from sqlalchemy.sql.sqltypes import DateTime

from app.core.database import Base

from app.models.employee import Employee  # noqa: F401
from app.models.status import Status  # noqa: F401


class DailySchedule(Base):
    __tablename__ = "daily_schedules"

    daily_schedule_id = Column(Integer, primary_key=True, autoincrement=True)

    employee_id = Column(Integer, ForeignKey("employees.employee_id", ondelete="CASCADE"), nullable=False)
    status_id = Column(Integer, ForeignKey("statuses.status_id", ondelete="CASCADE"), nullable=False)

    date_of_day = Column(Date, nullable=False, index=True)

    scheduled_start_time = Column(Time, nullable=False)
    scheduled_end_time = Column(Time, nullable=False)
    actual_start_time = Column(Time, nullable=True)
    actual_end_time = Column(Time, nullable=True)

    vci = Column(Boolean, nullable=True)
    agree_on_exception = Column(Boolean, nullable=False, default=False)
    exception_notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_daily_schedules_date_employee", "date_of_day", "employee_id"),
    )
