from sqlalchemy import Column, ForeignKey, Integer

from app.core.database import Base

class EmployeeSkill(Base):
    __tablename__ = "employee_skills"

    employee_id = Column(
        Integer,
        ForeignKey("employees.employee_id", ondelete="CASCADE"),
        primary_key=True,
    )

    skill_id = Column(
        Integer,
        ForeignKey("skills.skill_id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Proficiency, e.g. 1..5
    rating = Column(Integer, nullable=True)
