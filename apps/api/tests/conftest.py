"""Shared fixtures: in-memory SQLite database, seed helpers and an API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, time  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.daily_schedule import DailySchedule  # noqa: E402
from app.models.daily_schedule_skill import DailyScheduleSkill  # noqa: E402,F401
from app.models.employee import Employee  # noqa: E402
from app.models.employee_skill import EmployeeSkill  # noqa: E402
from app.models.schedule_preference import EmploymentType, SchedulePreference  # noqa: E402
from app.models.skill import Skill  # noqa: E402
from app.models.status import Status  # noqa: E402

# 2024-01-16 is a Tuesday: the first day of a work week.
WEEK_START = date(2024, 1, 16)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def db_session(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


class Seeder:
    """Inserts reference data and shifts directly through the ORM."""

    def __init__(self, db):
        self.db = db

    def skill(self, name: str) -> int:
        s = Skill(name=name, slug=name.lower())
        self.db.add(s)
        self.db.commit()
        return s.skill_id

    def status(self, name: str = "Scheduled") -> int:
        st = Status(name=name)
        self.db.add(st)
        self.db.commit()
        return st.status_id

    def employee(self, name: str, skills=(), max_hours=None, employment_type="FT") -> int:
        e = Employee(name=name, is_active=True)
        self.db.add(e)
        self.db.flush()
        for skill_id in skills:
            self.db.add(EmployeeSkill(employee_id=e.employee_id, skill_id=skill_id, rating=3))
        if max_hours is not None:
            self.db.add(
                SchedulePreference(
                    employee_id=e.employee_id,
                    maximum_hours=max_hours,
                    employment_type=EmploymentType(employment_type),
                )
            )
        self.db.commit()
        return e.employee_id

    def shift(self, employee_id: int, day: date, start: time, end: time, status_id: int) -> int:
        row = DailySchedule(
            employee_id=employee_id,
            status_id=status_id,
            date_of_day=day,
            scheduled_start_time=start,
            scheduled_end_time=end,
            agree_on_exception=False,
        )
        self.db.add(row)
        self.db.commit()
        return row.daily_schedule_id


@pytest.fixture
def seed(db_session):
    return Seeder(db_session)


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
