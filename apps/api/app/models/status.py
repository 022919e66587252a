from sqlalchemy import Column, Integer, String

from app.core.database import Base

class Status(Base):
    __tablename__ = "statuses"

    status_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
