from pydantic_settings import BaseSettings

from app.scheduling.hours import DEFAULT_MAX_WEEKLY_HOURS
from app.scheduling.work_week import DEFAULT_WORK_WEEK_ANCHOR


class Settings(BaseSettings):
    database_url: str
    default_max_weekly_hours: float = DEFAULT_MAX_WEEKLY_HOURS
    work_week_anchor_weekday: int = DEFAULT_WORK_WEEK_ANCHOR
    log_level: str = "INFO"

    # Comma-separated list, e.g. "http://localhost:8081,http://127.0.0.1:8081"
    cors_origins: str = ""

    class Config:
        env_file = ".env"

settings = Settings()
