from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import ScheduleError
from app.core.logging import configure_logging
from app.routers.admin import router as admin_router
from app.routers.schedule import router as schedule_router
from app.routers.weekly_schedule import router as weekly_schedule_router

configure_logging(settings.log_level)

app = FastAPI(title="Shift Schedule API")

# Comma-separated list, e.g.:
# CORS_ORIGINS="http://localhost:8081,http://127.0.0.1:8081"
allow_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]

# Fallback for local dev if env var not set
if not allow_origins:
  allow_origins = [
    "http://localhost:8081",
    "http://127.0.0.1:8081",
  ]

app.add_middleware(
  CORSMiddleware,
  allow_origins=allow_origins,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)


@app.exception_handler(ScheduleError)
def schedule_error_handler(request: Request, exc: ScheduleError):
  return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(schedule_router, prefix="/daily-schedules", tags=["daily-schedules"])
app.include_router(weekly_schedule_router, prefix="/weekly-schedules", tags=["weekly-schedules"])
app.include_router(admin_router, prefix="/admin", tags=["admin"])

@app.get("/health")
def health():
  return {"status": "ok"}
