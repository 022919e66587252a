"""
Errors raised by the schedule validation core and its services.

Business-rule violations are never raised: they are recorded in a verdict and
the entries are stored as exceptions. Everything here aborts the operation.
"""
from typing import Any


class ScheduleError(Exception):
    """Base class for hard scheduling errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class EmployeeNotFoundError(ScheduleError):
    status_code = 404

    def __init__(self, employee_id: Any):
        super().__init__(
            f"Employee with ID {employee_id} not found",
            "EMPLOYEE_NOT_FOUND",
            {"employee_id": employee_id},
        )
        self.employee_id = employee_id


class ScheduleNotFoundError(ScheduleError):
    status_code = 404

    def __init__(self, schedule_id: Any):
        super().__init__(
            f"Schedule with ID {schedule_id} not found",
            "SCHEDULE_NOT_FOUND",
            {"schedule_id": schedule_id},
        )
        self.schedule_id = schedule_id


class MalformedTimeError(ScheduleError, ValueError):
    status_code = 422

    def __init__(self, value: Any):
        super().__init__(
            f"Invalid time format: {value!r} (expected HH:MM:SS)",
            "MALFORMED_TIME",
            {"value": str(value)},
        )
        self.value = value


class InvalidShiftError(ScheduleError, ValueError):
    """A shift entry that breaks its own invariants (end not after start)."""

    status_code = 422

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "INVALID_SHIFT", details)


class BatchRejectedError(ScheduleError):
    """A week batch whose structure cannot be stored; nothing was written."""

    status_code = 422

    def __init__(self, verdict):
        super().__init__(
            "Weekly schedule rejected: " + "; ".join(verdict.messages),
            "BATCH_REJECTED",
            {"violations": [v.as_dict() for v in verdict.violations]},
        )
        self.verdict = verdict
