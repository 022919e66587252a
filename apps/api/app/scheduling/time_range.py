from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time

from app.core.errors import InvalidShiftError, MalformedTimeError

TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def parse_time(value) -> time:
    """Parse an HH:MM:SS (or HH:MM) string; `time` values pass through."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise MalformedTimeError(value)
    s = value.strip()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError:
            continue
    raise MalformedTimeError(value)


def format_time(t: time) -> str:
    return t.strftime("%H:%M:%S")


def _to_seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


@dataclass(frozen=True)
class TimeRange:
    """A same-day [start, end) span; end is always after start."""

    start: time
    end: time

    def __post_init__(self):
        if self.end <= self.start:
            raise InvalidShiftError(
                f"End time {format_time(self.end)} must be after start time {format_time(self.start)}",
                {"start": format_time(self.start), "end": format_time(self.end)},
            )

    @classmethod
    def parse(cls, start, end) -> TimeRange:
        return cls(parse_time(start), parse_time(end))

    def duration(self) -> float:
        """Length in fractional hours."""
        return (_to_seconds(self.end) - _to_seconds(self.start)) / 3600.0

    def overlaps(self, other: TimeRange) -> bool:
        # Touching endpoints (09:00-13:00 vs 13:00-17:00) do not overlap.
        return self.start < other.end and other.start < self.end

    def __str__(self) -> str:
        return f"{format_time(self.start)}-{format_time(self.end)}"
