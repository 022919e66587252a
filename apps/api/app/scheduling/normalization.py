"""
Week-batch input shapes.

A weekly schedule arrives either flat (every row carries its own
`date_of_day`) or grouped by day (`{"date_of_day": ..., "schedules": [...]}`).
Both are reduced to one flat list of rows before any check runs. Each
element is read by its own shape, so a mixed batch loses nothing. Elements
that are not objects are kept as placeholder rows carrying a `shape_error`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Sequence, Union

from app.core.errors import ScheduleError
from app.scheduling.time_range import parse_time
from app.scheduling.types import ShiftEntry

NESTED_FIELD = "schedules"

NOT_AN_OBJECT = "Entry must be an object"
NESTED_NOT_A_LIST = f"Field '{NESTED_FIELD}' must be a list of schedule objects"


@dataclass(frozen=True)
class FlatBatch:
    rows: tuple[Any, ...]


@dataclass(frozen=True)
class GroupedBatch:
    days: tuple[Any, ...]


WeekBatch = Union[FlatBatch, GroupedBatch]


@dataclass(frozen=True)
class WeekRow:
    """One flattened row; `entry` is None when the row cannot be parsed."""

    index: int
    raw: Mapping[str, Any]
    entry: Optional[ShiftEntry]
    shape_error: Optional[str] = None


@dataclass(frozen=True)
class _Flattened:
    raw: dict[str, Any]
    shape_error: Optional[str] = None


def _is_group(element) -> bool:
    return isinstance(element, Mapping) and NESTED_FIELD in element


def detect_batch(data: Sequence[Any]) -> WeekBatch:
    # Tagged by the first element; flattening still reads every element by its own shape.
    if data and _is_group(data[0]):
        return GroupedBatch(tuple(data))
    return FlatBatch(tuple(data))


def _expand(element) -> list[_Flattened]:
    if not isinstance(element, Mapping):
        return [_Flattened({}, NOT_AN_OBJECT)]
    if NESTED_FIELD not in element:
        return [_Flattened(dict(element))]

    day = element.get("date_of_day")
    nested = element[NESTED_FIELD]
    if not isinstance(nested, (list, tuple)):
        return [_Flattened({"date_of_day": day}, NESTED_NOT_A_LIST)]

    out = []
    for r in nested:
        if not isinstance(r, Mapping):
            out.append(_Flattened({"date_of_day": day}, NOT_AN_OBJECT))
            continue
        row = dict(r)
        row["date_of_day"] = day
        out.append(_Flattened(row))
    return out


def _flattened(batch: WeekBatch) -> list[_Flattened]:
    elements = batch.rows if isinstance(batch, FlatBatch) else batch.days
    return [f for element in elements for f in _expand(element)]


def flatten(batch: WeekBatch) -> list[dict[str, Any]]:
    return [f.raw for f in _flattened(batch)]


def parse_date(value) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def _as_int(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_row(raw: Mapping[str, Any]) -> Optional[ShiftEntry]:
    """Best-effort conversion of a raw row; problems are reported by the structural check."""
    employee_id = _as_int(raw.get("employee_id"))
    status_id = _as_int(raw.get("status_id"))
    if employee_id is None or status_id is None:
        return None
    try:
        actual_start = raw.get("actual_start_time")
        actual_end = raw.get("actual_end_time")
        return ShiftEntry(
            id=_as_int(raw.get("id")),
            employee_id=employee_id,
            date_of_day=parse_date(raw.get("date_of_day")),
            scheduled_start_time=parse_time(raw.get("scheduled_start_time")),
            scheduled_end_time=parse_time(raw.get("scheduled_end_time")),
            actual_start_time=parse_time(actual_start) if actual_start else None,
            actual_end_time=parse_time(actual_end) if actual_end else None,
            vci=raw.get("vci"),
            status_id=status_id,
            agree_on_exception=bool(raw.get("agree_on_exception") or False),
            exception_notes=raw.get("exception_notes"),
            required_skills=frozenset(int(s) for s in raw.get("required_skills") or ()),
        )
    except (ScheduleError, ValueError, TypeError):
        return None


def normalize_week(data: Sequence[Any]) -> list[WeekRow]:
    return [
        WeekRow(
            index=i,
            raw=f.raw,
            entry=None if f.shape_error else parse_row(f.raw),
            shape_error=f.shape_error,
        )
        for i, f in enumerate(_flattened(detect_batch(data)))
    ]
