from __future__ import annotations

import enum
from dataclasses import replace
from typing import Sequence

from app.scheduling.types import ShiftEntry, Verdict

NOTE_SEPARATOR = "; "


class Granularity(str, enum.Enum):
    single = "single"
    day = "day"
    week = "week"


NOTE_PREFIXES = {
    Granularity.single: "Business rule violations: ",
    Granularity.day: "Business rule violations: ",
    Granularity.week: "Weekly validation violations: ",
}


def exception_note(verdict: Verdict, granularity: Granularity = Granularity.single) -> str:
    return NOTE_PREFIXES[granularity] + NOTE_SEPARATOR.join(verdict.messages)


def stamp(entry: ShiftEntry, verdict: Verdict, granularity: Granularity = Granularity.single) -> ShiftEntry:
    """
    Invalid verdict: the entry is stored as an approved exception with a note.
    Valid verdict on an update: any earlier exception stamp is cleared.
    Valid verdict on a new entry: left as submitted.
    """
    if not verdict.valid:
        return replace(entry, agree_on_exception=True, exception_notes=exception_note(verdict, granularity))
    if entry.is_update:
        return replace(entry, agree_on_exception=False, exception_notes=None)
    return entry


def apply(entries: Sequence[ShiftEntry], verdict: Verdict, granularity: Granularity) -> list[ShiftEntry]:
    return [stamp(e, verdict, granularity) for e in entries]
