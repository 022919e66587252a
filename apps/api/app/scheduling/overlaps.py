from __future__ import annotations

from typing import Sequence

from app.scheduling.time_range import TimeRange
from app.scheduling.types import Overlap


def find_overlaps(ranges: Sequence[tuple[int, TimeRange]]) -> list[Overlap]:
    """
    All-pairs overlap check for one employee's shifts on one day.

    `ranges` holds (input index, time range) pairs; results keep input order
    so the same batch always yields the same messages.
    """
    found: list[Overlap] = []
    for i in range(len(ranges)):
        for j in range(i + 1, len(ranges)):
            a_idx, a = ranges[i]
            b_idx, b = ranges[j]
            if a.overlaps(b):
                found.append(Overlap(first_index=a_idx, first=a, second_index=b_idx, second=b))
    return found
