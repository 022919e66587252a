from datetime import time
from typing import Optional

def validate_time_range(start: time, end: time, label: str = "scheduled") -> None:
    # Same-day shifts only (no overnight blocks)
    if end <= start:
        raise ValueError(f"{label}_end_time must be after {label}_start_time")

def validate_optional_time_range(start: Optional[time], end: Optional[time], label: str = "actual") -> None:
    if start is not None and end is not None:
        validate_time_range(start, end, label)
