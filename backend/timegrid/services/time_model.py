"""Clock-time arithmetic for the timetable grid.

Times travel as ``"HH:MM"`` strings and are compared as integer minutes
since midnight. Intervals are half-open: ``[start, end)``.
"""

from __future__ import annotations

import re

from timegrid.core.exceptions import ParseError

CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")
MINUTES_PER_DAY = 24 * 60


def time_to_minutes(value: str) -> int:
    if not isinstance(value, str):
        raise ParseError(value)
    match = CLOCK_PATTERN.match(value.strip())
    if match is None:
        raise ParseError(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ParseError(value)
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    assert 0 <= minutes < MINUTES_PER_DAY, f"minute offset out of range: {minutes}"
    hours, remainder = divmod(minutes, 60)
    return f"{hours:02d}:{remainder:02d}"


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Touching intervals (end_a == start_b) do not overlap.
    return max(start_a, start_b) < min(end_a, end_b)


def format_duration(total_minutes: int) -> str:
    hours, minutes = divmod(total_minutes, 60)
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"
