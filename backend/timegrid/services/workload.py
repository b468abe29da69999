from collections.abc import Iterable

from timegrid.services.entries import ScheduleEntry


def weekly_minutes(entries: Iterable[ScheduleEntry], teacher_id: str) -> int:
    return sum(entry.end_minutes - entry.start_minutes for entry in entries if entry.teacher_id == teacher_id)
