"""Find room for an entry inside one period of a teacher's day.

The resolver looks at every entry the teacher has on the target weekday,
regardless of year group: an entry without a year group applies to the
whole school and still occupies the slot.

Free space is searched greedily from the start of the period, so the
earliest gap always wins and several bookings in one period stack left
to right. When the period is fully covered the resolver names the entry
that should give way: the first overlap (in start order) that belongs to
the requested year group, otherwise the earliest overlap.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from timegrid.services.entries import ScheduleEntry
from timegrid.services.time_model import intervals_overlap, minutes_to_time


@dataclass(frozen=True)
class SlotResolution:
    period_start: int
    period_end: int
    overlaps: tuple[ScheduleEntry, ...]
    placement: tuple[int, int] | None
    eviction_candidate: ScheduleEntry | None

    @property
    def is_full(self) -> bool:
        return self.placement is None

    @property
    def placement_times(self) -> tuple[str, str] | None:
        if self.placement is None:
            return None
        start, end = self.placement
        return minutes_to_time(start), minutes_to_time(end)


def entries_for_slot(schedules: Iterable[ScheduleEntry], *, teacher_id: str, day_of_week: int) -> list[ScheduleEntry]:
    return [entry for entry in schedules if entry.teacher_id == teacher_id and entry.day_of_week == day_of_week]


def find_overlaps(entries: Iterable[ScheduleEntry], start: int, end: int) -> list[ScheduleEntry]:
    overlaps = [entry for entry in entries if intervals_overlap(start, end, entry.start_minutes, entry.end_minutes)]
    # sorted() is stable, so equal starts keep their input order.
    return sorted(overlaps, key=lambda entry: entry.start_minutes)


def find_gap(overlaps: Iterable[ScheduleEntry], start: int, end: int) -> tuple[int, int] | None:
    """Return the earliest uncovered ``[gap_start, gap_end)`` inside ``[start, end)``.

    ``overlaps`` must already be sorted by start time.
    """
    position = start
    for entry in overlaps:
        if entry.start_minutes > position:
            return position, min(entry.start_minutes, end)
        position = max(position, entry.end_minutes)
    if position < end:
        return position, end
    return None


def pick_eviction_candidate(overlaps: list[ScheduleEntry], year_group_id: str | None) -> ScheduleEntry | None:
    if not overlaps:
        return None
    for entry in overlaps:
        if entry.year_group_id == year_group_id:
            return entry
    return overlaps[0]


def resolve_slot(
    schedules: Iterable[ScheduleEntry],
    *,
    teacher_id: str,
    day_of_week: int,
    period_start: int,
    period_end: int,
    year_group_id: str | None,
) -> SlotResolution:
    candidates = entries_for_slot(schedules, teacher_id=teacher_id, day_of_week=day_of_week)
    overlaps = find_overlaps(candidates, period_start, period_end)
    placement = find_gap(overlaps, period_start, period_end)
    eviction_candidate = None
    if placement is None:
        eviction_candidate = pick_eviction_candidate(overlaps, year_group_id)
    return SlotResolution(
        period_start=period_start,
        period_end=period_end,
        overlaps=tuple(overlaps),
        placement=placement,
        eviction_candidate=eviction_candidate,
    )
