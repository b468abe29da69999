from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Union

from timegrid.core.exceptions import PreconditionError, ResolutionError
from timegrid.services.entries import EntryFields, EntryId, ScheduleEntry
from timegrid.services.periods import Period
from timegrid.services.slot_resolver import SlotResolution, resolve_slot
from timegrid.services.time_model import minutes_to_time

logger = logging.getLogger(__name__)

SELECT_YEAR_GROUP_MESSAGE = "Select a year group first"


class DropKind(str, Enum):
    create = "create"
    move = "move"


@dataclass(frozen=True)
class DropTarget:
    teacher_id: str
    day_of_week: int
    period: Period


@dataclass(frozen=True)
class DropEvent:
    kind: DropKind
    target: DropTarget
    subject_id: str | None = None
    entry_id: EntryId | None = None

    def __post_init__(self) -> None:
        if self.kind is DropKind.create and not self.subject_id:
            raise ValueError("A create drop needs a subject_id")
        if self.kind is DropKind.move and self.entry_id is None:
            raise ValueError("A move drop needs an entry_id")

    @classmethod
    def create(cls, subject_id: str, target: DropTarget) -> "DropEvent":
        return cls(kind=DropKind.create, target=target, subject_id=subject_id)

    @classmethod
    def move(cls, entry_id: EntryId, target: DropTarget) -> "DropEvent":
        return cls(kind=DropKind.move, target=target, entry_id=entry_id)


@dataclass(frozen=True)
class CreateEntry:
    fields: EntryFields


@dataclass(frozen=True)
class UpdateEntry:
    entry_id: EntryId
    fields: EntryFields


@dataclass(frozen=True)
class DeleteEntry:
    entry_id: EntryId


Mutation = Union[CreateEntry, UpdateEntry, DeleteEntry]


class PlanOutcome(str, Enum):
    create = "create"
    replace = "replace"
    move = "move"
    swap = "swap"
    noop = "noop"


@dataclass(frozen=True)
class MutationPlan:
    outcome: PlanOutcome
    mutations: tuple[Mutation, ...] = ()
    resolution: SlotResolution | None = None

    @property
    def is_noop(self) -> bool:
        return not self.mutations


def target_year_group(selected_year_group_id: str | None, year_group_ids: Sequence[str]) -> str:
    """Year group new entries land in: the active filter, else the first year group."""
    if selected_year_group_id:
        return selected_year_group_id
    if year_group_ids:
        return year_group_ids[0]
    raise PreconditionError(SELECT_YEAR_GROUP_MESSAGE)


def resolve_drop(
    event: DropEvent,
    schedules: Iterable[ScheduleEntry],
    *,
    selected_year_group_id: str | None = None,
    year_group_ids: Sequence[str] = (),
) -> MutationPlan:
    """Turn a drop on the grid into the mutations that realise it.

    Pure: ``schedules`` is only read, nothing is persisted.
    """
    year_group_id = target_year_group(selected_year_group_id, year_group_ids)
    schedules = list(schedules)
    target = event.target
    resolution = resolve_slot(
        schedules,
        teacher_id=target.teacher_id,
        day_of_week=target.day_of_week,
        period_start=target.period.start_minutes,
        period_end=target.period.end_minutes,
        year_group_id=year_group_id,
    )
    if event.kind is DropKind.create:
        return _plan_create(event, resolution, year_group_id)
    return _plan_move(event, resolution, schedules)


def _plan_create(event: DropEvent, resolution: SlotResolution, year_group_id: str) -> MutationPlan:
    target = event.target
    if not resolution.is_full:
        start_time, end_time = resolution.placement_times
        fields = EntryFields(
            teacher_id=target.teacher_id,
            subject_id=event.subject_id,
            year_group_id=year_group_id,
            day_of_week=target.day_of_week,
            start_time=start_time,
            end_time=end_time,
        )
        return MutationPlan(PlanOutcome.create, (CreateEntry(fields),), resolution)

    # A full period is replaced outright: the new entry spans the whole period.
    evicted = resolution.eviction_candidate
    fields = EntryFields(
        teacher_id=target.teacher_id,
        subject_id=event.subject_id,
        year_group_id=year_group_id,
        day_of_week=target.day_of_week,
        start_time=target.period.start,
        end_time=target.period.end,
    )
    logger.debug("Period %s full for teacher %s, replacing %s", target.period.id, target.teacher_id, evicted.id)
    return MutationPlan(PlanOutcome.replace, (DeleteEntry(evicted.id), CreateEntry(fields)), resolution)


def _plan_move(event: DropEvent, resolution: SlotResolution, schedules: list[ScheduleEntry]) -> MutationPlan:
    target = event.target
    dragged = next((entry for entry in schedules if entry.id == event.entry_id), None)
    if dragged is None:
        raise ResolutionError("Dragged entry no longer exists", details={"entry_id": str(event.entry_id)})

    # Dropped back onto a period it already occupies.
    if any(entry.id == dragged.id for entry in resolution.overlaps):
        return MutationPlan(PlanOutcome.noop, (), resolution)

    evicted = resolution.eviction_candidate

    if not resolution.is_full:
        start, end = resolution.placement
        fields = dragged.moved_to(
            teacher_id=target.teacher_id,
            day_of_week=target.day_of_week,
            start_time=minutes_to_time(start),
            end_time=minutes_to_time(end),
        )
        if fields == dragged.fields:
            return MutationPlan(PlanOutcome.noop, (), resolution)
        return MutationPlan(PlanOutcome.move, (UpdateEntry(dragged.id, fields),), resolution)

    # Swap placements; subject, year group and students stay with each entry.
    dragged_fields = dragged.moved_to(
        teacher_id=evicted.teacher_id,
        day_of_week=evicted.day_of_week,
        start_time=evicted.fields.start_time,
        end_time=evicted.fields.end_time,
    )
    evicted_fields = evicted.moved_to(
        teacher_id=dragged.teacher_id,
        day_of_week=dragged.day_of_week,
        start_time=dragged.fields.start_time,
        end_time=dragged.fields.end_time,
    )
    return MutationPlan(
        PlanOutcome.swap,
        (UpdateEntry(dragged.id, dragged_fields), UpdateEntry(evicted.id, evicted_fields)),
        resolution,
    )
