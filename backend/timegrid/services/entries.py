"""Value types shared by the slot resolver, placement engine and edit session."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, fields as dataclass_fields, replace
from typing import Union

from timegrid.services.time_model import minutes_to_time, time_to_minutes


@dataclass(frozen=True)
class Persisted:
    """Identifier issued by the schedule store."""

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Pending:
    """Identifier of an entry that only exists in a local edit session."""

    value: str

    @classmethod
    def new(cls) -> "Pending":
        return cls(uuid.uuid4().hex)

    def __str__(self) -> str:
        return f"pending:{self.value}"


EntryId = Union[Persisted, Pending]


@dataclass(frozen=True)
class EntryFields:
    teacher_id: str
    subject_id: str
    year_group_id: str | None
    day_of_week: int
    start_time: str
    end_time: str
    student_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "student_ids", tuple(sorted(self.student_ids)))
        object.__setattr__(self, "start_time", minutes_to_time(time_to_minutes(self.start_time)))
        object.__setattr__(self, "end_time", minutes_to_time(time_to_minutes(self.end_time)))
        if time_to_minutes(self.end_time) <= time_to_minutes(self.start_time):
            raise ValueError(f"Entry must end after it starts ({self.start_time}-{self.end_time})")

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    def to_payload(self) -> dict:
        return {
            "teacher_id": self.teacher_id,
            "subject_id": self.subject_id,
            "year_group_id": self.year_group_id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "student_ids": list(self.student_ids),
        }

    @classmethod
    def from_payload(cls, data: dict) -> "EntryFields":
        return cls(
            teacher_id=data["teacher_id"],
            subject_id=data["subject_id"],
            year_group_id=data.get("year_group_id"),
            day_of_week=int(data["day_of_week"]),
            start_time=data["start_time"],
            end_time=data["end_time"],
            student_ids=tuple(data.get("student_ids") or ()),
        )


DIFF_FIELDS = tuple(item.name for item in dataclass_fields(EntryFields))


@dataclass(frozen=True)
class ScheduleEntry:
    id: EntryId
    fields: EntryFields

    @property
    def teacher_id(self) -> str:
        return self.fields.teacher_id

    @property
    def subject_id(self) -> str:
        return self.fields.subject_id

    @property
    def year_group_id(self) -> str | None:
        return self.fields.year_group_id

    @property
    def day_of_week(self) -> int:
        return self.fields.day_of_week

    @property
    def start_minutes(self) -> int:
        return self.fields.start_minutes

    @property
    def end_minutes(self) -> int:
        return self.fields.end_minutes

    @property
    def is_pending(self) -> bool:
        return isinstance(self.id, Pending)

    def moved_to(self, *, teacher_id: str, day_of_week: int, start_time: str, end_time: str) -> EntryFields:
        return replace(
            self.fields,
            teacher_id=teacher_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
        )

    @classmethod
    def from_payload(cls, data: dict) -> "ScheduleEntry":
        return cls(id=Persisted(str(data["id"])), fields=EntryFields.from_payload(data))


def changed_fields(before: EntryFields, after: EntryFields) -> list[str]:
    return [name for name in DIFF_FIELDS if getattr(before, name) != getattr(after, name)]
