from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from timegrid.schemas.schedule import ScheduleOut, validate_day
from timegrid.services.placement import CreateEntry, DeleteEntry, MutationPlan, UpdateEntry


class DropRequest(BaseModel):
    kind: Literal["create", "move"]
    subject_id: str | None = Field(default=None, max_length=36)
    entry_id: str | None = Field(default=None, max_length=36)
    teacher_id: str = Field(min_length=1, max_length=36)
    day_of_week: int
    period_id: str = Field(min_length=1, max_length=20)
    selected_year_group_id: str | None = Field(default=None, max_length=36)

    @field_validator("day_of_week")
    @classmethod
    def check_day(cls, value: int) -> int:
        return validate_day(value)

    @model_validator(mode="after")
    def check_payload(self) -> "DropRequest":
        if self.kind == "create" and not self.subject_id:
            raise ValueError("subject_id is required for a create drop")
        if self.kind == "move" and not self.entry_id:
            raise ValueError("entry_id is required for a move drop")
        return self


class EntryFieldsOut(BaseModel):
    teacher_id: str
    subject_id: str
    year_group_id: str | None = None
    day_of_week: int
    start_time: str
    end_time: str
    student_ids: list[str]


class MutationOut(BaseModel):
    action: Literal["create", "update", "delete"]
    entry_id: str | None = None
    fields: EntryFieldsOut | None = None


class MutationPlanOut(BaseModel):
    outcome: Literal["create", "replace", "move", "swap", "noop"]
    mutations: list[MutationOut]
    overlap_ids: list[str] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: MutationPlan) -> "MutationPlanOut":
        mutations: list[MutationOut] = []
        for op in plan.mutations:
            if isinstance(op, CreateEntry):
                mutations.append(MutationOut(action="create", fields=EntryFieldsOut(**op.fields.to_payload())))
            elif isinstance(op, UpdateEntry):
                mutations.append(
                    MutationOut(
                        action="update",
                        entry_id=str(op.entry_id),
                        fields=EntryFieldsOut(**op.fields.to_payload()),
                    )
                )
            elif isinstance(op, DeleteEntry):
                mutations.append(MutationOut(action="delete", entry_id=str(op.entry_id)))
        overlaps = plan.resolution.overlaps if plan.resolution is not None else ()
        return cls(
            outcome=plan.outcome.value,
            mutations=mutations,
            overlap_ids=[str(entry.id) for entry in overlaps],
        )


class PlacementApplyOut(BaseModel):
    plan: MutationPlanOut
    schedules: list[ScheduleOut]
