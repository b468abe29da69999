from pydantic import BaseModel, Field, field_validator, model_validator

from timegrid.core.config import get_settings
from timegrid.core.exceptions import ParseError
from timegrid.services.entries import EntryFields
from timegrid.services.time_model import minutes_to_time, time_to_minutes


def validate_clock(value: str) -> str:
    try:
        # Normalises "8:00" to "08:00".
        return minutes_to_time(time_to_minutes(value))
    except ParseError as exc:
        raise ValueError(exc.message) from exc


def validate_day(value: int) -> int:
    school_days = get_settings().school_days
    if not 0 <= value < school_days:
        raise ValueError(f"day_of_week must be between 0 and {school_days - 1}")
    return value


def dedupe_ids(value: list[str]) -> list[str]:
    return list(dict.fromkeys(item.strip() for item in value if item.strip()))


class ScheduleBase(BaseModel):
    teacher_id: str = Field(min_length=1, max_length=36)
    subject_id: str = Field(min_length=1, max_length=36)
    year_group_id: str | None = Field(default=None, max_length=36)
    day_of_week: int
    start_time: str
    end_time: str
    student_ids: list[str] = Field(default_factory=list, max_length=500)

    @field_validator("day_of_week")
    @classmethod
    def check_day(cls, value: int) -> int:
        return validate_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value: str) -> str:
        return validate_clock(value)

    @field_validator("student_ids")
    @classmethod
    def clean_student_ids(cls, value: list[str]) -> list[str]:
        return dedupe_ids(value)

    @field_validator("year_group_id")
    @classmethod
    def blank_year_group(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def check_order(self) -> "ScheduleBase":
        if time_to_minutes(self.end_time) <= time_to_minutes(self.start_time):
            raise ValueError("end_time must be after start_time")
        return self

    def to_fields(self) -> EntryFields:
        return EntryFields(
            teacher_id=self.teacher_id,
            subject_id=self.subject_id,
            year_group_id=self.year_group_id,
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            student_ids=tuple(self.student_ids),
        )


class ScheduleCreate(ScheduleBase):
    pass


class ScheduleUpdate(BaseModel):
    teacher_id: str | None = Field(default=None, min_length=1, max_length=36)
    subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    year_group_id: str | None = Field(default=None, max_length=36)
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    student_ids: list[str] | None = Field(default=None, max_length=500)

    @field_validator("day_of_week")
    @classmethod
    def check_day(cls, value: int | None) -> int | None:
        return None if value is None else validate_day(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def check_time(cls, value: str | None) -> str | None:
        return None if value is None else validate_clock(value)

    @field_validator("student_ids")
    @classmethod
    def clean_student_ids(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else dedupe_ids(value)


class ScheduleOut(ScheduleBase):
    id: str

    model_config = {"from_attributes": True}
