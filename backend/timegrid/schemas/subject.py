from pydantic import BaseModel, Field, field_validator

from timegrid.models.subject import SubjectType
from timegrid.schemas.common import normalize_name, validate_color


class SubjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    color: str = "#3b82f6"
    type: SubjectType = SubjectType.main

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return normalize_name(value)

    @field_validator("color")
    @classmethod
    def clean_color(cls, value: str) -> str:
        return validate_color(value)


class SubjectCreate(SubjectBase):
    pass


class SubjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = None
    type: SubjectType | None = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str | None) -> str | None:
        return None if value is None else normalize_name(value)

    @field_validator("color")
    @classmethod
    def clean_color(cls, value: str | None) -> str | None:
        return None if value is None else validate_color(value)


class SubjectOut(SubjectBase):
    id: str

    model_config = {"from_attributes": True}
