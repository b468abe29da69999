from pydantic import BaseModel, Field, field_validator

from timegrid.schemas.common import normalize_name


class StudentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    year_group_id: str | None = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return normalize_name(value)


class StudentOut(StudentCreate):
    id: str

    model_config = {"from_attributes": True}
