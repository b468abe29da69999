from pydantic import BaseModel, Field, field_validator

from timegrid.schemas.common import normalize_name


class YearGroupBase(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    sort_order: int = Field(default=0, ge=0, le=100)

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return normalize_name(value)


class YearGroupCreate(YearGroupBase):
    pass


class YearGroupUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    sort_order: int | None = Field(default=None, ge=0, le=100)

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str | None) -> str | None:
        return None if value is None else normalize_name(value)


class YearGroupOut(YearGroupBase):
    id: str

    model_config = {"from_attributes": True}
