from pydantic import BaseModel, EmailStr, Field, field_validator

from timegrid.schemas.common import normalize_email, normalize_name, validate_color


class TeacherBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    color: str = "#6366f1"

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return normalize_name(value)

    @field_validator("email")
    @classmethod
    def clean_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("color")
    @classmethod
    def clean_color(cls, value: str) -> str:
        return validate_color(value)


class TeacherCreate(TeacherBase):
    pass


class TeacherUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: EmailStr | None = None
    color: str | None = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str | None) -> str | None:
        return None if value is None else normalize_name(value)

    @field_validator("email")
    @classmethod
    def clean_email(cls, value: str | None) -> str | None:
        return None if value is None else normalize_email(value)

    @field_validator("color")
    @classmethod
    def clean_color(cls, value: str | None) -> str | None:
        return None if value is None else validate_color(value)


class TeacherOut(TeacherBase):
    id: str

    model_config = {"from_attributes": True}


class TeacherHoursOut(BaseModel):
    teacher_id: str
    minutes: int
    label: str
