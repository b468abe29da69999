from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from timegrid.models.user import UserRole
from timegrid.schemas.common import normalize_email, normalize_name


class Credentials(BaseModel):
    email: EmailStr
    # bcrypt only looks at the first 72 bytes.
    password: str = Field(min_length=8, max_length=72)

    @field_validator("email")
    @classmethod
    def clean_email(cls, value: str) -> str:
        return normalize_email(value)


class UserCreate(Credentials):
    name: str = Field(min_length=1, max_length=200)
    role: UserRole = UserRole.scheduler

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return normalize_name(value)


class UserLogin(Credentials):
    pass


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class Token(BaseModel):
    access_token: str
    token_type: str
    user: UserOut
