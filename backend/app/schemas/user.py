import datetime
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.schemas.auth import USERNAME_PATTERN, check_email_length


class UserRead(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    created_at: datetime.datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Fields a user may change about themselves. Anything else is rejected."""

    model_config = ConfigDict(extra="forbid")

    username: str | None = Field(default=None, min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr | None = None

    @field_validator("email")
    @classmethod
    def email_length(cls, v: str | None) -> str | None:
        return check_email_length(v)


class DeleteResult(BaseModel):
    affected: int
