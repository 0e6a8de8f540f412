from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from ..core.config import settings

PASSWORD_MIN = settings.MIN_PASSWORD_LENGTH


class UserCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: Annotated[EmailStr, Field(examples=["user@calmbreath.app"])]
    password: Annotated[str, Field(min_length=PASSWORD_MIN, max_length=128, examples=["Str1ngst!"])]
    full_name: Annotated[str | None, Field(max_length=120, examples=["Ana Silva"], default=None)]


class ProfileRead(BaseModel):
    user_id: int
    email: str
    full_name: str | None
    avatar_url: str | None
    email_verified: bool
    has_paid: bool
    paid_at: datetime | None
    is_banned: bool
    banned_at: datetime | None
    ban_reason: str | None
    role: str
    is_admin: bool
    created_at: datetime


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: Annotated[str | None, Field(max_length=120, default=None)]
    avatar_url: Annotated[str | None, Field(max_length=500, default=None)]


class PasswordChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    new_password: Annotated[str, Field(min_length=PASSWORD_MIN, max_length=128)]
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "PasswordChange":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class EmailChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class SignupResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: ProfileRead
    verification_sent: bool
    dev_code: str | None = None


class AdminUserRead(BaseModel):
    user_id: int
    email: str
    full_name: str | None
    has_paid: bool
    is_banned: bool
    banned_at: datetime | None
    ban_reason: str | None
    email_verified: bool
    role: str
    created_at: datetime


class AdminUserFilters(BaseModel):
    search: str | None = None
    role: Literal["admin", "user"] | None = None
    payment: Literal["paid", "unpaid"] | None = None
    status: Literal["active", "banned"] | None = None
    date_from: date | None = None
    date_to: date | None = None


class BanToggle(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: Annotated[str | None, Field(max_length=2000, default=None)]
