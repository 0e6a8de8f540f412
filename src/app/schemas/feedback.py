from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

FeedbackType = Literal["problem", "result", "suggestion"]
FeedbackStatus = Literal["pending", "reviewed", "resolved", "dismissed"]


class FeedbackCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: FeedbackType
    message: Annotated[str, Field(min_length=1, max_length=5000)]
    email: Annotated[str | None, Field(max_length=255, default=None)]
    user_name: Annotated[str | None, Field(max_length=120, default=None)]


class FeedbackCreateInternal(FeedbackCreate):
    user_id: int | None = None


class FeedbackRead(BaseModel):
    id: int
    user_id: int | None
    email: str | None
    user_name: str | None
    type: str
    message: str
    status: str
    admin_notes: str | None
    reviewed_by: int | None
    reviewed_at: datetime | None
    created_at: datetime
    updated_at: datetime | None


class FeedbackUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: FeedbackStatus | None = None
    admin_notes: Annotated[str | None, Field(max_length=5000, default=None)]

    @field_validator("status")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class FeedbackUpdateInternal(FeedbackUpdate):
    reviewed_by: int
    reviewed_at: datetime


class FeedbackFilters(BaseModel):
    user_id: int | None = None
    status: FeedbackStatus | None = None
    type: FeedbackType | None = None
    date_from: date | None = None
    date_to: date | None = None
