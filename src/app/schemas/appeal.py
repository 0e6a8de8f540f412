from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class AppealCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: Annotated[str, Field(min_length=1, max_length=5000)]


class AppealRead(BaseModel):
    id: int
    user_id: int
    message: str
    status: str
    admin_notes: str | None
    reviewed_by: int | None
    reviewed_at: datetime | None
    created_at: datetime
    email: str | None = None
    full_name: str | None = None


class AppealReview(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["approved", "rejected"]
    admin_notes: Annotated[str | None, Field(max_length=5000, default=None)]


class AppealEdit(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["pending", "approved", "rejected"]
    admin_notes: Annotated[str | None, Field(max_length=5000, default=None)]
