from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class EmailSend(BaseModel):
    model_config = ConfigDict(extra="forbid")

    to: EmailStr
    subject: Annotated[str, Field(min_length=1, max_length=255)]
    html: Annotated[str, Field(min_length=1)]
    sender: Annotated[str | None, Field(alias="from", default=None)]


class ModerationEmail(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    type: Literal["ban", "moderation"]
    reason: Annotated[str | None, Field(max_length=2000, default=None)]


class EmailSent(BaseModel):
    success: bool = True
    message_id: str | None = None
