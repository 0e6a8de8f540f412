from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

COMMENT_MAX_LENGTH = 2000


class CommentAuthor(BaseModel):
    user_id: int
    full_name: str | None
    avatar_url: str | None = None


class CommentRead(BaseModel):
    id: int
    media_item_id: int
    user_id: int
    content: str
    is_visible: bool
    is_hidden_by_admin: bool
    hidden_at: datetime | None = None
    hide_reason: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    author: CommentAuthor | None = None


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: Annotated[str, Field(min_length=1, max_length=COMMENT_MAX_LENGTH)]


class CommentUpdate(CommentCreate):
    pass


class CommentVisibility(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hidden: bool
    reason: Annotated[str | None, Field(max_length=2000, default=None)]


class ReportCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: Annotated[str, Field(min_length=1, max_length=2000)]


class ReportProfile(BaseModel):
    user_id: int
    full_name: str | None
    email: str


class ReportComment(BaseModel):
    id: int
    media_item_id: int
    user_id: int
    content: str
    is_hidden_by_admin: bool
    author: ReportProfile | None = None


class ReportRead(BaseModel):
    id: int
    comment_id: int
    reporter_id: int
    reason: str
    status: str
    admin_notes: str | None
    reviewed_by: int | None
    reviewed_at: datetime | None
    created_at: datetime
    reporter: ReportProfile | None = None
    comment: ReportComment | None = None


class ReportReview(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Literal["reviewed", "dismissed"]
    admin_notes: Annotated[str | None, Field(max_length=2000, default=None)]
