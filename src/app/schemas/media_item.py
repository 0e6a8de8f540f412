from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .category import ContentType


class MediaItemBase(BaseModel):
    title: Annotated[str, Field(min_length=1, max_length=255, examples=["Box breathing"])]
    type: ContentType
    description: str | None = None
    content: str | None = None
    file_url: Annotated[str | None, Field(max_length=500, default=None)]
    thumbnail_url: Annotated[str | None, Field(max_length=500, default=None)]
    duration: Annotated[str | None, Field(max_length=20, default=None, examples=["12:30"])]
    read_time: Annotated[str | None, Field(max_length=20, default=None, examples=["5 min"])]
    is_visible: bool = True
    title_translations: dict[str, str] | None = None
    description_translations: dict[str, str] | None = None
    content_translations: dict[str, str] | None = None


class MediaItemRead(MediaItemBase):
    id: int
    category_id: int
    sort_order: int
    created_at: datetime
    updated_at: datetime | None


class MediaItemCreate(MediaItemBase):
    model_config = ConfigDict(extra="forbid")


class MediaItemCreateInternal(MediaItemCreate):
    category_id: int
    sort_order: int


class MediaItemUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Annotated[str | None, Field(min_length=1, max_length=255, default=None)]
    description: str | None = None
    content: str | None = None
    file_url: Annotated[str | None, Field(max_length=500, default=None)]
    thumbnail_url: Annotated[str | None, Field(max_length=500, default=None)]
    duration: Annotated[str | None, Field(max_length=20, default=None)]
    read_time: Annotated[str | None, Field(max_length=20, default=None)]
    is_visible: bool | None = None
    sort_order: int | None = None
    title_translations: dict[str, str] | None = None
    description_translations: dict[str, str] | None = None
    content_translations: dict[str, str] | None = None

    @field_validator("title", "is_visible", "sort_order")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value
