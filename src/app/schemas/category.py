from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ContentType = Literal["video", "audio", "guide"]


class CategoryBase(BaseModel):
    name: Annotated[str, Field(min_length=1, max_length=120, examples=["Breathing"])]
    type: ContentType
    description: Annotated[str | None, Field(default=None)]
    icon: Annotated[str | None, Field(max_length=80, default=None, examples=["wind"])]
    is_visible: bool = True
    name_translations: dict[str, str] | None = None
    description_translations: dict[str, str] | None = None


class CategoryRead(CategoryBase):
    id: int
    sort_order: int
    created_at: datetime
    updated_at: datetime | None


class CategoryCreate(CategoryBase):
    model_config = ConfigDict(extra="forbid")


class CategoryCreateInternal(CategoryCreate):
    sort_order: int


class CategoryUpdate(BaseModel):
    """Type is fixed at creation, like the media items inside it."""

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str | None, Field(min_length=1, max_length=120, default=None)]
    description: str | None = None
    icon: Annotated[str | None, Field(max_length=80, default=None)]
    is_visible: bool | None = None
    sort_order: int | None = None
    name_translations: dict[str, str] | None = None
    description_translations: dict[str, str] | None = None

    @field_validator("name", "is_visible", "sort_order")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class VisibilityUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    is_visible: bool
