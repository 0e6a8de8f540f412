from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.db.database import Base


class MediaItem(Base):
    """A single video, audio track or text guide inside a category."""

    __tablename__ = "media_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True, init=False)
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # video, audio, guide

    title_translations: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
    description_translations: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
    content: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)  # guide body
    content_translations: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)

    file_url: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    thumbnail_url: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    duration: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)  # "12:30"
    read_time: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)  # "5 min"

    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_visible: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default_factory=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
