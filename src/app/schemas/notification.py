from datetime import datetime
from typing import Any

from pydantic import BaseModel


class NotificationBase(BaseModel):
    type: str
    title: str
    message: str
    metadata: dict[str, Any] | None = None


class NotificationResponse(NotificationBase):
    id: int
    is_read: bool
    created_at: datetime


class UnreadCount(BaseModel):
    unread_count: int
