from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from ...models.notification import Notification


def create_notification(
    db: AsyncSession,
    user_id: int,
    notification_type: str,
    title: str,
    message: str,
    metadata: dict[str, Any] | None = None,
) -> Notification:
    """Stage a notification on the session. The caller commits it with its own changes."""
    notification = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        extra=metadata,
        is_read=False,
        created_at=datetime.now(UTC),
    )
    db.add(notification)
    return notification
