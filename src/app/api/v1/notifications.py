from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import NotFoundException
from ...models.notification import Notification
from ...schemas.notification import NotificationResponse, UnreadCount
from ..dependencies import get_current_user

router = APIRouter(prefix="/notifications", tags=["notifications"])


async def _get_own_notification(db: AsyncSession, notification_id: int, user_id: int) -> Notification:
    query = select(Notification).where(Notification.id == notification_id, Notification.user_id == user_id)
    notification = (await db.execute(query)).scalar_one_or_none()
    if notification is None:
        raise NotFoundException("Notification not found")
    return notification


@router.get("", response_model=list[NotificationResponse])
async def get_user_notifications(
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
    unread_only: bool = False,
) -> list[NotificationResponse]:
    """Newest first."""
    query = (
        select(Notification)
        .where(Notification.user_id == current_user["id"])
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))

    notifications = (await db.execute(query.offset(offset).limit(limit))).scalars().all()
    return [
        NotificationResponse(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            metadata=notification.extra,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )
        for notification in notifications
    ]


@router.get("/unread-count", response_model=UnreadCount)
async def get_unread_count(
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> UnreadCount:
    query = select(func.count(Notification.id)).where(
        Notification.user_id == current_user["id"], Notification.is_read.is_(False)
    )
    return UnreadCount(unread_count=(await db.execute(query)).scalar_one())


@router.put("/read-all")
async def mark_all_notifications_read(
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    stmt = (
        update(Notification)
        .where(Notification.user_id == current_user["id"], Notification.is_read.is_(False))
        .values(is_read=True, updated_at=datetime.now(UTC))
    )
    await db.execute(stmt)
    await db.commit()
    return {"message": "All notifications marked as read"}


@router.put("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int,
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    notification = await _get_own_notification(db, notification_id, current_user["id"])
    notification.is_read = True
    notification.updated_at = datetime.now(UTC)
    await db.commit()
    return {"message": "Notification marked as read"}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: int,
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    notification = await _get_own_notification(db, notification_id, current_user["id"])
    await db.delete(notification)
    await db.commit()
    return {"message": "Notification deleted"}


@router.delete("")
async def delete_all_notifications(
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    await db.execute(delete(Notification).where(Notification.user_id == current_user["id"]))
    await db.commit()
    return {"message": "All notifications deleted"}
