import logging
from datetime import UTC, datetime, time, timedelta
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastcrud import PaginatedListResponse, compute_offset, paginated_response
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import settings
from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import NotFoundException
from ...core.utils.email import EmailSender, feedback_email, get_email_sender, send_quietly
from ...crud.crud_feedbacks import crud_feedbacks
from ...schemas.feedback import (
    FeedbackCreate,
    FeedbackCreateInternal,
    FeedbackFilters,
    FeedbackRead,
    FeedbackUpdate,
    FeedbackUpdateInternal,
)
from ..dependencies import get_current_admin, get_optional_user

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feedbacks"])


@router.post("/feedbacks", response_model=FeedbackRead, status_code=201)
async def write_feedback(
    feedback: FeedbackCreate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
    current_user: Annotated[dict | None, Depends(get_optional_user)],
) -> dict:
    values = feedback.model_dump()
    user_id = None
    if current_user is not None:
        user_id = current_user["id"]
        values["email"] = values["email"] or current_user["email"]
        values["user_name"] = values["user_name"] or current_user["full_name"]

    feedback_internal = FeedbackCreateInternal(**values, user_id=user_id)
    created = await crud_feedbacks.create(db=db, object=feedback_internal)
    logger.info("Feedback %s (%s) received", created.id, created.type)

    subject, html = feedback_email(
        created.type, created.message, created.email, created.user_name, created.user_id
    )
    await send_quietly(sender, settings.FEEDBACK_INBOX, subject, html)

    return await crud_feedbacks.get(db=db, schema_to_select=FeedbackRead, id=created.id)


@router.get(
    "/admin/feedbacks",
    response_model=PaginatedListResponse[FeedbackRead],
    dependencies=[Depends(get_current_admin)],
)
async def read_feedbacks(
    db: Annotated[AsyncSession, Depends(async_get_db)],
    filters: Annotated[FeedbackFilters, Depends()],
    page: int = 1,
    items_per_page: int = 20,
) -> dict[str, Any]:
    # fastcrud turns None into IS NULL, so only pass what was given
    criteria: dict[str, Any] = {}
    if filters.user_id is not None:
        criteria["user_id"] = filters.user_id
    if filters.status is not None:
        criteria["status"] = filters.status
    if filters.type is not None:
        criteria["type"] = filters.type
    if filters.date_from is not None:
        criteria["created_at__gte"] = datetime.combine(filters.date_from, time.min, tzinfo=UTC)
    if filters.date_to is not None:
        criteria["created_at__lt"] = datetime.combine(filters.date_to, time.min, tzinfo=UTC) + timedelta(days=1)

    feedbacks_data = await crud_feedbacks.get_multi(
        db=db,
        offset=compute_offset(page, items_per_page),
        limit=items_per_page,
        schema_to_select=FeedbackRead,
        sort_columns="created_at",
        sort_orders="desc",
        **criteria,
    )
    response: dict[str, Any] = paginated_response(crud_data=feedbacks_data, page=page, items_per_page=items_per_page)
    return response


@router.patch("/admin/feedbacks/{feedback_id}", response_model=FeedbackRead)
async def patch_feedback(
    feedback_id: int,
    values: FeedbackUpdate,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    if not await crud_feedbacks.exists(db=db, id=feedback_id):
        raise NotFoundException("Feedback not found")

    update_internal = FeedbackUpdateInternal(
        **values.model_dump(exclude_unset=True),
        reviewed_by=current_user["id"],
        reviewed_at=datetime.now(UTC),
    )
    await crud_feedbacks.update(db=db, object=update_internal, id=feedback_id)
    return await crud_feedbacks.get(db=db, schema_to_select=FeedbackRead, id=feedback_id)


@router.delete("/admin/feedbacks/{feedback_id}", dependencies=[Depends(get_current_admin)])
async def erase_feedback(
    feedback_id: int,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    if not await crud_feedbacks.exists(db=db, id=feedback_id):
        raise NotFoundException("Feedback not found")
    await crud_feedbacks.db_delete(db=db, id=feedback_id)
    return {"message": "Feedback deleted"}
