from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
)
from ...core.services import moderation
from ...core.utils.email import EmailSender, get_email_sender
from ...crud.crud_reports import crud_reports
from ...models.comment import Comment, CommentReport
from ...models.user import Profile
from ...schemas.comment import CommentCreate, CommentRead, CommentUpdate, CommentVisibility, ReportCreate, ReportRead
from ..dependencies import get_current_admin, require_paid_access
from .media_items import get_media_item_or_404

router = APIRouter(tags=["comments"])


def _to_read(comment: Comment, profile: Profile | None) -> CommentRead:
    author = None
    if profile is not None:
        author = {"user_id": profile.user_id, "full_name": profile.full_name, "avatar_url": profile.avatar_url}
    return CommentRead(
        id=comment.id,
        media_item_id=comment.media_item_id,
        user_id=comment.user_id,
        content=comment.content,
        is_visible=comment.is_visible,
        is_hidden_by_admin=comment.is_hidden_by_admin,
        hidden_at=comment.hidden_at,
        hide_reason=comment.hide_reason,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        author=author,
    )


async def _get_comment_or_404(db: AsyncSession, comment_id: int) -> Comment:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise NotFoundException("Comment not found")
    return comment


@router.get("/media-items/{media_item_id}/comments", response_model=list[CommentRead])
async def read_comments(
    media_item_id: int,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> list[CommentRead]:
    is_admin = current_user["is_admin"]
    await get_media_item_or_404(db, media_item_id, include_hidden=is_admin)

    stmt = (
        select(Comment, Profile)
        .outerjoin(Profile, Profile.user_id == Comment.user_id)
        .where(Comment.media_item_id == media_item_id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    if not is_admin:
        # banned users' comments disappear along with admin-hidden ones
        stmt = stmt.where(
            Comment.is_visible.is_(True),
            Comment.is_hidden_by_admin.is_(False),
            Profile.is_banned.is_(False),
        )

    rows = (await db.execute(stmt)).all()
    return [_to_read(comment, profile) for comment, profile in rows]


@router.post("/media-items/{media_item_id}/comments", response_model=CommentRead, status_code=201)
async def write_comment(
    media_item_id: int,
    values: CommentCreate,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> CommentRead:
    await get_media_item_or_404(db, media_item_id, include_hidden=current_user["is_admin"])

    content = values.content.strip()
    if not content:
        raise BadRequestException("Comment cannot be empty")

    comment = Comment(media_item_id=media_item_id, user_id=current_user["id"], content=content)
    db.add(comment)
    await db.commit()

    profile = (await db.execute(select(Profile).where(Profile.user_id == current_user["id"]))).scalar_one()
    return _to_read(comment, profile)


@router.patch("/comments/{comment_id}", response_model=CommentRead)
async def patch_comment(
    comment_id: int,
    values: CommentUpdate,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> CommentRead:
    comment = await _get_comment_or_404(db, comment_id)
    if comment.user_id != current_user["id"]:
        raise ForbiddenException("Only the author can edit this comment")

    content = values.content.strip()
    if not content:
        raise BadRequestException("Comment cannot be empty")

    comment.content = content
    comment.updated_at = datetime.now(UTC)
    await db.commit()

    profile = (await db.execute(select(Profile).where(Profile.user_id == comment.user_id))).scalar_one_or_none()
    return _to_read(comment, profile)


@router.delete("/comments/{comment_id}")
async def erase_comment(
    comment_id: int,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> dict[str, str]:
    comment = await _get_comment_or_404(db, comment_id)
    if comment.user_id != current_user["id"] and not current_user["is_admin"]:
        raise ForbiddenException("You cannot delete this comment")

    await moderation.delete_comment(db, sender, comment, actor_id=current_user["id"])
    return {"message": "Comment deleted"}


@router.patch("/comments/{comment_id}/visibility", response_model=CommentRead)
async def set_comment_visibility(
    comment_id: int,
    values: CommentVisibility,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> CommentRead:
    comment = await _get_comment_or_404(db, comment_id)
    await moderation.set_comment_hidden(db, sender, comment, current_user["id"], values.hidden, values.reason)

    profile = (await db.execute(select(Profile).where(Profile.user_id == comment.user_id))).scalar_one_or_none()
    return _to_read(comment, profile)


@router.post("/comments/{comment_id}/report", response_model=ReportRead, status_code=201)
async def report_comment(
    comment_id: int,
    values: ReportCreate,
    current_user: Annotated[dict, Depends(require_paid_access)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    comment = await _get_comment_or_404(db, comment_id)
    if comment.user_id == current_user["id"]:
        raise BadRequestException("You cannot report your own comment")

    if await crud_reports.exists(db=db, comment_id=comment_id, reporter_id=current_user["id"]):
        raise ConflictException("You have already reported this comment")

    report = CommentReport(comment_id=comment_id, reporter_id=current_user["id"], reason=values.reason.strip())
    db.add(report)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictException("You have already reported this comment")

    return await crud_reports.get(db=db, schema_to_select=ReportRead, id=report.id)
