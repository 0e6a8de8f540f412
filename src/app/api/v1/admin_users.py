import logging
from datetime import UTC, datetime, time, timedelta
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastcrud import PaginatedListResponse, compute_offset, paginated_response
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import BadRequestException, NotFoundException
from ...core.services import moderation
from ...core.utils.email import EmailSender, get_email_sender
from ...models.ban_appeal import BanAppeal
from ...models.comment import Comment, CommentReport
from ...models.email_verification import EmailVerificationCode
from ...models.feedback import Feedback
from ...models.notification import Notification
from ...models.payment import Payment
from ...models.user import ROLE_ADMIN, ROLE_USER, Profile, User, UserRole
from ...schemas.user import AdminUserFilters, AdminUserRead, BanToggle
from ..dependencies import get_current_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/users", tags=["admin users"])


def _start_of_day(day) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def _row_to_admin_user(user: User, profile: Profile, role: str | None) -> dict:
    return {
        "user_id": user.id,
        "email": profile.email,
        "full_name": profile.full_name,
        "has_paid": profile.has_paid,
        "is_banned": profile.is_banned,
        "banned_at": profile.banned_at,
        "ban_reason": profile.ban_reason,
        "email_verified": profile.email_verified,
        "role": role or ROLE_USER,
        "created_at": user.created_at,
    }


async def _admin_user_or_404(db: AsyncSession, user_id: int) -> dict:
    stmt = (
        select(User, Profile, UserRole.role)
        .join(Profile, Profile.user_id == User.id)
        .outerjoin(UserRole, UserRole.user_id == User.id)
        .where(User.id == user_id)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        raise NotFoundException("User not found")
    return _row_to_admin_user(*row)


@router.get("", response_model=PaginatedListResponse[AdminUserRead], dependencies=[Depends(get_current_admin)])
async def read_users(
    db: Annotated[AsyncSession, Depends(async_get_db)],
    filters: Annotated[AdminUserFilters, Depends()],
    page: int = 1,
    items_per_page: int = 20,
) -> dict[str, Any]:
    if page < 1 or items_per_page < 1:
        raise BadRequestException("page and items_per_page must be positive")

    conditions = []
    if filters.search:
        pattern = f"%{filters.search.strip()}%"
        conditions.append(or_(Profile.email.ilike(pattern), Profile.full_name.ilike(pattern)))
    if filters.role == ROLE_ADMIN:
        conditions.append(UserRole.role == ROLE_ADMIN)
    elif filters.role == ROLE_USER:
        conditions.append(or_(UserRole.role == ROLE_USER, UserRole.role.is_(None)))
    if filters.payment is not None:
        conditions.append(Profile.has_paid.is_(filters.payment == "paid"))
    if filters.status is not None:
        conditions.append(Profile.is_banned.is_(filters.status == "banned"))
    if filters.date_from is not None:
        conditions.append(User.created_at >= _start_of_day(filters.date_from))
    if filters.date_to is not None:
        # inclusive of the whole last day
        conditions.append(User.created_at < _start_of_day(filters.date_to) + timedelta(days=1))

    base = (
        select(User, Profile, UserRole.role)
        .join(Profile, Profile.user_id == User.id)
        .outerjoin(UserRole, UserRole.user_id == User.id)
        .where(*conditions)
    )
    total_count = (await db.execute(select(func.count()).select_from(base.subquery()))).scalar_one()
    rows = (
        await db.execute(
            base.order_by(User.created_at.desc(), User.id.desc())
            .offset(compute_offset(page, items_per_page))
            .limit(items_per_page)
        )
    ).all()

    users_data = {"data": [_row_to_admin_user(*row) for row in rows], "total_count": total_count}
    response: dict[str, Any] = paginated_response(crud_data=users_data, page=page, items_per_page=items_per_page)
    return response


@router.get("/{user_id}", response_model=AdminUserRead, dependencies=[Depends(get_current_admin)])
async def read_user(user_id: int, db: Annotated[AsyncSession, Depends(async_get_db)]) -> dict:
    return await _admin_user_or_404(db, user_id)


@router.post("/{user_id}/toggle-ban", response_model=AdminUserRead)
async def toggle_user_ban(
    user_id: int,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
    values: BanToggle | None = None,
) -> dict:
    if user_id == current_user["id"]:
        raise BadRequestException("You cannot ban yourself")

    await moderation.toggle_ban(db, sender, user_id, current_user["id"], values.reason if values else None)
    return await _admin_user_or_404(db, user_id)


@router.post("/{user_id}/toggle-admin", response_model=AdminUserRead)
async def toggle_user_admin(
    user_id: int,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    if user_id == current_user["id"]:
        raise BadRequestException("You cannot change your own role")

    await _admin_user_or_404(db, user_id)
    role = (await db.execute(select(UserRole).where(UserRole.user_id == user_id))).scalar_one_or_none()
    if role is None:
        db.add(UserRole(user_id=user_id, role=ROLE_ADMIN))
    else:
        role.role = ROLE_USER if role.role == ROLE_ADMIN else ROLE_ADMIN
    await db.commit()
    logger.info("Admin %s toggled role of user %s", current_user["id"], user_id)
    return await _admin_user_or_404(db, user_id)


@router.delete("/{user_id}")
async def erase_user(
    user_id: int,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    if user_id == current_user["id"]:
        raise BadRequestException("You cannot delete your own account")
    if await db.get(User, user_id) is None:
        raise NotFoundException("User not found")

    own_comments = select(Comment.id).where(Comment.user_id == user_id).scalar_subquery()
    await db.execute(
        delete(CommentReport).where(
            or_(CommentReport.reporter_id == user_id, CommentReport.comment_id.in_(own_comments))
        )
    )
    await db.execute(delete(Comment).where(Comment.user_id == user_id))
    await db.execute(delete(EmailVerificationCode).where(EmailVerificationCode.user_id == user_id))
    await db.execute(delete(Notification).where(Notification.user_id == user_id))
    await db.execute(delete(BanAppeal).where(BanAppeal.user_id == user_id))
    await db.execute(delete(Payment).where(Payment.user_id == user_id))

    # keep other rows this user only touched as a reviewer
    await db.execute(update(Feedback).where(Feedback.user_id == user_id).values(user_id=None))
    await db.execute(update(Feedback).where(Feedback.reviewed_by == user_id).values(reviewed_by=None))
    await db.execute(update(Comment).where(Comment.hidden_by == user_id).values(hidden_by=None))
    await db.execute(update(CommentReport).where(CommentReport.reviewed_by == user_id).values(reviewed_by=None))
    await db.execute(update(BanAppeal).where(BanAppeal.reviewed_by == user_id).values(reviewed_by=None))

    await db.execute(delete(UserRole).where(UserRole.user_id == user_id))
    await db.execute(delete(Profile).where(Profile.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    logger.info("Admin %s deleted user %s", current_user["id"], user_id)
    return {"message": "User deleted"}
