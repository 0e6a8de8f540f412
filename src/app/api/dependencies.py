import uuid as uuid_pkg
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.db.database import async_get_db
from ..core.exceptions.http_exceptions import (
    AccountBannedException,
    ForbiddenException,
    PaymentRequiredException,
    UnauthorizedException,
)
from ..core.security import oauth2_scheme, verify_token
from ..core.services.verification import VerificationService
from ..core.utils.cooldown import EmailCooldown, get_verification_cooldown
from ..core.utils.email import EmailSender, get_email_sender
from ..models.user import ROLE_ADMIN, ROLE_USER, Profile, User, UserRole


def _token_from_request(request: Request, bearer: str | None = None) -> str | None:
    # Authorization header wins over the cookie
    if bearer:
        return bearer
    return request.cookies.get("access_token")


async def load_user_context(db: AsyncSession, user_id: int | None = None, user_uuid: Any = None) -> dict | None:
    """Join user, profile and role into the dict handed to route handlers."""
    stmt = (
        select(User, Profile, UserRole.role)
        .join(Profile, Profile.user_id == User.id)
        .outerjoin(UserRole, UserRole.user_id == User.id)
    )
    if user_id is not None:
        stmt = stmt.where(User.id == user_id)
    else:
        stmt = stmt.where(User.uuid == user_uuid)

    row = (await db.execute(stmt)).first()
    if row is None:
        return None

    user, profile, role = row
    role = role or ROLE_USER
    return {
        "id": user.id,
        "user_id": user.id,
        "uuid": user.uuid,
        "email": user.email,
        "full_name": profile.full_name,
        "avatar_url": profile.avatar_url,
        "email_verified": profile.email_verified,
        "has_paid": profile.has_paid,
        "paid_at": profile.paid_at,
        "is_banned": profile.is_banned,
        "banned_at": profile.banned_at,
        "ban_reason": profile.ban_reason,
        "role": role,
        "is_admin": role == ROLE_ADMIN,
        "created_at": user.created_at,
    }


async def _resolve_user(request: Request, db: AsyncSession, bearer: str | None = None) -> dict:
    token = _token_from_request(request, bearer)
    if not token:
        raise UnauthorizedException("Not authenticated")

    token_data = verify_token(token)
    if token_data is None:
        raise UnauthorizedException("Invalid or expired token")

    try:
        user_uuid = uuid_pkg.UUID(token_data.sub)
    except ValueError:
        raise UnauthorizedException("Invalid token payload")

    user = await load_user_context(db, user_uuid=user_uuid)
    if user is None:
        raise UnauthorizedException("User not found")
    return user


async def get_current_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(async_get_db)],
    bearer: Annotated[str | None, Depends(oauth2_scheme)] = None,
) -> dict:
    return await _resolve_user(request, db, bearer)


async def get_optional_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(async_get_db)],
    bearer: Annotated[str | None, Depends(oauth2_scheme)] = None,
) -> dict | None:
    if not _token_from_request(request, bearer):
        return None
    try:
        return await _resolve_user(request, db, bearer)
    except UnauthorizedException:
        return None


async def get_active_user(current_user: Annotated[dict, Depends(get_current_user)]) -> dict:
    if current_user["is_banned"]:
        raise AccountBannedException()
    return current_user


async def get_current_admin(current_user: Annotated[dict, Depends(get_active_user)]) -> dict:
    if not current_user["is_admin"]:
        raise ForbiddenException("You do not have enough privileges.")
    return current_user


async def require_paid_access(current_user: Annotated[dict, Depends(get_active_user)]) -> dict:
    if not (current_user["has_paid"] or current_user["is_admin"]):
        raise PaymentRequiredException()
    return current_user


def get_verification_service(
    sender: Annotated[EmailSender, Depends(get_email_sender)],
    cooldown: Annotated[EmailCooldown, Depends(get_verification_cooldown)],
) -> VerificationService:
    return VerificationService(sender=sender, cooldown=cooldown)
