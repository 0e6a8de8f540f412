import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import ConflictException, CooldownException, EmailDeliveryException
from ...core.security import create_access_token, get_password_hash, set_access_cookie
from ...core.services.verification import VerificationService
from ...models.user import ROLE_USER, Profile, User, UserRole
from ...schemas.user import EmailChange, PasswordChange, ProfileRead, ProfileUpdate, SignupResponse, UserCreate
from ...schemas.verification import CodeSent
from ..dependencies import get_active_user, get_current_user, get_verification_service, load_user_context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


async def _email_taken(db: AsyncSession, email: str) -> bool:
    result = await db.execute(select(User.id).where(User.email == email))
    return result.scalar_one_or_none() is not None


@router.post("/signup", response_model=SignupResponse, status_code=201)
async def signup(
    response: Response,
    user_in: UserCreate,
    db: Annotated[AsyncSession, Depends(async_get_db)],
    verification: Annotated[VerificationService, Depends(get_verification_service)],
) -> SignupResponse:
    email = user_in.email.lower()
    if await _email_taken(db, email):
        raise ConflictException("Email is already registered")

    user = User(email=email, hashed_password=get_password_hash(user_in.password))
    db.add(user)
    await db.flush()
    db.add(Profile(user_id=user.id, email=email, full_name=user_in.full_name))
    db.add(UserRole(user_id=user.id, role=ROLE_USER))
    await db.commit()
    logger.info("New account %s (%s)", user.id, email)

    verification_sent, dev_code = True, None
    try:
        sent = await verification.issue_code(db, user.id, email, user_in.full_name)
        dev_code = sent.dev_code
    except (CooldownException, EmailDeliveryException) as exc:
        logger.warning("Verification code not sent at signup for %s: %s", email, exc.detail)
        verification_sent = False

    access_token = create_access_token(data={"sub": str(user.uuid)})
    set_access_cookie(response, access_token)
    context = await load_user_context(db, user_id=user.id)
    return SignupResponse(
        access_token=access_token,
        profile=ProfileRead(**context),
        verification_sent=verification_sent,
        dev_code=dev_code,
    )


@router.get("/users/me", response_model=ProfileRead)
async def read_users_me(current_user: Annotated[dict, Depends(get_current_user)]) -> dict:
    return current_user


@router.patch("/users/me", response_model=ProfileRead)
async def update_users_me(
    values: ProfileUpdate,
    current_user: Annotated[dict, Depends(get_active_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    changes = values.model_dump(exclude_unset=True)
    if changes:
        profile = (await db.execute(select(Profile).where(Profile.user_id == current_user["id"]))).scalar_one()
        for field, value in changes.items():
            setattr(profile, field, value)
        profile.updated_at = datetime.now(UTC)
        await db.commit()

    return await load_user_context(db, user_id=current_user["id"])


@router.put("/users/me/password")
async def change_password(
    values: PasswordChange,
    current_user: Annotated[dict, Depends(get_active_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    user = await db.get(User, current_user["id"])
    user.hashed_password = get_password_hash(values.new_password)
    user.updated_at = datetime.now(UTC)
    await db.commit()
    return {"message": "Password updated"}


@router.put("/users/me/email", response_model=CodeSent)
async def change_email(
    values: EmailChange,
    current_user: Annotated[dict, Depends(get_active_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    verification: Annotated[VerificationService, Depends(get_verification_service)],
) -> CodeSent:
    email = values.email.lower()
    if email == current_user["email"]:
        return CodeSent(success=False, message="Email unchanged")
    if await _email_taken(db, email):
        raise ConflictException("Email is already registered")

    now = datetime.now(UTC)
    user = await db.get(User, current_user["id"])
    profile = (await db.execute(select(Profile).where(Profile.user_id == user.id))).scalar_one()
    user.email = email
    user.updated_at = now
    profile.email = email
    profile.email_verified = False
    profile.updated_at = now
    await db.commit()
    logger.info("User %s changed email to %s", user.id, email)

    try:
        return await verification.issue_code(db, user.id, email, profile.full_name)
    except (CooldownException, EmailDeliveryException) as exc:
        logger.warning("Verification code not sent after email change for %s: %s", email, exc.detail)
        return CodeSent(success=False, message=f"Email updated. {exc.detail}")
