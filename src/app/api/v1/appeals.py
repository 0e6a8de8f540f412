from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.exceptions.http_exceptions import BadRequestException, ConflictException, NotFoundException
from ...core.services import moderation
from ...core.utils.email import EmailSender, get_email_sender
from ...crud.crud_appeals import crud_appeals
from ...models.ban_appeal import APPEAL_PENDING, BanAppeal
from ...models.user import Profile
from ...schemas.appeal import AppealCreate, AppealEdit, AppealRead, AppealReview
from ..dependencies import get_current_admin, get_current_user

router = APIRouter(tags=["appeals"])


async def _appeal_view(db: AsyncSession, appeal_id: int) -> dict:
    stmt = (
        select(BanAppeal, Profile.email, Profile.full_name)
        .outerjoin(Profile, Profile.user_id == BanAppeal.user_id)
        .where(BanAppeal.id == appeal_id)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        raise NotFoundException("Appeal not found")
    appeal, email, full_name = row
    return _as_dict(appeal, email, full_name)


def _as_dict(appeal: BanAppeal, email: str | None, full_name: str | None) -> dict:
    return {
        "id": appeal.id,
        "user_id": appeal.user_id,
        "message": appeal.message,
        "status": appeal.status,
        "admin_notes": appeal.admin_notes,
        "reviewed_by": appeal.reviewed_by,
        "reviewed_at": appeal.reviewed_at,
        "created_at": appeal.created_at,
        "email": email,
        "full_name": full_name,
    }


async def _get_appeal_or_404(db: AsyncSession, appeal_id: int) -> BanAppeal:
    appeal = await db.get(BanAppeal, appeal_id)
    if appeal is None:
        raise NotFoundException("Appeal not found")
    return appeal


@router.get("/appeals/me", response_model=list[AppealRead])
async def read_my_appeals(
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> list[BanAppeal]:
    stmt = (
        select(BanAppeal)
        .where(BanAppeal.user_id == current_user["id"])
        .order_by(BanAppeal.created_at.desc(), BanAppeal.id.desc())
    )
    return list((await db.execute(stmt)).scalars().all())


@router.post("/appeals", response_model=AppealRead, status_code=201)
async def write_appeal(
    values: AppealCreate,
    current_user: Annotated[dict, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    if not current_user["is_banned"]:
        raise BadRequestException("Only banned accounts can submit an appeal")
    if await crud_appeals.exists(db=db, user_id=current_user["id"], status=APPEAL_PENDING):
        raise ConflictException("You already have a pending appeal")

    appeal = BanAppeal(user_id=current_user["id"], message=values.message.strip())
    db.add(appeal)
    await db.commit()
    return _as_dict(appeal, current_user["email"], current_user["full_name"])


@router.get("/admin/appeals", response_model=list[AppealRead], dependencies=[Depends(get_current_admin)])
async def read_appeals(
    db: Annotated[AsyncSession, Depends(async_get_db)],
    status: Literal["pending", "approved", "rejected"] | None = None,
) -> list[dict]:
    stmt = (
        select(BanAppeal, Profile.email, Profile.full_name)
        .outerjoin(Profile, Profile.user_id == BanAppeal.user_id)
        .order_by(BanAppeal.created_at.desc(), BanAppeal.id.desc())
    )
    if status is not None:
        stmt = stmt.where(BanAppeal.status == status)
    return [_as_dict(appeal, email, full_name) for appeal, email, full_name in (await db.execute(stmt)).all()]


@router.patch("/admin/appeals/{appeal_id}/review", response_model=AppealRead)
async def review_appeal(
    appeal_id: int,
    values: AppealReview,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> dict:
    appeal = await _get_appeal_or_404(db, appeal_id)
    if appeal.status != APPEAL_PENDING:
        raise ConflictException("Appeal has already been reviewed")

    await moderation.decide_appeal(db, sender, appeal, current_user["id"], values.status, values.admin_notes)
    return await _appeal_view(db, appeal_id)


@router.put("/admin/appeals/{appeal_id}", response_model=AppealRead)
async def edit_appeal(
    appeal_id: int,
    values: AppealEdit,
    current_user: Annotated[dict, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> dict:
    appeal = await _get_appeal_or_404(db, appeal_id)
    await moderation.decide_appeal(
        db, sender, appeal, current_user["id"], values.status, values.admin_notes, reban_on_reject=True
    )
    return await _appeal_view(db, appeal_id)


@router.post("/admin/appeals/{appeal_id}/reopen", response_model=AppealRead, dependencies=[Depends(get_current_admin)])
async def reopen_appeal(
    appeal_id: int,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict:
    appeal = await _get_appeal_or_404(db, appeal_id)
    await moderation.reopen_appeal(db, appeal)
    return await _appeal_view(db, appeal_id)


@router.delete("/admin/appeals/{appeal_id}", dependencies=[Depends(get_current_admin)])
async def erase_appeal(
    appeal_id: int,
    db: Annotated[AsyncSession, Depends(async_get_db)],
) -> dict[str, str]:
    if not await crud_appeals.exists(db=db, id=appeal_id):
        raise NotFoundException("Appeal not found")
    await crud_appeals.db_delete(db=db, id=appeal_id)
    return {"message": "Appeal deleted"}
