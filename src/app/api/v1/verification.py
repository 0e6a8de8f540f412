from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.services.verification import VerificationService
from ...core.utils.cooldown import EmailCooldown, get_verification_cooldown
from ...schemas.verification import CodeSent, CodeVerify, CooldownQuery, CooldownStatus
from ..dependencies import get_active_user, get_verification_service

router = APIRouter(prefix="/verification", tags=["verification"])


@router.post("/send", response_model=CodeSent)
async def send_verification_code(
    current_user: Annotated[dict, Depends(get_active_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    verification: Annotated[VerificationService, Depends(get_verification_service)],
) -> CodeSent:
    if current_user["email_verified"]:
        return CodeSent(success=False, message="Email already verified")
    return await verification.issue_code(db, current_user["id"], current_user["email"], current_user["full_name"])


@router.get("/cooldown", response_model=CooldownStatus)
async def get_cooldown(
    query: Annotated[CooldownQuery, Depends()],
    cooldown: Annotated[EmailCooldown, Depends(get_verification_cooldown)],
) -> CooldownStatus:
    remaining = cooldown.remaining(query.email)
    return CooldownStatus(can_send=remaining == 0, next=remaining)


@router.post("/verify")
async def verify_email_code(
    values: CodeVerify,
    current_user: Annotated[dict, Depends(get_active_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    verification: Annotated[VerificationService, Depends(get_verification_service)],
) -> dict:
    await verification.verify_code(db, current_user["id"], values.code)
    return {"success": True, "message": "Email verified"}
