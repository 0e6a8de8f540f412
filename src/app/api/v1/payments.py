from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.db.database import async_get_db
from ...core.services.payments import StripeClient, create_checkout, get_stripe_client, verify_payment
from ...schemas.payment import CheckoutSession, PaymentStatus, PaymentVerifyRequest
from ..dependencies import get_active_user

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/checkout", response_model=CheckoutSession)
async def create_checkout_session(
    current_user: Annotated[dict, Depends(get_active_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    stripe: Annotated[StripeClient, Depends(get_stripe_client)],
) -> CheckoutSession:
    return await create_checkout(db, stripe, current_user["id"])


@router.post("/verify", response_model=PaymentStatus)
async def verify_user_payment(
    current_user: Annotated[dict, Depends(get_active_user)],
    db: Annotated[AsyncSession, Depends(async_get_db)],
    stripe: Annotated[StripeClient, Depends(get_stripe_client)],
    values: PaymentVerifyRequest | None = None,
) -> PaymentStatus:
    email = current_user["email"]
    if values is not None and "email" in values.model_fields_set:
        email = values.email
    has_paid = await verify_payment(db, stripe, current_user["id"], email)
    return PaymentStatus(has_paid=has_paid)


@router.get("/status", response_model=PaymentStatus)
async def get_payment_status(current_user: Annotated[dict, Depends(get_active_user)]) -> PaymentStatus:
    return PaymentStatus(has_paid=current_user["has_paid"])
