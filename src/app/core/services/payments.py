import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.payment import PAYMENT_SUCCEEDED, Payment
from ...models.user import Profile
from ...schemas.payment import CheckoutSession
from ..config import settings
from ..exceptions.http_exceptions import ConflictException, PaymentProviderException

logger = logging.getLogger(__name__)


class StripeClient:
    """Minimal Stripe REST client covering checkout and payment lookups."""

    def __init__(
        self,
        secret_key: str,
        price_id: str,
        api_base: str = "https://api.stripe.com/v1",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.secret_key = secret_key
        self.price_id = price_id
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    async def _request(self, method: str, path: str, params: dict | None = None, data: dict | None = None) -> dict:
        if not self.configured:
            raise PaymentProviderException("Payment provider is not configured")

        try:
            async with httpx.AsyncClient(
                base_url=self.api_base,
                auth=(self.secret_key, ""),
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(method, path, params=params, data=data)
        except httpx.HTTPError as exc:
            logger.error("Stripe request %s %s failed: %s", method, path, exc)
            raise PaymentProviderException(f"Payment provider unreachable: {exc}") from exc

        if response.status_code >= 400:
            try:
                message = response.json().get("error", {}).get("message")
            except ValueError:
                message = None
            logger.error("Stripe %s %s returned %s: %s", method, path, response.status_code, message)
            raise PaymentProviderException(message or f"Payment provider error ({response.status_code})")

        return response.json()

    async def find_customer(self, email: str) -> dict | None:
        body = await self._request("GET", "/customers", params={"email": email, "limit": 1})
        customers = body.get("data", [])
        return customers[0] if customers else None

    async def list_payment_intents(self, customer_id: str, limit: int = 10) -> list[dict[str, Any]]:
        body = await self._request("GET", "/payment_intents", params={"customer": customer_id, "limit": limit})
        return body.get("data", [])

    async def create_checkout_session(self, email: str, success_url: str, cancel_url: str) -> dict:
        data = {
            "mode": "payment",
            "customer_email": email,
            "line_items[0][price]": self.price_id,
            "line_items[0][quantity]": 1,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        return await self._request("POST", "/checkout/sessions", data=data)


stripe_client = StripeClient(
    secret_key=settings.STRIPE_SECRET_KEY.get_secret_value(),
    price_id=settings.STRIPE_PRICE_ID,
    api_base=settings.STRIPE_API_BASE,
    timeout=settings.STRIPE_TIMEOUT_SECONDS,
)


def get_stripe_client() -> StripeClient:
    return stripe_client


async def _get_profile(db: AsyncSession, user_id: int) -> Profile:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one()


async def create_checkout(db: AsyncSession, client: StripeClient, user_id: int) -> CheckoutSession:
    profile = await _get_profile(db, user_id)
    if profile.has_paid:
        raise ConflictException("Payment already completed")

    base = settings.FRONTEND_URL.rstrip("/")
    session = await client.create_checkout_session(
        email=profile.email,
        success_url=f"{base}/payment?payment=success",
        cancel_url=f"{base}/payment?payment=canceled",
    )

    db.add(
        Payment(
            user_id=user_id,
            email=profile.email,
            provider_session_id=session["id"],
            amount=session.get("amount_total"),
            currency=session.get("currency"),
        )
    )
    await db.commit()
    logger.info("Checkout session %s created for user %s", session["id"], user_id)
    return CheckoutSession(url=session["url"], session_id=session["id"])


async def verify_payment(db: AsyncSession, client: StripeClient, user_id: int, email: str | None) -> bool:
    """Ask Stripe whether ``email`` has a succeeded payment.

    Only the caller's own profile is ever marked as paid, and only when the
    checked email is the one on that profile.
    """
    if not email:
        return False

    customer = await client.find_customer(email)
    if customer is None:
        return False

    intents = await client.list_payment_intents(customer["id"])
    succeeded = next((pi for pi in intents if pi.get("status") == "succeeded"), None)
    if succeeded is None:
        return False

    profile = await _get_profile(db, user_id)
    if profile.email.lower() != email.strip().lower():
        return True

    now = datetime.now(UTC)
    if not profile.has_paid:
        profile.has_paid = True
        profile.paid_at = now
        profile.updated_at = now

    existing = await db.execute(select(Payment.id).where(Payment.provider_payment_id == succeeded["id"]))
    if existing.scalar_one_or_none() is None:
        db.add(
            Payment(
                user_id=user_id,
                email=profile.email,
                provider_payment_id=succeeded["id"],
                amount=succeeded.get("amount"),
                currency=succeeded.get("currency"),
                status=PAYMENT_SUCCEEDED,
            )
        )
    await db.commit()
    logger.info("Payment %s confirmed for user %s", succeeded["id"], user_id)
    return True
