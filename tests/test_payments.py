from urllib.parse import parse_qs

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.core.exceptions.http_exceptions import PaymentProviderException
from app.core.services.payments import StripeClient, verify_payment
from app.models.payment import PAYMENT_PENDING, PAYMENT_SUCCEEDED, Payment

SUCCEEDED_INTENT = {"id": "pi_1", "status": "succeeded", "amount": 1990, "currency": "eur"}


async def _payments_for(session_maker, user_id: int) -> list[Payment]:
    async with session_maker() as session:
        result = await session.execute(select(Payment).where(Payment.user_id == user_id).order_by(Payment.id))
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_checkout_creates_session(client: AsyncClient, user, stripe_stub, session_maker) -> None:
    response = await client.post("/api/v1/payments/checkout", headers=user["headers"])

    assert response.status_code == 200
    assert response.json() == {"url": "https://checkout.stripe.test/cs_test_1", "session_id": "cs_test_1"}

    form = parse_qs(stripe_stub.requests[-1].content.decode())
    assert form["mode"] == ["payment"]
    assert form["customer_email"] == [user["email"]]
    assert form["line_items[0][price]"] == ["price_123"]
    assert form["success_url"][0].endswith("/payment?payment=success")
    assert form["cancel_url"][0].endswith("/payment?payment=canceled")

    payments = await _payments_for(session_maker, user["id"])
    assert len(payments) == 1
    assert payments[0].status == PAYMENT_PENDING
    assert payments[0].provider_session_id == "cs_test_1"


@pytest.mark.asyncio
async def test_checkout_when_already_paid(client: AsyncClient, paid_user, stripe_stub) -> None:
    response = await client.post("/api/v1/payments/checkout", headers=paid_user["headers"])
    assert response.status_code == 409
    assert stripe_stub.requests == []


@pytest.mark.asyncio
async def test_checkout_requires_login(client: AsyncClient) -> None:
    assert (await client.post("/api/v1/payments/checkout")).status_code == 401


@pytest.mark.asyncio
async def test_verify_marks_profile_paid(client: AsyncClient, user, stripe_stub, session_maker) -> None:
    stripe_stub.add_customer(user["email"], [{"id": "pi_0", "status": "canceled"}, SUCCEEDED_INTENT])

    response = await client.post("/api/v1/payments/verify", headers=user["headers"])
    assert response.status_code == 200
    assert response.json() == {"has_paid": True}

    status = await client.get("/api/v1/payments/status", headers=user["headers"])
    assert status.json() == {"has_paid": True}
    me = (await client.get("/api/v1/users/me", headers=user["headers"])).json()
    assert me["paid_at"] is not None

    payments = await _payments_for(session_maker, user["id"])
    assert [(p.provider_payment_id, p.status) for p in payments] == [("pi_1", PAYMENT_SUCCEEDED)]

    # verifying again does not record the same payment twice
    await client.post("/api/v1/payments/verify", headers=user["headers"])
    assert len(await _payments_for(session_maker, user["id"])) == 1


@pytest.mark.asyncio
async def test_verify_without_customer(client: AsyncClient, user) -> None:
    response = await client.post("/api/v1/payments/verify", headers=user["headers"])
    assert response.json() == {"has_paid": False}
    assert (await client.get("/api/v1/payments/status", headers=user["headers"])).json() == {"has_paid": False}


@pytest.mark.asyncio
async def test_verify_without_succeeded_intent(client: AsyncClient, user, stripe_stub) -> None:
    stripe_stub.add_customer(user["email"], [{"id": "pi_9", "status": "requires_payment_method"}])
    response = await client.post("/api/v1/payments/verify", headers=user["headers"])
    assert response.json() == {"has_paid": False}


@pytest.mark.asyncio
async def test_verify_with_empty_email(client: AsyncClient, user, stripe_stub) -> None:
    response = await client.post("/api/v1/payments/verify", json={"email": ""}, headers=user["headers"])
    assert response.json() == {"has_paid": False}
    assert stripe_stub.requests == []


@pytest.mark.asyncio
async def test_verify_other_email_does_not_mark_caller(client: AsyncClient, user, stripe_stub) -> None:
    stripe_stub.add_customer("someone@calmbreath.app", [SUCCEEDED_INTENT])

    response = await client.post(
        "/api/v1/payments/verify", json={"email": "someone@calmbreath.app"}, headers=user["headers"]
    )
    assert response.json() == {"has_paid": True}
    assert (await client.get("/api/v1/payments/status", headers=user["headers"])).json() == {"has_paid": False}


@pytest.mark.asyncio
async def test_provider_failure(client: AsyncClient, user, stripe_stub) -> None:
    stripe_stub.fail_status = 500

    response = await client.post("/api/v1/payments/verify", headers=user["headers"])
    assert response.status_code == 502
    assert response.json() == {"detail": "Stripe is having a bad day", "has_paid": False}

    checkout = await client.post("/api/v1/payments/checkout", headers=user["headers"])
    assert checkout.status_code == 502


@pytest.mark.asyncio
async def test_unconfigured_client_raises(db, user) -> None:
    client = StripeClient(secret_key="", price_id="")
    assert client.configured is False

    with pytest.raises(PaymentProviderException) as exc_info:
        await verify_payment(db, client, user["id"], user["email"])
    assert exc_info.value.status_code == 502
