from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy import func, select

from app.core.scheduler import purge_expired_codes_async, schedule_apscheduler_job, shutdown_apscheduler
from app.core.security import verify_password
from app.models.email_verification import EmailVerificationCode
from app.models.user import ROLE_ADMIN, Profile, User, UserRole
from scripts.create_first_admin import create_first_admin


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["database"] == "ok"
    assert body["environment"] == "local"


@pytest.mark.asyncio
async def test_docs_available_locally(client: AsyncClient) -> None:
    assert (await client.get("/docs")).status_code == 200
    schema = await client.get("/openapi.json")
    assert schema.status_code == 200
    assert "/api/v1/categories" in schema.json()["paths"]


@pytest.mark.asyncio
async def test_scheduled_purge(session_maker, make_user) -> None:
    owner = await make_user("purge@calmbreath.app")
    async with session_maker() as session:
        session.add(
            EmailVerificationCode(
                user_id=owner["id"], code_hash="c" * 64, expires_at=datetime.now(UTC) - timedelta(minutes=5)
            )
        )
        await session.commit()

    assert await purge_expired_codes_async(session_maker) == 1
    assert await purge_expired_codes_async(session_maker) == 0


@pytest.mark.asyncio
async def test_scheduler_registers_purge_job() -> None:
    app = FastAPI()
    scheduler = schedule_apscheduler_job(app)
    try:
        job = scheduler.get_job("purge_expired_codes")
        assert job is not None
        assert app.state.apscheduler is scheduler
    finally:
        shutdown_apscheduler(app)


@pytest.mark.asyncio
async def test_create_first_admin(db) -> None:
    assert await create_first_admin(db) is True
    await db.commit()
    assert await create_first_admin(db) is False

    user = (await db.execute(select(User).where(User.email == "admin@calmbreath.app"))).scalar_one()
    assert verify_password("change-me-now", user.hashed_password)
    role = (await db.execute(select(UserRole).where(UserRole.user_id == user.id))).scalar_one()
    assert role.role == ROLE_ADMIN
    profile = (await db.execute(select(Profile).where(Profile.user_id == user.id))).scalar_one()
    assert profile.email_verified is True
    assert (await db.execute(select(func.count()).select_from(User))).scalar_one() == 1
