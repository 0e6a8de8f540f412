import os
import tempfile
from collections.abc import AsyncGenerator, Callable
from typing import Any

# settings are read at import time, so configure them before importing the app
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["ENVIRONMENT"] = "local"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASS"] = ""
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="calm-breath-media-")

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.db.database import Base, async_get_db, enable_sqlite_foreign_keys
from app.core.security import create_access_token, get_password_hash
from app.core.services.payments import StripeClient, get_stripe_client
from app.core.services.storage import MediaStorage, get_media_storage
from app.core.utils.cooldown import EmailCooldown, get_verification_cooldown
from app.core.utils.email import EmailSender, get_email_sender
from app.main import app
from app.models.user import ROLE_ADMIN, ROLE_USER, Profile, User, UserRole


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingEmailSender(EmailSender):
    """Keeps outgoing mail in memory instead of talking to an SMTP server."""

    def __init__(self, configured: bool = True):
        super().__init__(
            hostname="smtp.test",
            port=465,
            username="mailer" if configured else "",
            password="secret" if configured else "",
            use_tls=True,
            default_from="Calm Breath <noreply@calmbreath.app>",
        )
        self.sent: list[dict[str, Any]] = []
        self.fail_with: Exception | None = None

    async def send(self, to: str, subject: str, html: str, sender: str | None = None) -> str:
        if not self.configured:
            return await super().send(to, subject, html, sender)
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": to, "subject": subject, "html": html, "from": sender})
        return f"<msg-{len(self.sent)}@calmbreath.app>"

    def to(self, address: str) -> list[dict[str, Any]]:
        return [mail for mail in self.sent if mail["to"] == address]


class StripeStub:
    """Routes for httpx.MockTransport that mimic the few Stripe endpoints we call."""

    def __init__(self):
        self.customers: dict[str, dict] = {}
        self.payment_intents: dict[str, list[dict]] = {}
        self.sessions: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.fail_status: int | None = None

    def add_customer(self, email: str, intents: list[dict] | None = None) -> str:
        customer_id = f"cus_{len(self.customers) + 1}"
        self.customers[email] = {"id": customer_id, "email": email}
        self.payment_intents[customer_id] = intents or []
        return customer_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"error": {"message": "Stripe is having a bad day"}})

        path = request.url.path
        if request.method == "GET" and path.endswith("/customers"):
            customer = self.customers.get(request.url.params.get("email"))
            return httpx.Response(200, json={"data": [customer] if customer else []})
        if request.method == "GET" and path.endswith("/payment_intents"):
            intents = self.payment_intents.get(request.url.params.get("customer"), [])
            return httpx.Response(200, json={"data": intents})
        if request.method == "POST" and path.endswith("/checkout/sessions"):
            session_id = f"cs_test_{len(self.sessions) + 1}"
            session = {
                "id": session_id,
                "url": f"https://checkout.stripe.test/{session_id}",
                "amount_total": 1990,
                "currency": "eur",
            }
            self.sessions.append(session)
            return httpx.Response(200, json=session)
        return httpx.Response(404, json={"error": {"message": "Unknown route"}})


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender(configured=True)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cooldown(clock) -> EmailCooldown:
    return EmailCooldown(300, clock=clock)


@pytest.fixture
def stripe_stub() -> StripeStub:
    return StripeStub()


@pytest.fixture
def stripe_client(stripe_stub) -> StripeClient:
    return StripeClient(
        secret_key="sk_test_123",
        price_id="price_123",
        api_base="https://api.stripe.test/v1",
        transport=httpx.MockTransport(stripe_stub.handler),
    )


@pytest.fixture
def media_storage(tmp_path) -> MediaStorage:
    return MediaStorage(
        root=str(tmp_path / "media"),
        url_prefix="/media",
        public_base_url="http://testserver",
        max_bytes=1024 * 1024,
    )


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session_maker, email_sender, cooldown, stripe_client, media_storage
) -> AsyncGenerator[AsyncClient, None]:
    async def get_db_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[async_get_db] = get_db_override
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_verification_cooldown] = lambda: cooldown
    app.dependency_overrides[get_stripe_client] = lambda: stripe_client
    app.dependency_overrides[get_media_storage] = lambda: media_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_maker) -> Callable:
    """Insert a user with profile and role and return a dict with auth headers."""

    async def _make_user(
        email: str,
        password: str = "secret123",
        full_name: str | None = None,
        role: str = ROLE_USER,
        has_paid: bool = False,
        is_banned: bool = False,
        email_verified: bool = True,
    ) -> dict[str, Any]:
        async with session_maker() as session:
            user = User(email=email, hashed_password=get_password_hash(password))
            session.add(user)
            await session.flush()
            session.add(
                Profile(
                    user_id=user.id,
                    email=email,
                    full_name=full_name or email.split("@")[0].title(),
                    has_paid=has_paid,
                    is_banned=is_banned,
                    email_verified=email_verified,
                )
            )
            session.add(UserRole(user_id=user.id, role=role))
            await session.commit()

            token = create_access_token(data={"sub": str(user.uuid)})
            return {
                "id": user.id,
                "email": email,
                "password": password,
                "token": token,
                "headers": {"Authorization": f"Bearer {token}"},
            }

    return _make_user


@pytest_asyncio.fixture
async def user(make_user) -> dict[str, Any]:
    return await make_user("free@calmbreath.app", full_name="Free User")


@pytest_asyncio.fixture
async def paid_user(make_user) -> dict[str, Any]:
    return await make_user("paid@calmbreath.app", full_name="Paid User", has_paid=True)


@pytest_asyncio.fixture
async def other_paid_user(make_user) -> dict[str, Any]:
    return await make_user("other@calmbreath.app", full_name="Other User", has_paid=True)


@pytest_asyncio.fixture
async def admin(make_user) -> dict[str, Any]:
    return await make_user("admin@calmbreath.app", full_name="Admin", role=ROLE_ADMIN)


@pytest_asyncio.fixture
async def banned_user(make_user) -> dict[str, Any]:
    return await make_user("banned@calmbreath.app", full_name="Banned User", has_paid=True, is_banned=True)
