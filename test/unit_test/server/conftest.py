"""
Shared fixtures for BuildBoss server tests.

Every test gets its own in-memory SQLite database. The HTTP client talks to
the FastAPI app through ``ASGITransport`` with the database session, the
e-mail sender, the Stripe gateway and the Google OAuth client replaced by
in-process fakes.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.pool import StaticPool

from buildboss.core.database.entities.admin import PlansAdmin
from buildboss.core.database.entities.companies import Company, Worker
from buildboss.core.database.entities.users import User
from buildboss.core.models.domain.enums import UserRole, WorkerStatus
from buildboss.core.security import create_access_token, create_admin_token, hash_password
from buildboss.server.services.email import EmailService
from buildboss.server.services.google_oauth import GoogleOAuthError, GoogleProfile
from buildboss.server.services.plans import initialize_plans
from buildboss.server.services.subscription_limits import ensure_subscription

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "Secret123"
ADMIN_PASSWORD = "AdminSecret1"


class FakeEmailService(EmailService):
    """Records outgoing mail instead of talking to an SMTP server."""

    def __init__(self) -> None:
        super().__init__(frontend_url="http://localhost:3000")
        self.sent: List[Dict[str, Any]] = []

    async def send(self, to: str, subject: str, html: str, text: Optional[str] = None) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})
        return True


class FakeStripeGateway:
    """In-process stand-in for ``StripeGateway`` that records every call."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.subscriptions: Dict[str, Dict[str, Any]] = {}

    async def create_customer(self, email: str, name: Optional[str] = None, metadata=None) -> Dict[str, Any]:
        self.calls.append(("create_customer", email))
        return {"id": "cus_test_123", "email": email}

    async def create_checkout_session(self, **kwargs) -> Dict[str, Any]:
        self.calls.append(("create_checkout_session", kwargs))
        return {"id": "cs_test_123", "url": "https://checkout.stripe.com/c/pay/cs_test_123"}

    async def update_subscription(self, subscription_id: str, *, cancel_at_period_end: bool) -> Dict[str, Any]:
        self.calls.append(("update_subscription", subscription_id, cancel_at_period_end))
        return {"id": subscription_id, "cancel_at_period_end": cancel_at_period_end}

    async def retrieve_subscription(self, subscription_id: str) -> Dict[str, Any]:
        self.calls.append(("retrieve_subscription", subscription_id))
        return self.subscriptions.get(subscription_id, {"id": subscription_id, "status": "active"})


class FakeGoogleOAuthClient:
    """Returns a fixed Google profile for the code ``good-code``."""

    def __init__(self, profile: Optional[GoogleProfile] = None) -> None:
        self.profile = profile or GoogleProfile(
            google_id="google-123", email="google.user@example.com", first_name="Gosia", last_name="Nowak"
        )

    def authorization_url(self, state: Optional[str] = None) -> str:
        return "https://accounts.google.com/o/oauth2/v2/auth?client_id=test"

    async def fetch_profile(self, code: str) -> GoogleProfile:
        if code != "good-code":
            raise GoogleOAuthError("invalid_grant")
        return self.profile


@pytest.fixture(autouse=True)
def _auth_rate_limit_off(monkeypatch: pytest.MonkeyPatch):
    """Throttling stays off unless a test turns it on; counters start empty."""
    from buildboss.server.middleware.rate_limit import limiter

    monkeypatch.setattr(limiter, "enabled", False)
    limiter.reset()


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for one test."""
    from buildboss.core.database import entities  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def email_service() -> FakeEmailService:
    return FakeEmailService()


@pytest_asyncio.fixture
async def stripe_gateway() -> FakeStripeGateway:
    return FakeStripeGateway()


@pytest_asyncio.fixture
async def google_client() -> FakeGoogleOAuthClient:
    return FakeGoogleOAuthClient()


@pytest_asyncio.fixture(name="client")
async def client_fixture(
    session: AsyncSession,
    email_service: FakeEmailService,
    stripe_gateway: FakeStripeGateway,
    google_client: FakeGoogleOAuthClient,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with overridden dependencies."""
    from buildboss.core.database import get_session
    from buildboss.server.main import app
    from buildboss.server.services.email import get_email_service
    from buildboss.server.services.google_oauth import get_google_oauth_client
    from buildboss.server.services.stripe_gateway import get_stripe_gateway

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_stripe_gateway] = lambda: stripe_gateway
    app.dependency_overrides[get_google_oauth_client] = lambda: google_client

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def plans(session: AsyncSession):
    """The default plan catalogue, keyed by plan name."""
    from buildboss.core.database.repositories import PlanRepository

    await initialize_plans(session)
    return {plan.name: plan for plan in await PlanRepository(session).list()}


async def create_user(
    session: AsyncSession,
    email: str,
    *,
    first_name: str = "Jan",
    last_name: str = "Kowalski",
    role: UserRole = UserRole.WORKER,
    confirmed: bool = True,
    with_subscription: bool = True,
) -> User:
    """Insert a user with password ``TEST_PASSWORD`` and, by default, the free plan."""
    user = User(
        email=email,
        password=hash_password(TEST_PASSWORD),
        first_name=first_name,
        last_name=last_name,
        role=role.value,
        is_email_confirmed=confirmed,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    if with_subscription:
        await ensure_subscription(session, user.id)
    return user


async def create_company(session: AsyncSession, owner: User, name: str = "Budex") -> Company:
    company = Company(name=name, created_by_id=owner.id)
    session.add(company)
    await session.commit()
    await session.refresh(company)
    return company


async def add_worker(
    session: AsyncSession,
    company: Company,
    user: User,
    *,
    status: WorkerStatus = WorkerStatus.ACTIVE,
    can_edit: bool = False,
) -> Worker:
    worker = Worker(user_id=user.id, company_id=company.id, status=status.value, can_edit=can_edit)
    session.add(worker)
    await session.commit()
    await session.refresh(worker)
    return worker


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest_asyncio.fixture
async def owner(session: AsyncSession) -> User:
    """A confirmed BOSS on the free plan."""
    return await create_user(session, "owner@example.com", role=UserRole.BOSS)


@pytest_asyncio.fixture
async def worker_user(session: AsyncSession) -> User:
    return await create_user(session, "worker@example.com", first_name="Piotr", last_name="Zieliński")


@pytest_asyncio.fixture
async def outsider(session: AsyncSession) -> User:
    return await create_user(session, "outsider@example.com", first_name="Anna", last_name="Wiśniewska")


@pytest_asyncio.fixture
async def company(session: AsyncSession, owner: User) -> Company:
    return await create_company(session, owner)


@pytest_asyncio.fixture
async def admin(session: AsyncSession) -> PlansAdmin:
    plans_admin = PlansAdmin(email="admin@buildboss.pl", password=hash_password(ADMIN_PASSWORD), first_name="Admin")
    session.add(plans_admin)
    await session.commit()
    await session.refresh(plans_admin)
    return plans_admin


@pytest_asyncio.fixture
async def admin_headers(admin: PlansAdmin) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_admin_token(admin.id, admin.email)}"}


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture: ``await make_user(email, **options)``."""

    async def _make(email: str, **options) -> User:
        return await create_user(session, email, **options)

    return _make


@pytest_asyncio.fixture
async def make_company(session: AsyncSession):
    async def _make(owner: User, name: str = "Budex") -> Company:
        return await create_company(session, owner, name)

    return _make


@pytest_asyncio.fixture
async def make_worker(session: AsyncSession):
    """Factory fixture: ``await make_worker(company, user, status=..., can_edit=...)``."""

    async def _make(company: Company, user: User, **options) -> Worker:
        return await add_worker(session, company, user, **options)

    return _make


@pytest_asyncio.fixture
async def headers():
    """``headers(user)`` builds the bearer header for a user."""
    return auth_headers
