"""Shared test configuration and fixtures.

Each test gets a fresh database: by default an in-memory SQLite database
(via aiosqlite) with the full schema created from the models. Set
``TEST_DATABASE_URL`` to run against another database instead, e.g. a
disposable PostgreSQL instance.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import create_token_pair
from app.auth.passwords import hash_password
from app.billing.stripe_client import StripeGateway, get_stripe_gateway
from app.database import Base, build_engine, build_session_factory, get_db
from app.main import app
from app.models.user import User

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
TEST_WEBHOOK_SECRET = "whsec_test_secret"


# ---------------------------------------------------------------------------
# Per-test database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Engine with the schema created; dropped again after the test."""
    engine = build_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = build_session_factory(test_engine)
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Stripe gateway double
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def stripe_gateway() -> MagicMock:
    """Gateway with a mocked Checkout call and real webhook verification."""
    real = StripeGateway(secret_key="", webhook_secret=TEST_WEBHOOK_SECRET, app_url="http://testserver")
    gateway = MagicMock(spec=StripeGateway)
    gateway.create_checkout_session = AsyncMock(return_value=MagicMock(id="cs_test_123"))
    gateway.construct_event = MagicMock(side_effect=real.construct_event)
    return gateway


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, stripe_gateway: MagicMock) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB session and gateway."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_stripe_gateway] = lambda: stripe_gateway

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def webhook_secret() -> str:
    return TEST_WEBHOOK_SECRET


# ---------------------------------------------------------------------------
# Convenience fixtures: users and auth headers
# ---------------------------------------------------------------------------


def auth_headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id))
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession):
    """Factory inserting a user directly in the DB."""

    async def _make(role: str = "user", prefix: str = "user") -> User:
        unique = uuid.uuid4().hex[:8]
        user = User(
            email=f"{prefix}-{unique}@test.com",
            hashed_password=hash_password("testpass123"),
            name="Test User",
            is_active=True,
            role=role,
        )
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def test_user(make_user) -> User:
    return await make_user()


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict[str, str]:
    """Return Authorization headers for the test user."""
    return auth_headers_for(test_user)


@pytest_asyncio.fixture
async def other_user(make_user) -> User:
    return await make_user(prefix="other")


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict[str, str]:
    return auth_headers_for(other_user)


@pytest_asyncio.fixture
async def admin_user(make_user) -> User:
    return await make_user(role="admin", prefix="admin")


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return auth_headers_for(admin_user)
