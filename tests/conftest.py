"""
Shared test fixtures for the Guide API test suite.

Every test gets a fresh in-memory SQLite database (aiosqlite) wired into
the app through the ``get_db`` dependency override.
"""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production-use-0123456789abcdef"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["FIRST_ADMIN_EMAIL"] = "admin@example.com"
os.environ["FIRST_ADMIN_PASSWORD"] = "Admin123!"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from guide_api.api.v1.deps import get_db
from guide_api.db.base import Base
from guide_api.main import app
from guide_api.services.accounts import ensure_admin

API = "/api/v1"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin123!"
PASSWORD = "secret123"


@pytest.fixture(autouse=True)
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create a fresh database per test and route the app's sessions to it."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory
    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(async_client: AsyncClient) -> Callable[..., Awaitable[dict]]:
    """Register an account and return the ``{token, user}`` body."""

    async def _register(username: str, account_type: str = "RegularUser", **fields) -> dict:
        body = {
            "username": username,
            "email": fields.pop("email", f"{username}@example.com"),
            "password": fields.pop("password", PASSWORD),
            "fullName": fields.pop("fullName", username.title()),
            "phoneNumber": "555-0100",
            "location": "Springfield",
            "address": "1 Main St",
            "accountType": account_type,
            **fields,
        }
        resp = await async_client.post(f"{API}/auth/register", json=body)
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _register


@pytest.fixture
async def admin_headers(session_factory, async_client: AsyncClient) -> dict[str, str]:
    """Seed the default admin and return its Authorization header."""
    async with session_factory() as session:
        await ensure_admin(session, ADMIN_EMAIL, ADMIN_PASSWORD)
    resp = await async_client.post(
        f"{API}/auth/token", json={"identifier": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert resp.status_code == 200, resp.text
    return bearer(resp.json()["token"])
