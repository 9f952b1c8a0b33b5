"""
Pytest configuration and fixtures.
"""
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import issue_reporter.models  # noqa: F401
from issue_reporter.core.database import Base

PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory SQLite database shared by every connection of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """AsyncSession bound to the test database for service logic tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def api_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTPX AsyncClient configured against the FastAPI app with test overrides."""
    from issue_reporter.main import app
    from issue_reporter.core.database import get_db
    from issue_reporter.core.rate_limiter import limiter

    async def override_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    limiter.reset()
    app.dependency_overrides[get_db] = override_db
    app.state.test_db_override = override_db

    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
        if hasattr(app.state, "test_db_override"):
            delattr(app.state, "test_db_override")
        limiter.reset()


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_citizen(
    client: AsyncClient,
    email: str = "citizen@cityreports.org",
    full_name: str = "Casey Citizen",
) -> dict:
    """Register through the API and return the session payload."""
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": PASSWORD, "full_name": full_name},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest_asyncio.fixture
async def citizen(api_client) -> dict:
    return await register_citizen(api_client)


@pytest_asyncio.fixture
async def admin(api_client, session_factory) -> dict:
    """Admin account provisioned out of band, then logged in over the API."""
    from issue_reporter.models.auth import UserRole
    from issue_reporter.services.accounts import AccountService

    async with session_factory() as session:
        await AccountService(session).create_account(
            email="admin@cityreports.org",
            password=PASSWORD,
            full_name="Alex Admin",
            role=UserRole.ADMIN,
        )

    response = await api_client.post(
        "/api/v1/auth/login",
        json={"email": "admin@cityreports.org", "password": PASSWORD},
    )
    assert response.status_code == 200, response.text
    return response.json()


def issue_payload(**overrides) -> dict:
    payload = {
        "issue_type": "pothole",
        "description": "Deep pothole near the bus stop",
        "latitude": 40.7128,
        "longitude": -74.006,
        "location_address": "12 Main St",
    }
    payload.update(overrides)
    return payload
