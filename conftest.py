import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Load .env.test when present; otherwise fall back to an in-memory SQLite
# database so the suite runs without Docker or Supabase.
from dotenv import load_dotenv

env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ADMIN_EMAILS", "admin@sipsmart.vn")
os.environ.setdefault("ADMIN_PASSWORD", "test-admin-password")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("AI_API_KEY", "")

from libs.common.config import get_settings  # noqa: E402
from libs.db import audit as _audit  # noqa: E402,F401
from libs.db.base import Base  # noqa: E402

# Import all models so metadata includes every table
from services.ai_service import models as _ai_models  # noqa: E402,F401
from services.cups_service import models as _cups_models  # noqa: E402,F401
from services.kyc_service import models as _kyc_models  # noqa: E402,F401
from services.mobility_service import models as _mobility_models  # noqa: E402,F401
from services.partners_service import models as _partners_models  # noqa: E402,F401
from services.rewards_service import models as _rewards_models  # noqa: E402,F401
from services.social_service import models as _social_models  # noqa: E402,F401
from services.users_service import models as _users_models  # noqa: E402,F401
from services.wallet_service import models as _wallet_models  # noqa: E402,F401

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
settings = get_settings()

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest_asyncio.fixture
async def test_engine():
    """
    Fresh database per test. SQLite in-memory needs a single shared
    connection (StaticPool) so every session sees the same tables.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(TEST_DATABASE_URL, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session configured like the application's (no expiry on commit,
    no autoflush). Routers commit through ``atomic`` and the test database
    is dropped afterwards.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def other_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """A second session on the same database, standing in for a concurrent request."""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient bound to the gateway app. Tests swap the gateway's
    module-level service clients for stubs.
    """
    from services.gateway_service.app.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def auth_headers() -> dict:
    """
    Headers for a mocked authenticated user. Service tests override
    ``get_current_user``, so the token itself is never decoded.
    """
    return {"Authorization": "Bearer mock-token"}


@pytest.fixture
def admin_headers(auth_headers) -> dict:
    """Bearer token plus the admin credential pair from the test settings."""
    return {
        **auth_headers,
        "x-admin-email": settings.admin_email_list[0],
        "x-admin-password": settings.ADMIN_PASSWORD,
    }
