from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from tests.factories import StoreFactory, UserProfileFactory, WalletFactory


def make_user(user_id: str = "member-1", email: Optional[str] = None) -> AuthUser:
    """Build the AuthUser a decoded Supabase token would produce."""
    return AuthUser(
        user_id=user_id,
        email=email or f"{user_id}@sipsmart.vn",
        role="authenticated",
    )


def override_auth(app, user: AuthUser) -> None:
    """Make ``app`` treat every request as coming from ``user``."""
    app.dependency_overrides[get_current_user] = lambda: user


async def _client_for(app, db_session, user) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_async_db] = lambda: db_session
    override_auth(app, user)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users and data
# ---------------------------------------------------------------------------


@pytest.fixture
def member_user() -> AuthUser:
    return make_user("member-1")


@pytest.fixture
def admin_user() -> AuthUser:
    return make_user("admin-1", "admin@sipsmart.vn")


@pytest_asyncio.fixture
async def member_profile(db_session, member_user):
    """Profile plus a funded wallet for ``member_user``."""
    profile = UserProfileFactory.create(
        auth_id=member_user.user_id, email=member_user.email
    )
    db_session.add(profile)
    db_session.add(WalletFactory.create(auth_id=member_user.user_id))
    await db_session.commit()
    return profile


@pytest_asyncio.fixture
async def active_store(db_session):
    store = StoreFactory.create()
    db_session.add(store)
    await db_session.commit()
    return store


# ---------------------------------------------------------------------------
# Service clients
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def users_client(db_session, member_user):
    from services.users_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def wallet_client(db_session, member_user):
    from services.wallet_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def cups_client(db_session, member_user):
    from services.cups_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def partners_client(db_session, member_user):
    from services.partners_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def mobility_client(db_session, member_user):
    from services.mobility_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def kyc_client(db_session, member_user):
    from services.kyc_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def rewards_client(db_session, member_user):
    from services.rewards_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def social_client(db_session, member_user):
    from services.social_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def ai_client(db_session, member_user):
    from services.ai_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac


@pytest_asyncio.fixture
async def reports_client(db_session, member_user):
    from services.reports_service.app.main import app

    async for ac in _client_for(app, db_session, member_user):
        yield ac
