"""Shared fixtures.

Each test gets its own SQLite database file so that concurrent sessions
see each other's commits and unique constraints behave as in production.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from keeper.core.auth import TokenService
from keeper.core.config import Settings
from keeper.domains.user import models  # noqa: F401
from keeper.domains.user.repository import UserRepository
from keeper.domains.user.security import PasswordHasher
from keeper.domains.user.sessions import SessionManager
from keeper.domains.user.social_auth import SocialAuthValidator
from keeper.infra.database import DatabaseManager
from keeper.infra.session_store import MemorySessionStore
from keeper.main import create_application

TEST_SECRET_KEY = "test-session-signing-key"


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings for an isolated test application."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        SECRET_KEY=TEST_SECRET_KEY,
        SESSION_BACKEND="memory",
        SESSION_EXPIRE_MINUTES=60,
        BCRYPT_ROUNDS=4,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'keeper.db'}",
        LOG_FORMAT="text",
    )


@pytest_asyncio.fixture
async def db(settings):
    """Database manager with the schema created."""
    manager = DatabaseManager(settings.database_url)
    await manager.init()
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def session(db):
    async with db.session() as session:
        yield session


@pytest.fixture
def repository(session) -> UserRepository:
    return UserRepository(session)


@pytest.fixture
def hasher() -> PasswordHasher:
    # Lowest cost bcrypt accepts, keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def session_store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET_KEY, expire_minutes=60)


@pytest.fixture
def session_manager(token_service, session_store) -> SessionManager:
    return SessionManager(token_service, session_store)


@pytest.fixture
def social_validator() -> AsyncMock:
    """Provider validator that never leaves the process."""
    return AsyncMock(spec=SocialAuthValidator)


@pytest.fixture
def app(settings, db, session_store, social_validator):
    return create_application(
        settings,
        db=db,
        session_store=session_store,
        social_auth=social_validator,
    )


@pytest_asyncio.fixture
async def client(app):
    """HTTP client talking to the app in-process."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://keeper.test",
    ) as ac:
        yield ac
