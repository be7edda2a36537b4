from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Awaitable, Callable, Dict, Tuple

from dotenv import load_dotenv

TEST_ROOT = Path(__file__).resolve().parent

# Load test/.env first, then fall back to defaults; explicit environment variables always win
load_dotenv(TEST_ROOT / ".env", override=False)

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Set test configuration before importing the app
os.environ["DATABASE__URL"] = TEST_DATABASE_URL
os.environ["DATABASE__CREATE_TABLES"] = "false"
os.environ["MONITORING__LOGFIRE_ENABLED"] = "false"
# A cheap hash keeps the account fixtures fast
os.environ["SECURITY__PASSWORD_HASH_METHOD"] = "pbkdf2:sha256:1000"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from unipivot.core.database import create_all, create_sessionmaker  # noqa: E402
from unipivot.core.database.base import utc_now  # noqa: E402
from unipivot.core.database.entities.users import AuthToken, User  # noqa: E402
from unipivot.core.models.domain.enums import UserRole  # noqa: E402
from unipivot.core.security import generate_token, hash_password, token_expiry  # noqa: E402

DEFAULT_PASSWORD = "password123"

UserFactory = Callable[..., Awaitable[Tuple[User, Dict[str, str]]]]


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test."""
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client whose requests share the test session."""
    from unipivot.core.database import get_session
    from unipivot.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: AsyncSession) -> UserFactory:
    """
    Create an account with a valid bearer token.

    Returns the user and the ``Authorization`` header to send with requests.
    """
    counter = {"n": 0}

    async def factory(
        role: UserRole = UserRole.user,
        email: str | None = None,
        name: str = "Test User",
    ) -> Tuple[User, Dict[str, str]]:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            name=name,
            password_hash=hash_password(DEFAULT_PASSWORD),
            role=role.value,
        )
        session.add(user)
        await session.flush()
        now = utc_now()
        token = AuthToken(token=generate_token(), user_id=user.id, created_at=now, expires_at=token_expiry(now))
        session.add(token)
        await session.commit()
        await session.refresh(user)
        return user, {"Authorization": f"Bearer {token.token}"}

    return factory


@pytest_asyncio.fixture
async def admin(make_user: UserFactory) -> Tuple[User, Dict[str, str]]:
    return await make_user(UserRole.admin)


@pytest_asyncio.fixture
async def staff(make_user: UserFactory) -> Tuple[User, Dict[str, str]]:
    return await make_user(UserRole.staff)


@pytest_asyncio.fixture
async def member(make_user: UserFactory) -> Tuple[User, Dict[str, str]]:
    return await make_user(UserRole.user)
