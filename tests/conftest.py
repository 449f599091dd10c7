"""
Shared test fixtures for the Tableside test suite.

Async throughout (aiosqlite + AsyncSession).  Each test gets its own
in-memory database and its own app instance, so the token cache starts
empty every time.
"""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)
from sqlalchemy.pool import StaticPool

from tableside.api.v1.deps import get_db
from tableside.core.permissions import Role
from tableside.core.security import create_access_token, get_password_hash
from tableside.db.base import Base
from tableside.main import create_app
from tableside.models.menu import Item
from tableside.models.user import User

# bcrypt is slow; hash once and reuse for every seeded account
PASSWORD = "s3cret-pass"
PASSWORD_HASH = get_password_hash(PASSWORD)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables created."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory: async_sessionmaker[AsyncSession]) -> FastAPI:
    application = create_app()

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = _override_get_db
    return application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ── Accounts ────────────────────────────────────────────────────────
UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(session_factory: async_sessionmaker[AsyncSession]) -> UserFactory:
    """Insert a user with the given role and return it."""

    async def _make(name: str, role: Role = Role.CUSTOMER) -> User:
        async with session_factory() as session:
            user = User(
                name=name,
                email=f"{name}@example.com",
                hashed_password=PASSWORD_HASH,
                role=int(role),
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


def auth_headers(user: User) -> dict[str, str]:
    token, _ = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def customer(make_user: UserFactory) -> User:
    return await make_user("alice", Role.CUSTOMER)


@pytest.fixture
async def other_customer(make_user: UserFactory) -> User:
    return await make_user("bob", Role.CUSTOMER)


@pytest.fixture
async def chef(make_user: UserFactory) -> User:
    return await make_user("gordon", Role.CHEF)


@pytest.fixture
async def admin(make_user: UserFactory) -> User:
    return await make_user("root", Role.ADMIN)


@pytest.fixture
def customer_headers(customer: User) -> dict[str, str]:
    return auth_headers(customer)


@pytest.fixture
def other_headers(other_customer: User) -> dict[str, str]:
    return auth_headers(other_customer)


@pytest.fixture
def chef_headers(chef: User) -> dict[str, str]:
    return auth_headers(chef)


@pytest.fixture
def admin_headers(admin: User) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture
def headers_for() -> Callable[[User], dict[str, str]]:
    return auth_headers


# ── Menu ────────────────────────────────────────────────────────────
@pytest.fixture
def make_item(session_factory: async_sessionmaker[AsyncSession]):
    """Insert a menu item directly and return it."""

    async def _make(name: str, price: float, available: bool = True) -> Item:
        async with session_factory() as session:
            item = Item(name=name, description="", price=price, image_url="", available=available)
            session.add(item)
            await session.commit()
            return item

    return _make
