"""Shared test configuration and fixtures.

Every test gets its own in-memory SQLite database (aiosqlite, one shared
connection through ``StaticPool``) and its own in-memory booking store, so
tests never see each other's accounts or bookings.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_booking_store
from app.auth.jwt import create_token_pair
from app.auth.passwords import hash_password
from app.booking.storage import MemoryStorage
from app.booking.store import BookingStore
from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models.user import ADMIN, CUSTOMER, User, default_admin_permissions, default_booking_preferences

# Minimum bcrypt cost keeps the suite fast.
settings.bcrypt_rounds = 4

PASSWORD = "testpass123"

# ---------------------------------------------------------------------------
# Per-test database and stores
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSession(bind=test_engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def booking_store() -> BookingStore:
    return BookingStore(MemoryStorage())


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, booking_store: BookingStore) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test DB session and booking store."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_store] = lambda: booking_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


def _unique_phone() -> str:
    return f"+2335{uuid.uuid4().int % 10**8:08d}"


@pytest_asyncio.fixture
async def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory that inserts an account directly, bypassing signup."""

    async def _make(**overrides) -> User:
        unique = uuid.uuid4().hex[:8]
        user_type = overrides.pop("user_type", CUSTOMER)
        fields = {
            "name": "Test User",
            "email": f"user-{unique}@mail.com",
            "phone": _unique_phone(),
            "hashed_password": hash_password(overrides.pop("password", PASSWORD)),
            "user_type": user_type,
            "admin_permissions": default_admin_permissions(),
            "booking_preferences": default_booking_preferences() if user_type == CUSTOMER else None,
        }
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        await db_session.flush()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def test_customer(make_user) -> User:
    return await make_user(name="Ama Mensah", email="ama.mensah@mail.com", is_verified=True)


@pytest_asyncio.fixture
async def test_admin(make_user) -> User:
    """Admin holding every permission."""
    return await make_user(
        name="Kofi Admin",
        email="kofi.admin@estatepro.io",
        user_type=ADMIN,
        admin_permissions=default_admin_permissions(granted=True),
        is_verified=True,
    )


def _headers(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), user.user_type)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def customer_headers(test_customer: User) -> dict[str, str]:
    return _headers(test_customer)


@pytest_asyncio.fixture
async def admin_headers(test_admin: User) -> dict[str, str]:
    return _headers(test_admin)


@pytest_asyncio.fixture
async def headers_for() -> Callable[[User], dict[str, str]]:
    """Authorization headers for any account."""
    return _headers
