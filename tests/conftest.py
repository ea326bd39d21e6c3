"""Shared test configuration and fixtures.

Each test gets a fresh database: a SQLite file under ``tmp_path`` by default,
or ``TEST_DATABASE_URL`` when set. Tables are created before the test and
dropped after it. Services commit their own units of work, so a fresh
database (rather than a rolled-back transaction) is what keeps tests isolated.
"""

import os
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

import staybook.models  # noqa: F401
from staybook.auth.identity import SYSTEM_CALLER, CallerIdentity, Role
from staybook.auth.jwt import create_access_token
from staybook.database import Base, get_db, utcnow
from staybook.main import app
from staybook.models.property import Property
from staybook.services.availability import seed_horizon

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a per-test engine with all tables in place."""
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'staybook_test.db'}"
    engine = create_async_engine(url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Callers
# ---------------------------------------------------------------------------


@pytest.fixture
def host() -> CallerIdentity:
    return CallerIdentity(id=uuid.uuid4(), role=Role.HOST)


@pytest.fixture
def guest() -> CallerIdentity:
    return CallerIdentity(id=uuid.uuid4(), role=Role.GUEST)


@pytest.fixture
def other_guest() -> CallerIdentity:
    return CallerIdentity(id=uuid.uuid4(), role=Role.GUEST)


@pytest.fixture
def system() -> CallerIdentity:
    return SYSTEM_CALLER


def bearer(caller: CallerIdentity) -> dict[str, str]:
    """Authorization headers carrying an access token for ``caller``."""
    token = create_access_token(str(caller.id), caller.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for() -> Callable[[CallerIdentity], dict[str, str]]:
    return bearer


@pytest.fixture
def host_headers(host: CallerIdentity) -> dict[str, str]:
    return bearer(host)


@pytest.fixture
def guest_headers(guest: CallerIdentity) -> dict[str, str]:
    return bearer(guest)


@pytest.fixture
def other_guest_headers(other_guest: CallerIdentity) -> dict[str, str]:
    return bearer(other_guest)


@pytest.fixture
def system_headers(system: CallerIdentity) -> dict[str, str]:
    return bearer(system)


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


@pytest.fixture
def make_property(db_session: AsyncSession, host: CallerIdentity) -> Callable[..., Awaitable[Property]]:
    """Factory that stores a property owned by ``host`` and opens 90 days of availability."""

    async def _make(**overrides) -> Property:
        data = {
            "host_id": host.id,
            "title": "Test Loft",
            "max_guests": 4,
            "nightly_rate": Decimal("100.00"),
            "cleaning_fee": Decimal("20.00"),
            "instant_book": True,
            "request_to_book": False,
        }
        data.update(overrides)
        prop = Property(**data)
        db_session.add(prop)
        await db_session.flush()
        await seed_horizon(db_session, prop.id, utcnow().date(), 90)
        await db_session.commit()
        return prop

    return _make


@pytest_asyncio.fixture
async def instant_property(make_property) -> Property:
    return await make_property(title="Instant Loft", instant_book=True)


@pytest_asyncio.fixture
async def request_property(make_property) -> Property:
    return await make_property(
        title="Request Cottage",
        instant_book=False,
        request_to_book=True,
        approval_window_hours=24,
    )
