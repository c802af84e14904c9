"""
Pytest fixtures for test database, client, and authentication.

Each test gets a fresh in-memory SQLite database (foreign keys on, so
cascades behave as in production) shared by the HTTP client and the
service-level tests through one session.
"""

from datetime import timedelta
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from event_registry.main import app
from event_registry.db.base import Base
from event_registry.db.session import enable_sqlite_foreign_keys, get_db
from event_registry.core.security import Identity, create_account_token, hash_password
from event_registry.core.timestamps import to_iso, utcnow
from event_registry.models import Account, Event

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with all tables created."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_account(db_session: AsyncSession, username: str, email: str) -> Account:
    account = Account(
        username=username,
        email=email,
        hashed_password=hash_password("testpassword123"),
        role="user",
    )
    db_session.add(account)
    await db_session.commit()
    await db_session.refresh(account)
    return account


async def make_event(
    db_session: AsyncSession,
    creator: Account,
    starts_in: timedelta = timedelta(days=30),
    seats: int = 100,
    title: str = "Test Concert",
) -> Event:
    """Insert an event directly, bypassing the date validation."""
    event = Event(
        title=title,
        description="A test event",
        location="Test Venue",
        event_type="concert",
        event_date=to_iso(utcnow() + starts_in),
        seats=seats,
        creator_id=creator.id,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


def identity_for(account: Account) -> Identity:
    return Identity(account_id=account.id, display_name=account.username, role=account.role)


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> Account:
    return await make_account(db_session, "testuser", "test@example.com")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> Account:
    return await make_account(db_session, "Ada Lovelace", "ada@example.com")


@pytest_asyncio.fixture
async def auth_headers(test_user: Account) -> dict:
    return {"Authorization": f"Bearer {create_account_token(test_user)}"}


@pytest_asyncio.fixture
async def other_auth_headers(other_user: Account) -> dict:
    return {"Authorization": f"Bearer {create_account_token(other_user)}"}


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_user: Account) -> Event:
    """An event 30 days out with 100 seats, owned by test_user."""
    return await make_event(db_session, test_user)


@pytest_asyncio.fixture
async def single_seat_event(db_session: AsyncSession, test_user: Account) -> Event:
    return await make_event(db_session, test_user, starts_in=timedelta(hours=1), seats=1, title="Tiny Gig")


@pytest_asyncio.fixture
async def past_event(db_session: AsyncSession, test_user: Account) -> Event:
    return await make_event(db_session, test_user, starts_in=-timedelta(hours=2), seats=50, title="Yesterday")
