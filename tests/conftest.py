"""
Pytest configuration and fixtures for testing.
"""
import os

# Settings are read at import time, so the test environment goes first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_eventsphere.db")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("EVENT_PUBLISHING_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("USE_MOCK_SNS", "true")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.session import Base, get_session
from app.core.security import create_access_token
from app.db.models.event import Event, EventCategory
from app.db.models.schedule import ScheduleItem
from datetime import datetime, timedelta, timezone


# Test database URL - set to a PostgreSQL URL to run the concurrency tests
TEST_DATABASE_URL = os.getenv(
    "TEST_DATABASE_URL",
    "sqlite+aiosqlite:///./test_eventsphere.db"
)

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,  # Disable connection pooling for tests
    echo=False,
)


# Create test session factory
TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.
    Tables are dropped and recreated around every test.
    """
    # Drop all tables first to ensure clean state
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    # Create tables
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # Drop tables after test for complete isolation
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory():
    """Factory for independent sessions, one per simulated server request."""
    return TestSessionLocal


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing API endpoints.
    Overrides the database session dependency.
    """
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def make_token(user_id: str, role: str = "user", name: str = None, email: str = None) -> str:
    claims = {"sub": user_id, "role": role}
    if name:
        claims["name"] = name
    if email:
        claims["email"] = email
    return create_access_token(claims)


@pytest.fixture
def user_token() -> str:
    """Access token for a regular attendee with a name and email on file."""
    return make_token("user-1", name="Test User", email="testuser@example.com")


@pytest.fixture
def other_user_token() -> str:
    return make_token("user-2", name="Other User", email="other@example.com")


@pytest.fixture
def admin_token() -> str:
    return make_token("admin-1", role="admin", name="Test Admin", email="admin@example.com")


@pytest.fixture
def user_headers(user_token) -> dict:
    return {"Authorization": f"Bearer {user_token}"}


@pytest.fixture
def other_user_headers(other_user_token) -> dict:
    return {"Authorization": f"Bearer {other_user_token}"}


@pytest.fixture
def admin_headers(admin_token) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def token_factory():
    """Mint access tokens with arbitrary claims."""
    return make_token


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    """Create a test event with ten seats."""
    event = Event(
        title="Test Event",
        description="A test event description",
        category=EventCategory.conference,
        venue="Test Venue",
        date=datetime.now(timezone.utc) + timedelta(days=7),
        capacity=10,
        available_seats=10,
        price=0,
        organizer="Test Organizer",
    )
    db_session.add(event)
    await db_session.commit()
    return event


@pytest_asyncio.fixture
async def test_events(db_session: AsyncSession) -> list:
    """Create multiple test events on consecutive days."""
    events = []
    base = datetime.now(timezone.utc) + timedelta(days=1)
    for i in range(5):
        event = Event(
            title=f"Event {i+1}",
            description=f"Description for event {i+1}",
            category=EventCategory.workshop if i % 2 else EventCategory.conference,
            venue=f"Venue {i+1}",
            date=base + timedelta(days=i),
            capacity=10 * (i+1),
            available_seats=10 * (i+1),
            price=0,
            organizer="Test Organizer",
        )
        db_session.add(event)
        events.append(event)

    await db_session.commit()
    return events


@pytest_asyncio.fixture
async def test_schedule(db_session: AsyncSession, test_event: Event) -> ScheduleItem:
    start = datetime(2030, 5, 1, 9, 0, tzinfo=timezone.utc)
    item = ScheduleItem(
        event_id=test_event.id,
        title="Opening Keynote",
        speaker="Jane Speaker",
        location="Main Hall",
        start_time=start,
        end_time=start + timedelta(hours=1),
    )
    db_session.add(item)
    await db_session.commit()
    return item


@pytest.fixture
def settings_override(monkeypatch):
    """Set attributes on the shared settings object for one test."""
    from app.core.config import settings

    def apply(**values):
        for key, value in values.items():
            monkeypatch.setattr(settings, key, value)
    return apply
