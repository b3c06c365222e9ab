"""Pytest configuration and fixtures."""

import asyncio
import os
import sys

import httpx
import pytest
import pytest_asyncio

from api.deps import get_db, get_notifier
from db import Base, make_engine, make_session_factory
from errors import NotificationDispatchError
from main import app
from models.waitlist_signup import WaitlistSignup  # noqa: F401

# Fix Windows asyncio event loop
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Set TEST_DATABASE_URL to run against PostgreSQL; defaults to a per-test SQLite file
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL")


class FakeNotifier:
    """In-memory notifier recording every delivery attempt."""

    def __init__(self):
        self.sent = []
        self.attempts = 0
        self._failures = []

    def fail_next(self, times: int = 1, *, ambiguous: bool = False) -> None:
        for _ in range(times):
            self._failures.append(ambiguous)

    async def send(self, email, content):
        self.attempts += 1
        if self._failures:
            ambiguous = self._failures.pop(0)
            raise NotificationDispatchError("simulated provider outage", ambiguous=ambiguous)
        self.sent.append((email, content))

    async def aclose(self):
        return None

    @property
    def sent_to(self):
        return [email for email, _ in self.sent]


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create a fresh schema for each test."""
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = make_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine):
    """Create a test database session."""
    session_factory = make_session_factory(db_engine)
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def notifier():
    """Fake notification collaborator."""
    return FakeNotifier()


@pytest.fixture
def override_dependencies(db_session, notifier):
    """Route the app's session and notifier dependencies to the test doubles."""

    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_dependencies):
    """HTTP client driving the app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http


@pytest.fixture
def admin_headers(monkeypatch):
    """Configure an operator key and return headers carrying it."""
    import config

    monkeypatch.setattr(config.settings, "ADMIN_API_KEY", "test-admin-key")
    return {"X-Admin-Key": "test-admin-key"}
