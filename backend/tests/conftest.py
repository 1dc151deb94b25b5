"""Pytest fixtures — file-backed SQLite database, fresh per test."""
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from gatherpress.database import Base, get_db
from gatherpress.main import app
from gatherpress.repositories.rsvp_repository import SqlResponseRepository
from gatherpress.services.cache import RedisAggregateCache, get_aggregate_cache
from gatherpress.services.providers import (
    SqlEventTypeCheck,
    SqlRoleResolver,
    SqlSettingsProvider,
    SqlUserDirectory,
)
from gatherpress.services.rsvp_service import RsvpEngine

# Import all models so they register with Base.metadata
from gatherpress.models.user import User, LeadershipRole  # noqa: F401
from gatherpress.models.event import Event                # noqa: F401
from gatherpress.models.rsvp import Rsvp                  # noqa: F401

SQLITE_URL = "sqlite:///./test.db"
ROLES = ["Organizer", "Assistant Organizer", "Event Organizer"]


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session, closed after the test."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient on SQLite with a private fakeredis-backed aggregate cache."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    cache = fake_cache()

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_aggregate_cache] = lambda: cache
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def fake_cache(server: fakeredis.FakeServer = None) -> RedisAggregateCache:
    """Aggregate cache on an in-process fake Redis; pass a server to share it."""
    return RedisAggregateCache(fakeredis.FakeRedis(server=server or fakeredis.FakeServer()))


class TickingClock:
    """Returns a strictly increasing UTC time, one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def make_engine(db):
    """Factory for an RsvpEngine wired to the test database."""

    def _make(max_attending_limit: int = 50, cache=None, repository=None, clock=None) -> RsvpEngine:
        return RsvpEngine(
            repository=repository or SqlResponseRepository(db, page_size=2),
            cache=cache if cache is not None else fake_cache(),
            settings_provider=SqlSettingsProvider(db, max_attending_limit),
            role_resolver=SqlRoleResolver(db, ROLES),
            user_directory=SqlUserDirectory(db, "https://example.test"),
            event_check=SqlEventTypeCheck(db),
            clock=clock or TickingClock(),
        )

    return _make


# ---------------------------------------------------------------------------
# Helpers: create rows directly (engine tests) or via the API (route tests)
# ---------------------------------------------------------------------------
def add_user(db, login: str, name: str = None, email: str = "", role: str = None) -> User:
    """Insert a user, optionally holding a leadership role."""
    user = User(user_login=login, display_name=name or login.title(), email=email)
    if role:
        user.leadership = LeadershipRole(role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def add_event(db, title: str = "Meetup", max_guest_limit: int = 0, post_type: str = "gatherpress_event") -> Event:
    event_row = Event(title=title, max_guest_limit=max_guest_limit, post_type=post_type)
    db.add(event_row)
    db.commit()
    db.refresh(event_row)
    return event_row


def create_test_user(client: TestClient, login: str = "tester", name: str = "Test User") -> dict:
    """Helper — POST /api/users and return response JSON."""
    resp = client.post("/api/users/", json={
        "user_login": login,
        "display_name": name,
        "email": f"{login}@example.test",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(client: TestClient, title: str = "Test Event", **fields) -> dict:
    """Helper — POST /api/events and return response JSON."""
    resp = client.post("/api/events/", json={"title": title, **fields})
    assert resp.status_code == 201, resp.text
    return resp.json()
