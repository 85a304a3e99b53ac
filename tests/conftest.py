"""Pytest fixtures: fresh SQLite database per test, shared by the API client and direct sessions."""
import pytest
from datetime import datetime, timedelta, timezone
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.database import Base, get_db
from app.main import app

# Import all models so they register with Base.metadata
from app.models.event import Event                    # noqa: F401
from app.models.participant import Participant        # noqa: F401
from app.models.event_mutation import EventMutation   # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 30})

    # WAL lets readers in other threads proceed while one writer commits
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
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def event_payload(
    title: str = "Test Event",
    participant_limit: int = 2,
    starts_in: timedelta = timedelta(days=1),
    **overrides,
) -> dict:
    """JSON body for POST /api/events, starting `starts_in` from now (UTC)."""
    start = datetime.now(timezone.utc) + starts_in
    payload = {
        "title": title,
        "description": "A test event",
        "event_date": start.date().isoformat(),
        "event_time": start.time().replace(microsecond=0).isoformat(),
        "venue": "Main Hall",
        "organiser": "Events Team",
        "participant_limit": participant_limit,
    }
    payload.update(overrides)
    return payload


def create_test_event(client: TestClient, **kwargs) -> dict:
    """Helper: POST /api/events and return response JSON."""
    resp = client.post("/api/events/?actor=admin", json=event_payload(**kwargs))
    assert resp.status_code == 201, resp.text
    return resp.json()


def register(client: TestClient, event_id: str, email: str, name: str = "Guest"):
    """Helper: POST /api/participants/register and return the raw response."""
    return client.post("/api/participants/register", json={
        "event_id": event_id,
        "name": name,
        "email": email,
    })
