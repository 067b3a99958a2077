"""Pytest fixtures: a fresh SQLite file database per test.

A file (not :memory:) database is used so the concurrency tests can give
every worker thread its own connection and session.
"""
from datetime import datetime, timezone, timedelta
from typing import Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from admissions.database import Base, get_db
from admissions.main import app

# Import all models so they register with Base.metadata
import admissions.models  # noqa: F401
from admissions.models.event import Event

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False, "timeout": 30})

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
def session_factory(db_engine):
    """Session factory bound to the test engine; one session per worker thread."""
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
# Helpers: create events via the API or straight into the database
# ---------------------------------------------------------------------------
def create_test_event(
    client: TestClient,
    title: str = "Sunday Service",
    capacity: Optional[int] = 10,
    start_offset_hours: int = 24,
    duration_hours: int = 2,
    status: str = "scheduled",
) -> dict:
    """Helper: POST /api/events and return response JSON."""
    start = datetime.now(timezone.utc) + timedelta(hours=start_offset_hours)
    end = start + timedelta(hours=duration_hours)
    resp = client.post("/api/events/", json={
        "title": title,
        "start_time_utc": start.isoformat(),
        "end_time_utc": end.isoformat(),
        "location": "Main Sanctuary",
        "capacity": capacity,
        "status": status,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def insert_event(
    db,
    capacity: Optional[int] = 10,
    start_offset_hours: int = 24,
    duration_hours: int = 2,
    title: str = "Youth Night",
) -> Event:
    """Helper: add an event row directly and return it."""
    start = datetime.now(timezone.utc) + timedelta(hours=start_offset_hours)
    event = Event(
        title=title,
        start_time_utc=start,
        end_time_utc=start + timedelta(hours=duration_hours),
        capacity=capacity,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event
