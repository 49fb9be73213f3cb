"""
- Build a shared in-memory SQLite database for the test session
- Create tables before tests run
- Provide a db_session fixture and override FastAPI's get_db so routes use the test session.
- Provide a client fixture (TestClient(app)) that already has the DB override applied.
- Pin "today" so the daily secret is known.
"""
import os
from datetime import date
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the app from creating tables in the real database on startup
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("CURDLE_STORE", "db")

from curdle.db import Base, get_db
from curdle.main import app
from curdle import models  # noqa: F401
import curdle.main as app_main

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"

# 2024-03-09 -> secret: milkfat 28, April, day 8, year 1924
PINNED_DAY = date(2024, 3, 9)


@pytest.fixture(scope="session")
def engine():
    # StaticPool + check_same_thread=False lets TestClient's worker thread and the
    # test thread share ONE in-memory database.
    engine = create_engine(
        TEST_DATABASE_URL,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine) -> Generator:
    """Provide a clean session per test with rollback."""
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    db = TestingSessionLocal()
    try:
        yield db
        db.rollback()
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _clean_db(engine):
    """The repository commits inside requests, so wipe rows before each test."""
    with engine.begin() as conn:
        conn.execute(text("DELETE FROM guesses"))
        conn.execute(text("DELETE FROM games"))
        conn.execute(text("DELETE FROM stats"))
    yield


@pytest.fixture(autouse=True)
def override_dep(db_session):
    """Force the app to use our test session for every request."""
    def _get_db_for_tests():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_for_tests
    yield
    app.dependency_overrides.clear()


class Clock:
    """Mutable stand-in for the calendar, so a test can cross midnight."""

    def __init__(self, day: date) -> None:
        self.day = day

    def __call__(self) -> date:
        return self.day


@pytest.fixture
def today(monkeypatch) -> Clock:
    clock = Clock(PINNED_DAY)
    monkeypatch.setattr(app_main, "today_utc", clock)
    return clock


@pytest.fixture
def client(today):
    return TestClient(app)
