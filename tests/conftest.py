"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auction.db.base import Base
import auction.db.models  # noqa: F401 - registers models on Base


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    """API client whose requests share ``db_session``."""
    from auction.api.deps import get_db
    from auction.api.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_config():
    """Sample settings values."""
    return {
        "app_name": "Jewelry Auction (test)",
        "database_url": "sqlite://",
        "cors_origins": "http://localhost:3000, https://auction.example.com",
        "log_level": "DEBUG",
        "approval_transitions": {
            "ACTIVE": ["APPROVED", "REJECTED"],
            "REJECTED": ["ACTIVE"],
        },
    }
