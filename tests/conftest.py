"""
Pytest configuration and fixtures for DataJeopardy tests.

This file provides reusable test fixtures for database, API client, and seeded data.
"""

import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["API_KEY"] = "test_api_key_12345"
os.environ["RATE_LIMIT_ADD_LOG"] = "10000/minute"
os.environ["AUTO_LOCK_RISK_THRESHOLD"] = "60"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from datajeopardy.main import app
from datajeopardy.database import get_db
from datajeopardy.init_db import init_db
from datajeopardy.models import Base
from datajeopardy import crud, models
from datajeopardy.services.threat_service import ThreatService
from datajeopardy.types import Severity


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session with seeded roles and routines for each test.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    init_db(session)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def api_key():
    """
    Return a test API key.
    """
    return "test_api_key_12345"


@pytest.fixture
def auth_headers(api_key):
    """
    Return headers with API key authentication.
    """
    return {"X-API-Key": api_key}


@pytest.fixture
def service():
    return ThreatService(threshold=60)


def _role_id(db_session, name):
    return db_session.query(models.Role).filter(models.Role.role_name == name).one().id


def _make_user(db_session, username, role_name):
    user = crud.create_user(db_session, username, "secret", _role_id(db_session, role_name))
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def make_user(db_session):
    """
    Factory: create an ACTIVE user with the given role.
    """
    def factory(username, role_name="Developer"):
        return _make_user(db_session, username, role_name)
    return factory


@pytest.fixture
def add_high_entries(db_session):
    """
    Factory: write ``count`` HIGH audit entries for a user.
    """
    def factory(user_id, count):
        for i in range(count):
            crud.create_log(db_session, user_id, f"DROP TABLE t{i}", Severity.HIGH.value, "blocked", None)
        db_session.commit()
    return factory


@pytest.fixture
def sample_user(make_user):
    return make_user("dev_alice")


@pytest.fixture
def admin_user(make_user):
    return make_user("root_admin", "Admin")


@pytest.fixture
def high_risk_user(make_user, add_high_entries):
    """
    Non-admin ACTIVE user with 4 prior HIGH entries (RiskScore 60).
    """
    user = make_user("risky_bob")
    add_high_entries(user.id, 4)
    return user
