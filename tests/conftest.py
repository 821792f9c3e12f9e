"""
Pytest configuration and fixtures for SportsMeet API tests.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sportsmeet.auth import create_user_token, get_password_hash
from sportsmeet.clock import utcnow
from sportsmeet.database import Base, get_db
from sportsmeet.limiter import limiter
from sportsmeet.main import app
from sportsmeet.models import Activity, User

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


def make_user(db, username: str, password: str = "testpassword123") -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash(password),
        real_name=username.title(),
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_activity(db, creator: User, **overrides) -> Activity:
    """Insert an activity directly, bypassing the schedule checks."""
    now = utcnow()
    fields = dict(
        title="Sunday football",
        description="Friendly match",
        location="City Park",
        category="football",
        start_time=now + timedelta(days=2),
        end_time=now + timedelta(days=2, hours=2),
        price=Decimal("50.00"),
        max_participants=10,
        current_participants=0,
        creator_id=creator.id,
    )
    fields.update(overrides)
    activity = Activity(**fields)
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture(scope="function")
def test_user(db):
    """Create a test user."""
    return make_user(db, "testuser")


@pytest.fixture(scope="function")
def other_user(db):
    return make_user(db, "otheruser")


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """Get auth headers for the test user."""
    return bearer(test_user)


@pytest.fixture(scope="function")
def other_headers(other_user):
    return bearer(other_user)


@pytest.fixture(scope="function")
def activity(db, test_user):
    """A future activity owned by the test user."""
    return make_activity(db, test_user)
