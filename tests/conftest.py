"""
Test configuration for the club authentication service.
"""
import os

# Settings are read when clubauth.database is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clubauth.auth.dependencies import get_mail_dispatcher, get_token_service
from clubauth.auth.service import StudentAuthService
from clubauth.config import Settings, get_settings
from clubauth.core.security import TokenService
from clubauth.database import Base, get_db
from clubauth.main import app
from clubauth.students.directory import StudentDirectory
from clubauth.students.models import Student

# Test database URL
TEST_DATABASE_URL = "sqlite://"

# Create test database engine
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ENROLLMENT_NUMBER = "123456789"


class FakeClock:
    """Controllable clock for the token service."""

    def __init__(self):
        self.now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeMailDispatcher:
    """Records verification emails instead of sending them."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to_address: str, verification_url: str) -> bool:
        if self.fail:
            return False
        self.sent.append((to_address, verification_url))
        return True

    def last_link(self) -> dict:
        """Query parameters of the most recently sent link."""
        _, url = self.sent[-1]
        return {key: values[0] for key, values in parse_qs(urlparse(url).query).items()}


@pytest.fixture
def settings():
    return Settings(
        secret_key="test-secret-key",
        database_url=TEST_DATABASE_URL,
        email_postback_url="http://testserver",
        access_token_expire_minutes=30,
        verification_token_expire_minutes=15,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tokens(settings, clock):
    return TokenService(settings, clock=clock)


@pytest.fixture
def mailer():
    return FakeMailDispatcher()


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.
    """
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    # Drop tables after test
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def directory(db):
    return StudentDirectory(db)


@pytest.fixture
def student(directory):
    """An imported student who has not verified an email yet."""
    return directory.add(
        Student(
            enrollment_number=ENROLLMENT_NUMBER,
            first_name="Asha",
            last_name="Verma",
            credits="12",
            in_club_as_team=["robotics"],
            in_club_as_member=["robotics", "debate"],
        )
    )


@pytest.fixture
def service(directory, tokens, mailer, settings):
    return StudentAuthService(directory, tokens, mailer, settings)


@pytest.fixture(scope="function")
def client(db, settings, tokens, mailer):
    """
    Create a test client with a test database session and fake collaborators.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    # Override dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_service] = lambda: tokens
    app.dependency_overrides[get_mail_dispatcher] = lambda: mailer

    # Create test client
    with TestClient(app) as client:
        yield client

    # Remove dependency override
    app.dependency_overrides = {}
