"""Shared test fixtures for the SiteCraft backend test suite.

Tests run against a throwaway SQLite file created for the session. Tables
come from ``init_db`` on app import; each test starts from empty tables.
Generation never reaches a real provider: GENERATION_MODEL is blank, and
tests that need output patch ``GenerationClient.complete`` or inject a fake.
"""

import os
import tempfile

# Point the app at a temp database and turn auth on before any app imports.
# Test modules import helpers from tests.conftest, which runs this twice.
_TEST_DB_DIR = os.environ.setdefault(
    "SITECRAFT_TEST_DB_DIR", tempfile.mkdtemp(prefix="sitecraft-test-")
)
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}",
)
os.environ["AUTH_ENABLED"] = "true"
os.environ["LOG_FORMAT"] = "text"
os.environ["GENERATION_MODEL"] = ""
os.environ["REVISION_COST"] = "5"

import pytest
from sqlalchemy import text
from fastapi.testclient import TestClient

from sitecraft.database import get_db, SessionLocal
from sitecraft.main import app
from sitecraft.core.token_factory import create_token
from sitecraft.core.config import settings
from sitecraft.middleware.request_context import _rate_buckets
from sitecraft.models import Project, User

# Tables to clear between tests (children first for foreign keys).
_CLEAR_TABLES = [
    "credit_transactions", "conversation_turns", "versions", "projects", "users",
]

SAMPLE_CODE = "<html><body><button>Buy</button></body></html>"


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty all data tables before each test for isolation.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    db = SessionLocal()
    try:
        for table in _CLEAR_TABLES:
            db.execute(text(f"DELETE FROM {table}"))
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        # Background tasks write through their own session.
        db.expire_all()
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    _rate_buckets.clear()  # Reset rate limiter so tests don't hit 429
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db, user_id: str = "test-user", credits: int = 20, display_name: str = "Test User") -> User:
    """Insert a user with a starting balance."""
    user = User(user_id=user_id, display_name=display_name, credits=credits)
    db.add(user)
    db.commit()
    return user


def make_project(db, user_id: str = "test-user", code: str = "", name: str = "Bakery") -> Project:
    """Insert a project directly, skipping the create workflow."""
    project = Project(
        user_id=user_id,
        name=name,
        initial_prompt="A landing page for a bakery",
        current_code=code,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def headers_for(user_id: str) -> dict:
    """Valid bearer auth headers for *user_id*."""
    token = create_token(subject=user_id, secret=settings.jwt_secret_key)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def user(db) -> User:
    return make_user(db)


@pytest.fixture()
def auth_headers(user) -> dict:
    """Auth headers for the default test user, who exists with 20 credits."""
    return headers_for(user.user_id)


class FakeGenerator:
    """Stand-in for GenerationClient that replays scripted responses.

    Each entry is returned in order; an Exception instance is raised instead.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[tuple[str, str]] = []

    def is_configured(self) -> bool:
        return True

    def complete(self, system_instruction: str, user_instruction: str) -> str:
        self.calls.append((system_instruction, user_instruction))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
