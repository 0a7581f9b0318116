"""Shared test fixtures for the routeguard test suite.

Tests run against a throwaway SQLite database (or ``TEST_DATABASE_URL``).
Tables are emptied before each test, so every test starts from a clean
database.
"""

import os
import tempfile

# Force auth off and use the test database before any app imports.
_TMP_DIR = tempfile.mkdtemp(prefix="routeguard-test-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL", f"sqlite:///{_TMP_DIR}/routeguard_test.db"
)
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from routeguard.core.config import settings
from routeguard.core.token_factory import create_token
from routeguard.database import Base, SessionLocal, engine, get_db
from routeguard.main import app
from routeguard.models import SystemRight, User
from routeguard.repositories.system_rights_repository import SystemRightsRepository
from routeguard.repositories.user_repository import UserRepository
from routeguard.schemas.rights import RouteDeclaration
from routeguard.services.authorization import GrantRow

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"

Base.metadata.create_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_tables():
    """Delete all rows before each test (children first for the foreign key)."""
    db = SessionLocal()
    try:
        db.query(SystemRight).delete()
        db.query(User).delete()
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture()
def client(db):
    """TestClient with the DB dependency bound to the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_enabled(monkeypatch):
    """Turn authentication on for the duration of a test."""
    monkeypatch.setattr(settings, "auth_enabled", True)


@pytest.fixture()
def make_user(db):
    """Factory creating a user, optionally with special-rights grants."""

    def _make(user_id: str, access_level: int, grants: dict = None) -> User:
        user = UserRepository(db).create(user_id, access_level)
        if grants:
            SystemRightsRepository(db).replace_user_grants(
                user_id, {tool: GrantRow(**flags) for tool, flags in grants.items()}
            )
        return user

    return _make


def auth_headers(user_id: str) -> dict:
    token = create_token(user_id, settings.jwt_secret_key)
    return {"Authorization": f"Bearer {token}"}


def route(path: str, method: str = "GET", **fields) -> RouteDeclaration:
    """Shorthand for a route declaration."""
    return RouteDeclaration(path=path, method=method, **fields)
