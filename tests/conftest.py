"""
Shared fixtures.

API tests run against `create_app(store=InMemoryStudentStore())`, so no database
is needed. Tokens are signed with a fixed test secret.
"""

import pytest
from fastapi.testclient import TestClient

from auth import security
from main import create_app
from students.memory import InMemoryStudentStore

TEST_SECRET = "test-secret-do-not-use-in-production-0123456789"


@pytest.fixture(autouse=True)
def _jwt_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("JWT_ALG", "HS256")
    monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MIN", raising=False)
    yield


@pytest.fixture
def store():
    return InMemoryStudentStore()


@pytest.fixture
def app(store):
    return create_app(store=store)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Factory fixture - bearer headers for a given caller id."""

    def _auth_headers(user_id: str = "alice") -> dict:
        return {"Authorization": f"Bearer {security.issue_token(user_id)}"}

    return _auth_headers
