import os

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid filesystem dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from src.api.main import app  # noqa: E402
from src.api.repositories import (  # noqa: E402
    InMemoryRepository,
    InMemoryUserRepository,
    get_repository,
    get_user_repository,
)


@pytest.fixture(autouse=True)
def repositories():
    """Give every test its own empty stores."""
    todos = InMemoryRepository()
    users = InMemoryUserRepository()
    app.dependency_overrides[get_repository] = lambda: todos
    app.dependency_overrides[get_user_repository] = lambda: users
    yield todos, users
    app.dependency_overrides.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def register(client):
    """Register an account and return the response body (token + user fields)."""

    def _register(name="Alice", email="alice@example.com", password="secret123"):
        res = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        return res.json()

    return _register


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return bearer
