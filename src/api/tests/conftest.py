"""Shared fixtures for API tests.

Settings come from the environment, so every test runs with a known
JWT secret and the in-memory backend, and starts from fresh collaborators.
"""

import pytest

from api.dependencies import reset_dependencies
from api.main import app

TEST_JWT_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture(autouse=True)
def api_environment(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    reset_dependencies()
    yield
    app.dependency_overrides.clear()
    reset_dependencies()
