"""Tests for the rate-limit dependencies wired into the app."""

import unittest
from datetime import timedelta

from fastapi.testclient import TestClient

from adapter.memory.rate_limiter import FixedWindowRateLimiter
from adapter.memory.user_repository import InMemoryUserRepository
from api.dependencies import (
    get_global_limiter,
    get_password_hasher,
    get_sign_in_limiter,
    get_todo_creation_limiter,
    get_user_creation_limiter,
    get_user_repo,
)
from api.main import app
from api.middleware.rate_limit import client_ip
from domain.model.rate_limit import RateLimitPolicy
from services.password_hasher import PasswordHasher


def _limiter(limit: int) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(RateLimitPolicy(period=timedelta(hours=1), limit=limit))


class TestRateLimitedRoutes(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)
        self.repo = InMemoryUserRepository()
        self.hasher = PasswordHasher(rounds=4)
        app.dependency_overrides[get_user_repo] = lambda: self.repo
        app.dependency_overrides[get_password_hasher] = lambda: self.hasher
        for dependency in (get_global_limiter, get_sign_in_limiter,
                           get_user_creation_limiter, get_todo_creation_limiter):
            app.dependency_overrides[dependency] = lambda: _limiter(10_000)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_sign_in_limit(self):
        limiter = _limiter(2)
        app.dependency_overrides[get_sign_in_limiter] = lambda: limiter
        body = {"email": "user@example.com", "password": "password123"}

        statuses = [self.client.post("/sessions", json=body).status_code for _ in range(3)]

        self.assertEqual(statuses, [400, 400, 429])

    def test_denied_response_envelope_and_retry_after(self):
        limiter = _limiter(1)
        app.dependency_overrides[get_user_creation_limiter] = lambda: limiter
        body = {"email": "user@example.com", "password": "password123"}

        self.client.post("/users", json=body)
        response = self.client.post("/users", json={"email": "other@example.com", "password": "password123"})

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json()["errors"][0]["message"], "Too many requests... Slow down")
        self.assertGreaterEqual(int(response.headers["Retry-After"]), 1)
        self.assertIsNone(self.repo.get_by_email("other@example.com"))

    def test_limit_runs_before_authentication(self):
        """A limited todo creation is refused with 429 even without a token."""
        limiter = _limiter(1)
        app.dependency_overrides[get_todo_creation_limiter] = lambda: limiter

        first = self.client.post("/todos", json={"title": "a"})
        second = self.client.post("/todos", json={"title": "a"})

        self.assertEqual(first.status_code, 401)
        self.assertEqual(second.status_code, 429)

    def test_global_limit_applies_to_status(self):
        limiter = _limiter(2)
        app.dependency_overrides[get_global_limiter] = lambda: limiter

        statuses = [self.client.get("/status").status_code for _ in range(3)]

        self.assertEqual(statuses, [200, 200, 429])

    def test_admitted_response_carries_rate_limit_headers(self):
        limiter = _limiter(5)
        app.dependency_overrides[get_global_limiter] = lambda: limiter

        response = self.client.get("/status")

        self.assertEqual(response.headers["X-RateLimit-Limit"], "5")
        self.assertEqual(response.headers["X-RateLimit-Remaining"], "4")
        self.assertIn("X-RateLimit-Reset", response.headers)

    def test_other_endpoint_classes_are_independent(self):
        limiter = _limiter(1)
        app.dependency_overrides[get_sign_in_limiter] = lambda: limiter
        body = {"email": "user@example.com", "password": "password123"}

        self.client.post("/sessions", json=body)
        self.assertEqual(self.client.post("/sessions", json=body).status_code, 429)

        self.assertEqual(self.client.post("/users", json=body).status_code, 201)


class FakeClient:
    def __init__(self, host):
        self.host = host


class FakeRequest:
    def __init__(self, headers=None, host="10.0.0.1"):
        self.headers = headers or {}
        self.client = FakeClient(host) if host else None


class TestClientIp(unittest.TestCase):

    def test_uses_peer_address_by_default(self):
        request = FakeRequest(headers={"x-forwarded-for": "1.1.1.1"})
        self.assertEqual(client_ip(request), "10.0.0.1")

    def test_trusted_forwarded_for_uses_first_hop(self):
        request = FakeRequest(headers={"x-forwarded-for": "1.1.1.1, 2.2.2.2"})
        self.assertEqual(client_ip(request, trust_proxy_headers=True), "1.1.1.1")

    def test_trusted_real_ip(self):
        request = FakeRequest(headers={"x-real-ip": "3.3.3.3"})
        self.assertEqual(client_ip(request, trust_proxy_headers=True), "3.3.3.3")

    def test_no_client(self):
        self.assertEqual(client_ip(FakeRequest(host=None)), "unknown")
