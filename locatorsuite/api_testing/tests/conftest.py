"""
================================================================================
API Testing Pytest Configuration
================================================================================

Shared fixtures for API tests.

Fixtures:
    - config: Configuration loader instance
    - mock_api: In-memory users service behind an httpx.MockTransport
    - api_client: ApiClient wired to the mock service
    - test_user_data: Fresh user payload per test

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import re
import uuid
from typing import Any, Dict, Generator, List

import httpx
import pytest

from locatorsuite.api_testing.framework import ApiClient
from locatorsuite.common.config_loader import ConfigLoader


MOCK_BASE_URL = "https://api.example.test"
VALID_CREDENTIALS = {"username": "demo_user", "password": "demo_password"}
MOCK_TOKEN = "mock-token-123"


class MockUsersService:
    """
    Minimal users REST service used as an httpx transport handler.

    Routes:
        GET/POST        /users
        GET/PUT/PATCH/DELETE /users/{id}
        POST            /auth/login
        GET             /profile        (Bearer token required)
        GET             /flaky          (503 for the first `flaky_failures` calls)
        POST            /upload         (multipart echo)
    """

    def __init__(self, flaky_failures: int = 2) -> None:
        self.users: Dict[int, Dict[str, Any]] = {
            1: {"id": 1, "name": "Leanne Graham", "username": "Bret", "email": "leanne@example.com"},
            2: {"id": 2, "name": "Ervin Howell", "username": "Antonette", "email": "ervin@example.com"},
        }
        self.flaky_failures = flaky_failures
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        method = request.method

        if path == "/auth/login" and method == "POST":
            return self._login(request)
        if path == "/profile":
            if request.headers.get("Authorization") != f"Bearer {MOCK_TOKEN}":
                return httpx.Response(401, json={"error": "Unauthorized"})
            return httpx.Response(200, json={"id": 1, "username": "demo_user"})
        if path == "/flaky":
            if self.flaky_failures > 0:
                self.flaky_failures -= 1
                return httpx.Response(503, json={"error": "Service Unavailable"})
            return httpx.Response(200, json={"status": "ok"})
        if path == "/upload" and method == "POST":
            return self._upload(request)
        if path == "/users":
            return self._users(request)

        match = re.fullmatch(r"/users/(\d+)", path)
        if match:
            return self._user(request, int(match.group(1)))
        return httpx.Response(404, json={"error": "Not Found"})

    def _login(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        if body == VALID_CREDENTIALS:
            return httpx.Response(200, json={"accessToken": MOCK_TOKEN})
        return httpx.Response(401, json={"error": "Invalid credentials"})

    def _upload(self, request: httpx.Request) -> httpx.Response:
        content_type = request.headers.get("Content-Type", "")
        if not content_type.startswith("multipart/form-data"):
            return httpx.Response(415, json={"error": "Expected multipart/form-data"})
        body = request.read()
        match = re.search(rb'name="([^"]+)"; filename="([^"]+)"', body)
        if match is None:
            return httpx.Response(400, json={"error": "No file part"})
        return httpx.Response(
            201,
            json={
                "field": match.group(1).decode(),
                "filename": match.group(2).decode(),
                "size": len(body),
            },
        )

    def _users(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=list(self.users.values()))
        if request.method == "POST":
            user = json.loads(request.content or b"{}")
            user["id"] = max(self.users) + 1
            self.users[user["id"]] = user
            return httpx.Response(201, json=user)
        return httpx.Response(405)

    def _user(self, request: httpx.Request, user_id: int) -> httpx.Response:
        if user_id not in self.users:
            return httpx.Response(404, json={})
        if request.method == "GET":
            return httpx.Response(200, json=self.users[user_id])
        if request.method in ("PUT", "PATCH"):
            changes = json.loads(request.content or b"{}")
            if request.method == "PUT":
                self.users[user_id] = {"id": user_id, **changes}
            else:
                self.users[user_id].update(changes)
            return httpx.Response(200, json=self.users[user_id])
        if request.method == "DELETE":
            del self.users[user_id]
            return httpx.Response(200, json={})
        return httpx.Response(405)


# =============================================================================
# Session-Scoped Fixtures (Shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def config() -> ConfigLoader:
    """
    Provide configuration loader instance.

    Session-scoped to ensure configuration is loaded only once.
    """
    return ConfigLoader()


# =============================================================================
# Function-Scoped Fixtures (Fresh for each test)
# =============================================================================

@pytest.fixture
def mock_api() -> MockUsersService:
    return MockUsersService()


@pytest.fixture
def sleeps() -> List[float]:
    """Delays requested by the client's retry loop."""
    return []


@pytest.fixture
def api_client(
    config: ConfigLoader,
    mock_api: MockUsersService,
    sleeps: List[float],
) -> Generator[ApiClient, None, None]:
    """
    ApiClient against the mock users service.

    Retry delays are recorded in `sleeps` instead of slept.
    """
    with ApiClient(
        config,
        base_url=MOCK_BASE_URL,
        transport=httpx.MockTransport(mock_api),
        sleep=sleeps.append,
    ) as client:
        yield client


@pytest.fixture
def test_user_data() -> Dict[str, Any]:
    """Generate unique test user data."""
    unique_id = uuid.uuid4().hex[:8]
    return {
        "name": f"Test User {unique_id}",
        "username": f"testuser_{unique_id}",
        "email": f"test_{unique_id}@example.com",
        "phone": "1234567890",
    }
