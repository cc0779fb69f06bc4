"""Shared test fixtures: fake Management API, session cache, test client."""

import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.cache import SessionCache
from app.core.management_api import ManagementApiClient
from app.dependencies import get_management_client, get_revocation_registry, get_session_cache
from app.main import app
from app.services.revocation_service import RevocationRegistry

_USER_ID = "user-1"


def _make_session(
    uid: str,
    *,
    login_ts: float | None = 1_700_000_000,
    authorizations: dict | None = None,
    browser: str | None = "Chrome",
    os_name: str | None = "macOS",
    device_model: str | None = None,
    ip: str | None = "203.0.113.7",
    location: dict | None = None,
) -> dict:
    """Session payload shaped like the Management API response."""
    payload = {"uid": uid, "kind": "Session", "authorizations": authorizations or {}}
    if login_ts is not None:
        payload["loginTs"] = login_ts
    return {
        "payload": payload,
        "lastSubmission": {
            "ip": ip,
            "userAgent": "Mozilla/5.0",
            "userAgentParsed": {
                "browser": {"name": browser},
                "os": {"name": os_name},
                "device": {"model": device_model},
            },
            "location": {"city": "Berlin", "country": "DE"} if location is None else location,
        },
        "clientId": "app-a",
        "accountId": _USER_ID,
    }


@pytest.fixture
def user_id() -> str:
    return _USER_ID


@pytest.fixture
def make_session():
    """Factory for Management API session payloads."""
    return _make_session


class FakeManagementApi:
    """In-memory Management API served over httpx.MockTransport."""

    def __init__(self) -> None:
        self.sessions: dict[str, dict[str, dict]] = {}
        self.requests: list[tuple[str, str]] = []
        self.fail_revoke: tuple[int, dict] | None = None
        self.fail_fetch: tuple[int, dict] | None = None

    def add(self, user_id: str, session: dict) -> None:
        self.sessions.setdefault(user_id, {})[session["payload"]["uid"]] = session

    def count(self, method: str, path: str) -> int:
        return self.requests.count((method, path))

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))
        parts = path.strip("/").split("/")
        # api/users/{user_id}/sessions[/{session_id}]
        if parts[:2] != ["api", "users"] or len(parts) < 4 or parts[3] != "sessions":
            return httpx.Response(404, json={"code": "request.not_found", "message": "Not found"})
        user_sessions = self.sessions.get(parts[2], {})

        if request.method == "GET" and self.fail_fetch is not None:
            status, body = self.fail_fetch
            return httpx.Response(status, json=body)

        if len(parts) == 4 and request.method == "GET":
            return httpx.Response(200, json={"sessions": list(user_sessions.values())})

        session_id = parts[4]
        if session_id not in user_sessions:
            return httpx.Response(
                404, json={"code": "entity.not_found", "message": "Session not found"}
            )
        if request.method == "GET":
            return httpx.Response(200, content=json.dumps(user_sessions[session_id]))
        if request.method == "DELETE":
            if self.fail_revoke is not None:
                status, body = self.fail_revoke
                return httpx.Response(status, json=body)
            del user_sessions[session_id]
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture
def fake_api() -> FakeManagementApi:
    return FakeManagementApi()


@pytest_asyncio.fixture
async def management_client(fake_api: FakeManagementApi) -> ManagementApiClient:
    """Yield a Management API client wired to the fake API."""
    client = ManagementApiClient(
        "https://tenant.example.com",
        "test-token",
        transport=httpx.MockTransport(fake_api.handler),
    )
    yield client
    await client.aclose()


@pytest.fixture
def session_cache(management_client: ManagementApiClient) -> SessionCache:
    return SessionCache(management_client.fetch, maxsize=64, ttl=300)


@pytest.fixture
def revocation_registry() -> RevocationRegistry:
    return RevocationRegistry()


@pytest_asyncio.fixture
async def client(
    management_client: ManagementApiClient,
    session_cache: SessionCache,
    revocation_registry: RevocationRegistry,
) -> AsyncClient:
    """Yield an httpx AsyncClient wired to the fake Management API."""
    app.dependency_overrides[get_management_client] = lambda: management_client
    app.dependency_overrides[get_session_cache] = lambda: session_cache
    app.dependency_overrides[get_revocation_registry] = lambda: revocation_registry
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
