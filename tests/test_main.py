from __future__ import annotations

import time

from fastapi.testclient import TestClient
import pytest

import main
from main import app, get_service
from userdata.cache import TTLCache
from userdata.config import Settings
from userdata.errors import UpstreamStatusError, UpstreamTransportError
from userdata.service import UserDataService

LEANNE_RAW = {
    "id": 1,
    "name": "Leanne Graham",
    "email": "Sincere@april.biz",
    "address": {"city": "Gwenborough"},
    "company": {"name": "Romaguera-Crona"},
}


class FakeUpstreamClient:
    def __init__(self) -> None:
        self.error: Exception | None = None
        self.calls: list[int] = []

    def fetch_raw(self, user_id):  # noqa: D401
        """Return Leanne with the requested id, or raise the preset error."""

        self.calls.append(user_id)
        if self.error is not None:
            raise self.error
        return dict(LEANNE_RAW, id=user_id)


@pytest.fixture()
def api_client():
    fake = FakeUpstreamClient()
    service = UserDataService(fake, TTLCache())
    app.dependency_overrides[get_service] = lambda: service
    client = TestClient(app)
    try:
        yield client, fake
    finally:
        app.dependency_overrides.pop(get_service, None)


def test_returns_flat_record(api_client):
    client, fake = api_client

    response = client.get("/?id=1")

    assert response.status_code == 200
    assert list(response.json().items()) == [
        ("id", 1),
        ("name", "Leanne Graham"),
        ("email", "Sincere@april.biz"),
        ("city", "Gwenborough"),
        ("company", "Romaguera-Crona"),
    ]
    assert fake.calls == [1]


def test_missing_id_defaults_to_one(api_client):
    client, fake = api_client

    response = client.get("/api/user")

    assert response.status_code == 200
    assert response.json()["id"] == 1
    assert fake.calls == [1]


def test_repeated_requests_hit_cache(api_client):
    client, fake = api_client

    client.get("/?id=3")
    client.get("/?id=3")

    assert fake.calls == [3]


@pytest.mark.parametrize("raw_id", ["0", "-1", "abc", "1.5", ""])
def test_invalid_id_is_rejected_before_lookup(api_client, raw_id):
    client, fake = api_client

    response = client.get("/", params={"id": raw_id})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid user ID. Must be a positive integer."}
    assert fake.calls == []


@pytest.mark.parametrize(
    "error",
    [UpstreamStatusError(404), UpstreamTransportError(ConnectionError("refused")), RuntimeError("boom")],
)
def test_core_failures_become_generic_server_error(api_client, error):
    client, fake = api_client
    fake.error = error

    response = client.get("/?id=2")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_other_methods_are_not_allowed(api_client):
    client, fake = api_client

    for method in ("POST", "PUT", "DELETE", "PATCH"):
        response = client.request(method, "/?id=1")

        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
    assert fake.calls == []


def test_security_headers_are_set(api_client):
    client, _ = api_client

    response = client.get("/?id=1")

    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Content-Security-Policy"] == "default-src 'none'; frame-ancestors 'none'"
    assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert response.headers["Permissions-Policy"] == "geolocation=(), microphone=(), camera=()"


def test_health_does_not_touch_upstream(api_client):
    client, fake = api_client

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "user-data-api"
    assert "timestamp" in body
    assert response.headers["Cache-Control"] == "no-cache"
    assert fake.calls == []


def test_cors_preflight_allows_get(api_client):
    client, fake = api_client

    response = client.options(
        "/",
        headers={"Origin": "https://example.test", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert fake.calls == []


def test_bare_options_is_not_allowed(api_client):
    client, _ = api_client

    response = client.options("/")

    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


class CountingCache(TTLCache):
    def __init__(self) -> None:
        super().__init__()
        self.sweeps = 0

    def sweep(self) -> int:
        self.sweeps += 1
        return super().sweep()


def test_lifespan_sweeps_cache_periodically(monkeypatch):
    swept = CountingCache()
    swept.set("stale", "value", ttl_seconds=0)
    swept.set("live", "value", ttl_seconds=60)
    monkeypatch.setattr(main, "cache", swept)
    monkeypatch.setattr(main, "settings", Settings(cache_sweep_interval_seconds=0.01))

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        deadline = time.monotonic() + 5
        while swept.sweeps == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

    assert swept.sweeps > 0
    assert swept.delete("stale") is False
    assert swept.get("live") == "value"


def test_lifespan_without_sweep_interval_starts_cleanly(monkeypatch):
    swept = CountingCache()
    monkeypatch.setattr(main, "cache", swept)
    monkeypatch.setattr(main, "settings", Settings(cache_sweep_interval_seconds=0))

    with TestClient(app) as client:
        assert client.get("/health").status_code == 200

    assert swept.sweeps == 0
