# tests/main/test_main.py
"""Tests for application wiring: health, middleware and lifecycle."""

from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from contact_api.main import app

CONTACT = "/api/contact"
ALLOWED_ORIGIN = "http://localhost:5173"
PREFLIGHT = {"Access-Control-Request-Method": "POST", "Access-Control-Request-Headers": "content-type"}


def test_health_check(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["environment"] == "development"
    assert data["email_client"] == "configured"
    assert data["rate_limit_records"] == 0


def test_security_headers(client: TestClient) -> None:
    response = client.get("/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in response.headers


class TestCors:
    """Preflight always answers 200; the origin is echoed only when allowed."""

    def test_preflight_from_allowed_origin(self, client: TestClient) -> None:
        response = client.options(CONTACT, headers={"Origin": ALLOWED_ORIGIN, **PREFLIGHT})

        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN
        assert response.headers["Access-Control-Allow-Credentials"] == "true"
        assert "POST" in response.headers["Access-Control-Allow-Methods"]

    def test_preflight_from_production_origin(self, client: TestClient) -> None:
        headers = {"Origin": "https://www.topea.me", **PREFLIGHT}
        response = client.options(CONTACT, headers=headers)

        assert response.headers["Access-Control-Allow-Origin"] == "https://www.topea.me"

    def test_preflight_from_unknown_origin(self, client: TestClient) -> None:
        response = client.options(CONTACT, headers={"Origin": "https://evil.example", **PREFLIGHT})

        assert response.status_code == 200
        assert "Access-Control-Allow-Origin" not in response.headers

    def test_post_from_allowed_origin(self, client: TestClient) -> None:
        response = client.post(
            CONTACT,
            json={"name": "Jane", "email": "jane@x.com", "message": "Hi"},
            headers={"Origin": ALLOWED_ORIGIN},
        )

        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == ALLOWED_ORIGIN

    def test_error_from_unknown_origin_has_no_cors_header(self, client: TestClient) -> None:
        response = client.post(CONTACT, json={}, headers={"Origin": "https://evil.example"})

        assert response.status_code == 400
        assert "Access-Control-Allow-Origin" not in response.headers


def test_lifespan_starts_and_stops_services() -> None:
    with TestClient(app) as client:
        rate_limiter = client.app.state.rate_limiter
        monitor = client.app.state.security_monitor
        assert rate_limiter.is_running
        assert not monitor.is_shut_down

    assert not rate_limiter.is_running
    assert monitor.is_shut_down


async def test_async_client_without_lifespan() -> None:
    # ASGITransport does not run the lifespan; the health check still answers
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/health")

    assert response.status_code == 200
    assert response.json()["rate_limit_records"] == 0
