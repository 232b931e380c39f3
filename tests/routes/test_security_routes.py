# tests/routes/test_security_routes.py
"""Tests for the /api/security-report endpoint."""

import pytest
from fastapi.testclient import TestClient

from contact_api.configs import settings

REPORT = "/api/security-report"
ADMIN_HEADERS = {"Authorization": "Bearer test-admin-token"}


class TestAuthorization:
    def test_missing_token(self, client: TestClient) -> None:
        response = client.get(REPORT)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_wrong_token(self, client: TestClient) -> None:
        response = client.get(REPORT, headers={"Authorization": "Bearer guess"})
        assert response.status_code == 401

    def test_wrong_scheme(self, client: TestClient) -> None:
        response = client.get(REPORT, headers={"Authorization": "Basic dGVzdA=="})
        assert response.status_code == 401

    def test_unconfigured_token(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "ADMIN_TOKEN", None)

        response = client.get(REPORT, headers=ADMIN_HEADERS)

        assert response.status_code == 503
        assert "error" in response.json()


class TestReport:
    def test_empty_report(self, client: TestClient) -> None:
        response = client.get(REPORT, headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "totalEvents": 0,
            "eventsByType": {},
            "topOffendingIPs": [],
            "recentCriticalEvents": [],
        }

    def test_report_reflects_pipeline_and_middleware_events(self, client: TestClient) -> None:
        client.post("/api/contact", json={"name": "Jane", "email": "jane@x", "message": "Hi"})
        client.post(
            "/api/contact",
            json={"name": "Jane", "email": "jane@x.com", "message": "<script>x</script>"},
        )

        report = client.get(REPORT, headers=ADMIN_HEADERS).json()

        assert report["eventsByType"] == {"INVALID_REQUEST": 1, "XSS_ATTEMPT": 1}
        assert report["topOffendingIPs"] == [{"ip": "testclient", "eventCount": 2}]
        critical = report["recentCriticalEvents"][0]
        assert critical["type"] == "XSS_ATTEMPT"
        assert critical["severity"] == "CRITICAL"
        assert critical["userAgent"] == "testclient"

    def test_report_is_rate_limited(self, client: TestClient) -> None:
        for _ in range(5):
            assert client.get(REPORT, headers=ADMIN_HEADERS).status_code == 200

        response = client.get(REPORT, headers=ADMIN_HEADERS)

        assert response.status_code == 429
        assert response.json()["error"].startswith("Rate limit exceeded")
