"""Tests for security controls: auth and CORS configuration."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from promoscope.api import routes
from promoscope.api.app import _resolve_cors_origins, app
from promoscope.store.reports import ReportStore


@pytest.fixture(autouse=True)
def report_store(tmp_path, monkeypatch):
    monkeypatch.setattr(routes, "_report_store", ReportStore(tmp_path))


@pytest.fixture
def client():
    return TestClient(app)


class TestAuthentication:
    """Test API token authentication enforcement."""

    def test_no_auth_required_when_env_unset(self, client, monkeypatch):
        monkeypatch.delenv("PROMOSCOPE_API_TOKEN", raising=False)
        assert client.get("/api/reports").status_code == 200

    def test_auth_required_when_env_set(self, client, monkeypatch):
        monkeypatch.setenv("PROMOSCOPE_API_TOKEN", "test-secret-token")
        response = client.get("/api/reports")
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or missing API token"

    def test_auth_succeeds_with_valid_token(self, client, monkeypatch):
        monkeypatch.setenv("PROMOSCOPE_API_TOKEN", "test-secret-token")
        response = client.get(
            "/api/reports", headers={"Authorization": "Bearer test-secret-token"}
        )
        assert response.status_code == 200

    def test_auth_rejects_invalid_token(self, client, monkeypatch):
        monkeypatch.setenv("PROMOSCOPE_API_TOKEN", "test-secret-token")
        response = client.get("/api/reports", headers={"Authorization": "Bearer wrong-token"})
        assert response.status_code == 401

    def test_auth_guards_scrape_endpoints(self, client, monkeypatch):
        monkeypatch.setenv("PROMOSCOPE_API_TOKEN", "test-secret-token")
        response = client.post("/api/scrape-smartlink", json={"url": "https://ffm.to/x"})
        assert response.status_code == 401

    def test_health_is_public(self, client, monkeypatch):
        monkeypatch.setenv("PROMOSCOPE_API_TOKEN", "test-secret-token")
        assert client.get("/health").status_code == 200


class TestCorsOrigins:
    def test_unset(self, monkeypatch):
        monkeypatch.delenv("PROMOSCOPE_ALLOWED_ORIGINS", raising=False)
        assert _resolve_cors_origins() == []

    def test_comma_separated(self, monkeypatch):
        monkeypatch.setenv(
            "PROMOSCOPE_ALLOWED_ORIGINS", "https://a.example, https://b.example,"
        )
        assert _resolve_cors_origins() == ["https://a.example", "https://b.example"]

    def test_wildcard_rejected(self, monkeypatch):
        monkeypatch.setenv("PROMOSCOPE_ALLOWED_ORIGINS", "*")
        with pytest.raises(RuntimeError):
            _resolve_cors_origins()
