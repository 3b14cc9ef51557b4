"""Tests for the FastAPI REST API endpoints."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from promoscope.api import routes
from promoscope.api.app import app
from promoscope.config.settings import SourceType
from promoscope.engine.errors import ExtractionError, NavigationError
from promoscope.engine.runner import ExtractionOutcome
from promoscope.extraction.models import (
    AnalyticsResult,
    ArticleResult,
    Overview,
    PlaylistResult,
    SmartLinkResult,
)
from promoscope.store.reports import ReportStore

RESULTS = {
    SourceType.SMARTLINK: SmartLinkResult(
        artwork="https://imagestore.ffm.to/link/a.jpg",
        title="Midnight",
        artist="Aria Vance",
        screenshot="/uploads/smartlink-1.png",
    ),
    SourceType.ANALYTICS: AnalyticsResult(
        overview=Overview(total_visits=1234, unique_users=567, clicks_to_service=89)
    ),
    SourceType.ARTICLE: ArticleResult(site_name="Line Of Best Fit", title="Premiere"),
    SourceType.PLAYLIST: PlaylistResult(name="Late Night", playlist_id="37i9dQ"),
}


class _FakeEngine:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[SourceType, str]] = []

    async def extract(self, source_type, url, subscribers=None):
        self.calls.append((source_type, url))
        if self.error:
            raise self.error
        return ExtractionOutcome(
            run_id="run_test123",
            source_type=source_type,
            url=url,
            result=RESULTS[source_type],
            duration_s=0.1,
        )


@pytest.fixture
def engine(monkeypatch):
    fake = _FakeEngine()
    monkeypatch.setattr(routes, "_engine", fake)
    return fake


@pytest.fixture(autouse=True)
def report_store(tmp_path, monkeypatch):
    monkeypatch.delenv("PROMOSCOPE_API_TOKEN", raising=False)
    store = ReportStore(tmp_path / "reports")
    monkeypatch.setattr(routes, "_report_store", store)
    return store


@pytest.fixture
def client():
    return TestClient(app)


class TestHealthEndpoint:
    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "promoscope", "version": "1.0.0"}


class TestScrapeEndpoints:
    def test_smartlink(self, client, engine):
        response = client.post("/api/scrape-smartlink", json={"url": " https://ffm.to/midnight "})

        assert response.status_code == 200
        assert response.json() == {
            "artwork": "https://imagestore.ffm.to/link/a.jpg",
            "title": "Midnight",
            "artist": "Aria Vance",
            "screenshot": "/uploads/smartlink-1.png",
        }
        assert engine.calls == [(SourceType.SMARTLINK, "https://ffm.to/midnight")]

    def test_analytics_payload_is_camel_case(self, client, engine):
        response = client.post("/api/scrape-ffm", json={"url": "https://dash.example/x"})

        data = response.json()
        assert data["overview"] == {"totalVisits": 1234, "uniqueUsers": 567, "clicksToService": 89}
        assert data["dateRange"] == ""
        assert "screenshot" not in data
        assert engine.calls[0][0] == SourceType.ANALYTICS

    def test_article(self, client, engine):
        response = client.post("/api/scrape-article", json={"url": "https://site.example/a"})
        assert response.json()["siteName"] == "Line Of Best Fit"

    def test_playlist(self, client, engine):
        response = client.post(
            "/api/scrape-spotify-playlist",
            json={"url": "https://open.spotify.com/playlist/37i9dQ?si=abc"},
        )
        assert response.status_code == 200
        assert response.json()["playlistId"] == "37i9dQ"

    def test_playlist_url_without_id(self, client, engine):
        response = client.post(
            "/api/scrape-spotify-playlist", json={"url": "https://open.spotify.com/album/1"}
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid Spotify playlist URL"
        assert engine.calls == []

    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": "   "}])
    def test_missing_url(self, client, engine, body):
        response = client.post("/api/scrape-smartlink", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == "URL required"

    def test_blocked_internal_target(self, client, engine):
        response = client.post("/api/scrape-article", json={"url": "http://127.0.0.1/admin"})
        assert response.status_code == 400
        assert engine.calls == []

    def test_extraction_failure_maps_to_500(self, client, monkeypatch):
        failing = _FakeEngine(NavigationError("Navigation timed out", url="https://ffm.to/x"))
        monkeypatch.setattr(routes, "_engine", failing)

        response = client.post("/api/scrape-smartlink", json={"url": "https://ffm.to/x"})

        assert response.status_code == 500
        assert response.json() == {"detail": "Navigation timed out"}

    def test_generic_extraction_error(self, client, monkeypatch):
        monkeypatch.setattr(routes, "_engine", _FakeEngine(ExtractionError("boom")))
        response = client.post("/api/scrape-ffm", json={"url": "https://dash.example/x"})
        assert response.status_code == 500


class TestReportEndpoints:
    def test_create_and_get(self, client):
        response = client.post(
            "/api/reports", json={"artistName": "Aria", "releaseTitle": "Midnight"}
        )

        assert response.status_code == 200
        ref = response.json()
        assert ref["url"] == f"/report/{ref['id']}"

        report = client.get(f"/api/reports/{ref['id']}").json()
        assert report["artistName"] == "Aria"
        assert report["id"] == ref["id"]
        assert "createdAt" in report

    def test_list_and_search(self, client):
        client.post("/api/reports", json={"artistName": "Aria Vance", "releaseTitle": "Midnight"})
        client.post("/api/reports", json={"artistName": "Cold Harbour", "releaseTitle": "Tides"})

        listing = client.get("/api/reports").json()
        assert len(listing) == 2
        assert set(listing[0]) == {
            "id", "artistName", "releaseTitle", "dateRange", "createdAt", "heroArtwork",
        }

        found = client.get("/api/reports", params={"q": "tides"}).json()
        assert [r["artistName"] for r in found] == ["Cold Harbour"]

    def test_update(self, client):
        report_id = client.post("/api/reports", json={"artistName": "Aria"}).json()["id"]

        response = client.put(f"/api/reports/{report_id}", json={"dateRange": "Jan - Feb"})

        assert response.json() == {"id": report_id, "url": f"/report/{report_id}"}
        report = client.get(f"/api/reports/{report_id}").json()
        assert report["artistName"] == "Aria"
        assert report["dateRange"] == "Jan - Feb"
        assert "updatedAt" in report

    def test_delete(self, client):
        report_id = client.post("/api/reports", json={"artistName": "Aria"}).json()["id"]

        assert client.delete(f"/api/reports/{report_id}").json() == {"success": True}
        assert client.get(f"/api/reports/{report_id}").status_code == 404

    @pytest.mark.parametrize(
        "method,kwargs",
        [("get", {}), ("put", {"json": {"a": 1}}), ("delete", {})],
    )
    def test_missing_report(self, client, method, kwargs):
        response = getattr(client, method)("/api/reports/nonexistent", **kwargs)
        assert response.status_code == 404
        assert response.json()["detail"] == "Report not found"

    def test_bad_report_does_not_break_listing(self, client, report_store):
        report_store.create({"artistName": 5})
        client.post("/api/reports", json={"artistName": "Aria"})
        (report_store.reports_dir / "corrupt.json").write_text("{not json")

        listing = client.get("/api/reports")

        assert listing.status_code == 200
        assert [r["artistName"] for r in listing.json()] == ["Aria"]
        assert client.get("/api/reports/corrupt").status_code == 404
