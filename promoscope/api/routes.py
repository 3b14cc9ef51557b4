"""REST API routes for Promoscope.

Provides endpoints for:
- Extracting one record per source type (smart link, analytics, article, playlist)
- Creating, listing, reading, updating and deleting reports
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel

from promoscope.api.auth import require_api_auth
from promoscope.api.validators import require_playlist_id, validate_source_url
from promoscope.config.settings import APIConfig, SourceType
from promoscope.engine.errors import ExtractionError
from promoscope.engine.runner import ExtractionEngine
from promoscope.store.reports import ReportStore


router = APIRouter(dependencies=[Depends(require_api_auth)])

_engine: ExtractionEngine | None = None
_report_store: ReportStore | None = None


def get_engine() -> ExtractionEngine:
    global _engine
    if _engine is None:
        _engine = ExtractionEngine()
    return _engine


def get_report_store() -> ReportStore:
    global _report_store
    if _report_store is None:
        _report_store = ReportStore(get_engine().config.storage.reports_dir)
    return _report_store


# --- Request/Response Models ---


class ScrapeRequest(BaseModel):
    """Body of every scrape endpoint."""

    url: str | None = None


class ReportRef(BaseModel):
    id: str
    url: str


# --- Extraction ---


async def _scrape(source_type: SourceType, url: str) -> dict[str, Any]:
    try:
        outcome = await get_engine().extract(source_type, url)
    except ExtractionError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return outcome.result.to_payload()


def _source_url(request: ScrapeRequest) -> str:
    return validate_source_url(request.url, APIConfig().block_private_network_targets)


@router.post("/scrape-smartlink")
async def scrape_smartlink(request: ScrapeRequest) -> dict[str, Any]:
    """Artwork, title and artist from a smart-link page."""
    return await _scrape(SourceType.SMARTLINK, _source_url(request))


@router.post("/scrape-ffm")
async def scrape_analytics(request: ScrapeRequest) -> dict[str, Any]:
    """Overview, referrals, services and countries from an analytics dashboard."""
    return await _scrape(SourceType.ANALYTICS, _source_url(request))


@router.post("/scrape-article")
async def scrape_article(request: ScrapeRequest) -> dict[str, Any]:
    """Press-placement metadata from an article page."""
    return await _scrape(SourceType.ARTICLE, _source_url(request))


@router.post("/scrape-spotify-playlist")
async def scrape_playlist(request: ScrapeRequest) -> dict[str, Any]:
    """Playlist name, curator, follower count and cover."""
    url = _source_url(request)
    require_playlist_id(url)
    return await _scrape(SourceType.PLAYLIST, url)


# --- Reports ---


def _report_ref(report_id: str) -> ReportRef:
    return ReportRef(id=report_id, url=f"/report/{report_id}")


@router.post("/reports", response_model=ReportRef)
async def create_report(payload: dict[str, Any] = Body(...)) -> ReportRef:
    report = get_report_store().create(payload)
    return _report_ref(report["id"])


@router.get("/reports")
async def list_reports(q: str | None = Query(default=None)) -> list[dict[str, Any]]:
    """Report summaries, newest first, optionally filtered by artist or release title."""
    return [
        summary.model_dump(by_alias=True) for summary in get_report_store().summaries(q)
    ]


@router.get("/reports/{report_id}")
async def get_report(report_id: str) -> dict[str, Any]:
    report = get_report_store().get(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.put("/reports/{report_id}", response_model=ReportRef)
async def update_report(
    report_id: str, payload: dict[str, Any] = Body(...)
) -> ReportRef:
    if get_report_store().update(report_id, payload) is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return _report_ref(report_id)


@router.delete("/reports/{report_id}")
async def delete_report(report_id: str) -> dict[str, bool]:
    if not get_report_store().delete(report_id):
        raise HTTPException(status_code=404, detail="Report not found")
    return {"success": True}
