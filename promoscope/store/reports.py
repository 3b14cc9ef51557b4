"""JSON-file report store with an in-memory read-through cache.

A report is a free-form JSON object assembled by the report editor from
extraction results. The store only owns ``id``, ``createdAt`` and
``updatedAt``; everything else is the caller's.
"""

from __future__ import annotations

import json
import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from promoscope.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

_REPORT_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ReportSummary(BaseModel):
    """Library listing entry for one report."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    artist_name: str = ""
    release_title: str = ""
    date_range: str = ""
    created_at: str = ""
    hero_artwork: str = ""

    @classmethod
    def from_report(cls, report: dict[str, Any]) -> ReportSummary:
        return cls(
            id=str(report.get("id", "")),
            artist_name=report.get("artistName") or "",
            release_title=report.get("releaseTitle") or "",
            date_range=report.get("dateRange") or "",
            created_at=report.get("createdAt") or "",
            hero_artwork=report.get("heroArtwork") or "",
        )

    def matches(self, query: str) -> bool:
        query = query.lower()
        return query in self.artist_name.lower() or query in self.release_title.lower()


class ReportStore:
    """Reports persisted as ``<reports_dir>/<id>.json``.

    Reads go through the cache first and populate it on a miss. Writes go
    to disk atomically and then to the cache.
    """

    def __init__(self, reports_dir: Path) -> None:
        self._reports_dir = reports_dir
        self._reports_dir.mkdir(parents=True, exist_ok=True)
        self._cache: dict[str, dict[str, Any]] = {}

    @property
    def reports_dir(self) -> Path:
        return self._reports_dir

    def _path(self, report_id: str) -> Path | None:
        if not _REPORT_ID.match(report_id):
            return None
        return self._reports_dir / f"{report_id}.json"

    def _write(self, path: Path, report: dict[str, Any]) -> None:
        temp_path = path.with_suffix(".tmp")
        try:
            temp_path.write_text(json.dumps(report, indent=2))
            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def _read(self, path: Path) -> dict[str, Any] | None:
        """The report at ``path``, or ``None`` (logged) if it is not a JSON object."""
        try:
            report = json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            self._report_unreadable(path, str(exc), exc)
            return None
        if not isinstance(report, dict):
            self._report_unreadable(path, f"expected an object, got {type(report).__name__}")
            return None
        return report

    def _report_unreadable(
        self, path: Path, reason: str, exc: BaseException | None = None
    ) -> None:
        emit_structured_error(
            logger,
            code=ErrorCode.REPORT_STORE_FAILED,
            message=f"Unreadable report file {path.name}: {reason}",
            suppressed=True,
            details={"path": str(path)},
            exc=exc,
        )

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        report_id = uuid.uuid4().hex[:8]
        report = {"id": report_id, "createdAt": _utc_now(), **data}
        # Caller data may not override the identity fields.
        report["id"] = report_id
        self._write(self._reports_dir / f"{report_id}.json", report)
        self._cache[report_id] = report
        logger.info("Created report %s", report_id)
        return report

    def get(self, report_id: str) -> dict[str, Any] | None:
        if report_id in self._cache:
            return self._cache[report_id]
        path = self._path(report_id)
        if path is None or not path.exists():
            return None
        report = self._read(path)
        if report is not None:
            self._cache[report_id] = report
        return report

    def update(self, report_id: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """Merge ``data`` into an existing report; ``None`` if it is missing or unreadable."""
        path = self._path(report_id)
        if path is None or not path.exists():
            return None
        existing = self._read(path)
        if existing is None:
            return None
        updated = {
            **existing,
            **data,
            "id": report_id,
            "createdAt": existing.get("createdAt"),
            "updatedAt": _utc_now(),
        }
        self._write(path, updated)
        self._cache[report_id] = updated
        return updated

    def delete(self, report_id: str) -> bool:
        path = self._path(report_id)
        if path is None or not path.exists():
            return False
        path.unlink()
        self._cache.pop(report_id, None)
        logger.info("Deleted report %s", report_id)
        return True

    def summaries(self, query: str | None = None) -> list[ReportSummary]:
        """Summaries of every stored report, newest first.

        ``query`` filters case-insensitively on artist name and release
        title. Unreadable report files are skipped and logged.
        """
        summaries: list[ReportSummary] = []
        for path in sorted(self._reports_dir.glob("*.json")):
            report = self._read(path)
            if report is None:
                continue
            try:
                summaries.append(ReportSummary.from_report(report))
            except ValidationError as exc:
                self._report_unreadable(path, str(exc), exc)

        if query:
            summaries = [summary for summary in summaries if summary.matches(query)]
        summaries.sort(key=lambda summary: summary.created_at, reverse=True)
        return summaries
