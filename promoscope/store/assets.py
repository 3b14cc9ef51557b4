"""Screenshot asset store.

Screenshots land in the uploads directory under ``<prefix>-<epoch ms>.png``
and are referenced by the ``/uploads/<file>`` URL the HTTP layer serves.
Writes are atomic: a temp file is written then renamed.
"""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path

from promoscope.config.settings import StorageConfig

logger = logging.getLogger(__name__)


class AssetStore:
    """Writes screenshot pixels (and, in debug mode, the raw page) to disk."""

    def __init__(self, storage: StorageConfig | None = None) -> None:
        self._storage = storage or StorageConfig()

    @property
    def uploads_dir(self) -> Path:
        return self._storage.uploads_dir

    @property
    def debug_mode(self) -> bool:
        return self._storage.debug_mode

    def url_for(self, filename: str) -> str:
        return f"{self._storage.uploads_url_prefix.rstrip('/')}/{filename}"

    def _unique_name(self, prefix: str, suffix: str) -> str:
        name = f"{prefix}-{int(time.time() * 1000)}{suffix}"
        if (self.uploads_dir / name).exists():
            name = f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}{suffix}"
        return name

    def _write_atomic(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            temp_path.write_bytes(data)
            temp_path.replace(path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    def save_screenshot(self, data: bytes, prefix: str) -> str:
        """Persist PNG bytes and return their ``/uploads/...`` URL."""
        filename = self._unique_name(prefix, ".png")
        self._write_atomic(self.uploads_dir / filename, data)
        logger.info("Stored screenshot %s (%d bytes)", filename, len(data))
        return self.url_for(filename)

    def save_debug_capture(self, stem: str, html: str, text: str) -> tuple[Path, Path]:
        """Write the raw HTML and flattened text of a realized page.

        ``stem`` is usually the screenshot's file stem, so the three files
        sort together.
        """
        html_path = self.uploads_dir / f"{stem}.html"
        text_path = self.uploads_dir / f"{stem}.txt"
        self._write_atomic(html_path, html.encode("utf-8"))
        self._write_atomic(text_path, text.encode("utf-8"))
        logger.debug("Stored debug capture %s", html_path)
        return html_path, text_path
