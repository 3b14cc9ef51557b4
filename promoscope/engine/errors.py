"""Hard-failure exceptions raised by the extraction engine."""

from __future__ import annotations


class ExtractionError(Exception):
    """An extraction call aborted. No partial result accompanies it."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        source_type: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.source_type = source_type
        self.phase = phase


class NavigationError(ExtractionError):
    """The page did not reach a content-loaded state within the navigation timeout."""
