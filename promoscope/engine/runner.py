"""Extraction runner — drives one extraction call through its phases.

An ``ExtractionRun`` is a small finite state machine. It does not interpret
pages (the source extractors do) and it does not drive the browser directly
(the Browser Layer does). It owns the lifecycle of a single call:

- Realize the page through a call-scoped ``BrowserLayer``
- Run the source extractor against the realized snapshot
- Capture the screenshot and hand the pixels to the asset store
- Emit a signal at every phase boundary
- Surface every hard failure as a single ``ExtractionError``

``ExtractionEngine`` is the entry point callers use; it creates a fresh run
(and a fresh browser) per call, so concurrent calls share nothing.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from promoscope.browser.layer import BrowserLayer
from promoscope.browser.snapshot import PageSnapshot
from promoscope.config.catalogues import Catalogues, load_catalogues
from promoscope.config.settings import PromoscopeConfig, SourceProfile, SourceType
from promoscope.engine.errors import ExtractionError, NavigationError
from promoscope.engine.phases import TERMINAL_PHASES, VALID_TRANSITIONS, Phase
from promoscope.extraction.analytics import extract_analytics
from promoscope.extraction.article import extract_article
from promoscope.extraction.models import ExtractionResult
from promoscope.extraction.playlist import extract_playlist
from promoscope.extraction.smartlink import extract_smartlink
from promoscope.signals.emitter import SignalEmitter
from promoscope.signals.types import Signal
from promoscope.store.assets import AssetStore
from promoscope.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

Extractor = Callable[[PageSnapshot, Catalogues], Awaitable[ExtractionResult]]

EXTRACTORS: dict[SourceType, Extractor] = {
    SourceType.SMARTLINK: lambda snapshot, c: extract_smartlink(snapshot, c.smartlink),
    SourceType.ANALYTICS: lambda snapshot, c: extract_analytics(snapshot, c.analytics),
    SourceType.ARTICLE: lambda snapshot, c: extract_article(snapshot, c.article),
    SourceType.PLAYLIST: lambda snapshot, c: extract_playlist(snapshot, c.playlist),
}

# Screenshot file prefixes, as the report pages expect them.
SCREENSHOT_PREFIXES: dict[SourceType, str] = {
    SourceType.SMARTLINK: "smartlink",
    SourceType.ANALYTICS: "ffm",
    SourceType.ARTICLE: "article",
    SourceType.PLAYLIST: "playlist",
}


class PhaseTransitionError(ExtractionError):
    """An internal phase transition was attempted out of order."""


@dataclass
class ExtractionOutcome:
    """What one extraction call produced."""

    run_id: str
    source_type: SourceType
    url: str
    result: ExtractionResult
    duration_s: float
    signals: list[Signal] = field(default_factory=list)


class ExtractionRun:
    """Lifecycle controller for a single extraction call."""

    def __init__(
        self,
        source_type: SourceType,
        url: str,
        *,
        config: PromoscopeConfig,
        browser: BrowserLayer,
        asset_store: AssetStore,
        catalogues: Catalogues,
    ) -> None:
        self._source_type = source_type
        self._url = url
        self._config = config
        self._browser = browser
        self._asset_store = asset_store
        self._catalogues = catalogues
        self._run_id = f"run_{uuid.uuid4().hex[:12]}"
        self._phase = Phase.INIT

        ledger_path = None
        if config.storage.debug_mode:
            ledger_path = config.storage.data_dir / "runs" / self._run_id / "signals.jsonl"
        self._signals = SignalEmitter(run_id=self._run_id, ledger_path=ledger_path)

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def signals(self) -> SignalEmitter:
        return self._signals

    # --- Phase Transition ---

    async def _transition(self, to_phase: Phase, context: dict[str, Any] | None = None) -> None:
        """Every phase change goes through here."""
        if to_phase not in VALID_TRANSITIONS.get(self._phase, set()):
            raise PhaseTransitionError(
                f"Invalid transition: {self._phase.value} -> {to_phase.value}",
                url=self._url,
                source_type=self._source_type.value,
                phase=self._phase.value,
            )

        from_phase = self._phase
        self._phase = to_phase

        await self._signals.emit_phase_transition(
            from_phase=from_phase.value,
            to_phase=to_phase.value,
            context=context or {},
        )

    async def _on_realize_phase(self, name: str) -> None:
        await self._transition(Phase(name))

    # --- Main Run ---

    async def execute(self) -> ExtractionOutcome:
        start = time.monotonic()
        profile = self._config.profile_for(self._source_type)
        extractor = EXTRACTORS[self._source_type]

        logger.info("Extracting %s page %s (%s)", self._source_type.value, self._url, self._run_id)
        try:
            async with self._browser.realize(
                self._url, profile, on_phase=self._on_realize_phase
            ) as snapshot:
                await self._transition(Phase.EXTRACT)
                result = await extractor(snapshot, self._catalogues)

                await self._transition(Phase.CAPTURE)
                screenshot = await self._capture(snapshot, profile)
        except ExtractionError as e:
            await self._fail(e)
            raise
        except Exception as e:
            error = ExtractionError(
                str(e) or type(e).__name__,
                url=self._url,
                source_type=self._source_type.value,
                phase=self._phase.value,
            )
            await self._fail(error, cause=e)
            raise error from e

        if screenshot:
            result = result.model_copy(update={"screenshot": screenshot})

        duration = round(time.monotonic() - start, 2)
        await self._transition(Phase.COMPLETE)
        await self._signals.emit_extraction_complete(
            source_type=self._source_type.value,
            url=self._url,
            duration_s=duration,
            screenshot=screenshot,
        )
        logger.info("Extracted %s page %s in %.2fs", self._source_type.value, self._url, duration)

        return ExtractionOutcome(
            run_id=self._run_id,
            source_type=self._source_type,
            url=self._url,
            result=result,
            duration_s=duration,
            signals=self._signals.signals,
        )

    async def _capture(self, snapshot: PageSnapshot, profile: SourceProfile) -> str | None:
        """Screenshot the realized page and store it; ``None`` when there are no pixels."""
        pixels = await BrowserLayer.capture_screenshot(snapshot, profile)
        if not pixels:
            return None

        prefix = SCREENSHOT_PREFIXES[self._source_type]
        try:
            url = self._asset_store.save_screenshot(pixels, prefix)
            if self._asset_store.debug_mode:
                stem = url.rsplit("/", 1)[-1].removesuffix(".png")
                self._asset_store.save_debug_capture(
                    stem, await snapshot.html(), await snapshot.visible_text()
                )
        except OSError as e:
            raise ExtractionError(
                f"Could not store screenshot: {e}",
                url=self._url,
                source_type=self._source_type.value,
                phase=Phase.CAPTURE.value,
            ) from e
        await self._signals.emit_screenshot_stored(url=url, size_bytes=len(pixels))
        return url

    # --- Failure Handling ---

    async def _fail(self, error: ExtractionError, cause: BaseException | None = None) -> None:
        """Enter FAIL, record the failure, and leave raising to the caller."""
        current_phase = self._phase
        if current_phase in TERMINAL_PHASES:
            return
        self._phase = Phase.FAIL

        if isinstance(error, NavigationError):
            code = ErrorCode.NAVIGATION_FAILED
        elif current_phase == Phase.EXTRACT:
            code = ErrorCode.PAGE_EVALUATION_FAILED
        elif current_phase == Phase.CAPTURE:
            code = ErrorCode.SCREENSHOT_STORE_FAILED
        else:
            code = ErrorCode.EXTRACTION_FAILED

        emit_structured_error(
            logger,
            code=code,
            message=str(error),
            suppressed=False,
            run_id=self._run_id,
            phase=current_phase.value,
            details={"url": self._url, "source_type": self._source_type.value},
            exc=cause or error,
        )
        await self._signals.emit_extraction_failed(
            failure_reason=str(error),
            phase_at_failure=current_phase.value,
            error_type=type(cause or error).__name__,
        )


class ExtractionEngine:
    """Entry point for extraction calls.

    Holds only immutable configuration; each ``extract`` call gets its own
    run, browser, and signal stream.
    """

    def __init__(
        self,
        config: PromoscopeConfig | None = None,
        *,
        browser_factory: Callable[[PromoscopeConfig], BrowserLayer] | None = None,
        asset_store: AssetStore | None = None,
        catalogues: Catalogues | None = None,
    ) -> None:
        self._config = config or PromoscopeConfig()
        self._browser_factory = browser_factory or BrowserLayer
        self._asset_store = asset_store or AssetStore(self._config.storage)
        self._catalogues = catalogues or load_catalogues(self._config.catalogue_path)

    @property
    def config(self) -> PromoscopeConfig:
        return self._config

    def create_run(self, source_type: SourceType | str, url: str) -> ExtractionRun:
        return ExtractionRun(
            SourceType(source_type),
            url,
            config=self._config,
            browser=self._browser_factory(self._config),
            asset_store=self._asset_store,
            catalogues=self._catalogues,
        )

    async def extract(
        self,
        source_type: SourceType | str,
        url: str,
        subscribers: list[Callable[[Signal], Any]] | None = None,
    ) -> ExtractionOutcome:
        """Realize ``url`` and extract the ``source_type`` record from it.

        Raises ``ExtractionError`` (``NavigationError`` for navigation
        failures) on any hard failure; soft misses only leave fields empty.
        """
        run = self.create_run(source_type, url)
        for subscriber in subscribers or []:
            run.signals.subscribe(subscriber)
        return await run.execute()
