"""Browser Layer — Playwright-based content realizer.

The Browser Layer makes a dynamically rendered page ready for inspection.
It navigates, waits for the content to settle, optionally drives
scroll-triggered lazy loading, and captures screenshot pixels. It does not
interpret the page; extractors do that through the yielded snapshot.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from promoscope.browser.snapshot import PageSnapshot, PlaywrightSnapshot
from promoscope.config.settings import (
    PromoscopeConfig,
    ScreenshotMode,
    ScrollConfig,
    SourceProfile,
)
from promoscope.engine.errors import NavigationError
from promoscope.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)


class BrowserLayer:
    """One browser, one context, one page — for a single extraction call.

    Contract:
    - ``realize`` is the only entry point; it yields a snapshot of the settled page
    - The browser, context, and Playwright driver are released on every exit path
    - Navigation failures surface as ``NavigationError`` after cleanup
    - Instances are never shared between calls
    """

    def __init__(
        self,
        config: PromoscopeConfig | None = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self._config = config or PromoscopeConfig()
        self._playwright_factory = playwright_factory
        self._playwright: Any = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def page(self) -> Page | None:
        return self._page

    async def start(self, profile: SourceProfile) -> None:
        """Launch browser and create an isolated context sized for the profile."""
        self._playwright = await self._playwright_factory().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._config.browser.headless,
        )
        context_options: dict[str, Any] = {
            "viewport": {
                "width": profile.viewport_width,
                "height": profile.viewport_height,
            },
            "locale": self._config.browser.locale,
        }
        if profile.user_agent:
            context_options["user_agent"] = profile.user_agent
        self._context = await self._browser.new_context(**context_options)
        self._page = await self._context.new_page()

    async def stop(self) -> None:
        """Release browser resources. Failures here are logged, never raised."""
        for name in ("_context", "_browser"):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as exc:
                emit_structured_error(
                    logger,
                    code=ErrorCode.BROWSER_CLEANUP_FAILED,
                    message=str(exc),
                    suppressed=True,
                    details={"resource": name.lstrip("_")},
                    exc=exc,
                )
            setattr(self, name, None)
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as exc:
                emit_structured_error(
                    logger,
                    code=ErrorCode.BROWSER_CLEANUP_FAILED,
                    message=str(exc),
                    suppressed=True,
                    details={"resource": "playwright"},
                    exc=exc,
                )
            self._playwright = None
        self._page = None

    async def navigate(self, url: str) -> None:
        """Navigate and wait for DOM content (not full load)."""
        if not self._page:
            raise NavigationError("Browser not started", url=url, phase="NAVIGATE")
        timeout_ms = self._config.timeouts.navigation_timeout_s * 1000
        try:
            await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except Exception as e:
            raise NavigationError(
                f"Navigation to {url} failed: {e}", url=url, phase="NAVIGATE"
            ) from e
        logger.debug("Navigated to %s", url)

    async def settle(self, seconds: float) -> None:
        """Give client-side rendering a fixed amount of time."""
        if self._page and seconds > 0:
            await self._page.wait_for_timeout(seconds * 1000)

    async def progressive_scroll(self, scroll: ScrollConfig | None = None) -> int:
        """Scroll down in fixed steps to trigger lazy loading, then return to top.

        The stopping distance is computed once from the scroll height seen
        when the loop starts, so a page that keeps growing cannot keep it
        running; ``max_iterations`` is the hard ceiling. Returns the number
        of steps taken.
        """
        if not self._page:
            return 0
        scroll = scroll or self._config.scroll
        start_height = await self._page.evaluate("() => document.body.scrollHeight")
        target = int(start_height or 0) + scroll.overshoot_px

        scrolled = 0
        steps = 0
        while scrolled < target and steps < scroll.max_iterations:
            await self._page.evaluate("(dy) => window.scrollBy(0, dy)", scroll.step_px)
            scrolled += scroll.step_px
            steps += 1
            await self._page.wait_for_timeout(scroll.interval_ms)

        await self._page.evaluate("() => window.scrollTo(0, 0)")
        logger.debug(
            "Progressive scroll finished: %d steps, %dpx of %dpx target",
            steps,
            scrolled,
            target,
        )
        return steps

    @asynccontextmanager
    async def realize(
        self,
        url: str,
        profile: SourceProfile,
        on_phase: Callable[[str], Awaitable[None]] | None = None,
    ) -> AsyncIterator[PlaywrightSnapshot]:
        """Navigate to ``url`` and yield a snapshot of the settled page.

        ``on_phase`` is awaited with ``NAVIGATE``, ``SETTLE`` and ``SCROLL``
        as each step begins. Resources are released when the block exits,
        whether it completes or raises.
        """

        async def notify(phase: str) -> None:
            if on_phase is not None:
                await on_phase(phase)

        try:
            await self.start(profile)
            await notify("NAVIGATE")
            await self.navigate(url)
            await notify("SETTLE")
            await self.settle(profile.settle_s)
            if profile.scroll:
                await notify("SCROLL")
                await self.progressive_scroll()
                await self.settle(self._config.timeouts.post_scroll_settle_s)
            yield PlaywrightSnapshot(self._page, url)
        finally:
            await self.stop()

    @staticmethod
    async def capture_screenshot(snapshot: PageSnapshot, profile: SourceProfile) -> bytes:
        """Capture the screenshot pixels the profile asks for."""
        if profile.screenshot_mode == ScreenshotMode.CLIP:
            return await snapshot.screenshot(
                clip={
                    "x": 0,
                    "y": 0,
                    "width": profile.clip_width,
                    "height": profile.clip_height,
                }
            )
        return await snapshot.screenshot(full_page=True)
