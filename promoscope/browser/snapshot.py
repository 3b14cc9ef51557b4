"""Page snapshots — the read-only view extractors query.

A snapshot answers selector queries with plain ``ElementInfo`` records,
exposes the page's flattened visible text, and can take a screenshot.
``PlaywrightSnapshot`` reads a live, realized page; ``HTMLSnapshot`` reads
static markup (fixtures, or raw HTML captured in debug mode).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page


@dataclass(frozen=True)
class ElementInfo:
    """Serializable description of one DOM element."""

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    text: str = ""
    child_count: int = 0
    src: str = ""
    href: str = ""
    srcset: str = ""
    width: int = 0

    def attr(self, name: str) -> str:
        return self.attributes.get(name, "")

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> ElementInfo:
        return cls(
            tag=str(payload.get("tag", "")),
            attributes={str(k): str(v) for k, v in (payload.get("attributes") or {}).items()},
            text=str(payload.get("text") or ""),
            child_count=int(payload.get("child_count") or 0),
            src=str(payload.get("src") or ""),
            href=str(payload.get("href") or ""),
            srcset=str(payload.get("srcset") or ""),
            width=int(payload.get("width") or 0),
        )


class PageSnapshot(ABC):
    """Query capability over one realized page. Owned by a single extraction call."""

    url: str

    @abstractmethod
    async def query_all(self, selector: str) -> list[ElementInfo]:
        """All elements matching ``selector`` in document order."""

    async def query(self, selector: str) -> ElementInfo | None:
        matches = await self.query_all(selector)
        return matches[0] if matches else None

    @abstractmethod
    async def query_in_container(
        self, selector: str, container: str, inner: str
    ) -> ElementInfo | None:
        """First ``inner`` match in the closest ``container`` of the first ``selector`` match."""

    @abstractmethod
    async def visible_text(self) -> str:
        """The page's visible text flattened to one string."""

    @abstractmethod
    async def title(self) -> str: ...

    @abstractmethod
    async def html(self) -> str: ...

    @abstractmethod
    async def screenshot(
        self, full_page: bool = True, clip: dict[str, int] | None = None
    ) -> bytes: ...

    async def meta_content(self, selector: str) -> str:
        """``content`` attribute of the first matching meta tag, or empty."""
        element = await self.query(selector)
        return element.attr("content").strip() if element else ""


_DESCRIBE_JS = """
const describe = (el) => ({
    tag: el.tagName.toLowerCase(),
    attributes: Object.fromEntries(Array.from(el.attributes).map(a => [a.name, a.value])),
    text: (el.textContent || '').trim(),
    child_count: el.children.length,
    src: typeof el.src === 'string' ? el.src : '',
    href: typeof el.href === 'string' ? el.href : '',
    srcset: el.getAttribute('srcset') || '',
    width: (typeof el.width === 'number' ? el.width : 0) || el.naturalWidth || 0,
});
"""

_QUERY_ALL_JS = (
    "({ selector }) => {"
    + _DESCRIBE_JS
    + "return Array.from(document.querySelectorAll(selector)).map(describe); }"
)

_QUERY_IN_CONTAINER_JS = (
    "({ selector, container, inner }) => {"
    + _DESCRIBE_JS
    + """
    const anchor = document.querySelector(selector);
    const scope = anchor ? anchor.closest(container) : null;
    const found = scope ? scope.querySelector(inner) : null;
    return found ? describe(found) : null;
    }"""
)


class PlaywrightSnapshot(PageSnapshot):
    """Snapshot backed by a live Playwright page.

    Every query is a single ``page.evaluate`` returning JSON-serializable
    element descriptions. Evaluation errors propagate to the caller.
    """

    def __init__(self, page: Page, url: str) -> None:
        self._page = page
        self.url = url

    async def query_all(self, selector: str) -> list[ElementInfo]:
        payload = await self._page.evaluate(_QUERY_ALL_JS, {"selector": selector})
        return [ElementInfo.from_payload(item) for item in payload or []]

    async def query(self, selector: str) -> ElementInfo | None:
        payload = await self._page.evaluate(
            "({ selector }) => {"
            + _DESCRIBE_JS
            + "const el = document.querySelector(selector); return el ? describe(el) : null; }",
            {"selector": selector},
        )
        return ElementInfo.from_payload(payload) if payload else None

    async def query_in_container(
        self, selector: str, container: str, inner: str
    ) -> ElementInfo | None:
        payload = await self._page.evaluate(
            _QUERY_IN_CONTAINER_JS,
            {"selector": selector, "container": container, "inner": inner},
        )
        return ElementInfo.from_payload(payload) if payload else None

    async def visible_text(self) -> str:
        text = await self._page.evaluate(
            "() => document.body ? document.body.innerText : ''"
        )
        return text or ""

    async def title(self) -> str:
        return await self._page.title()

    async def html(self) -> str:
        return await self._page.content()

    async def screenshot(
        self, full_page: bool = True, clip: dict[str, int] | None = None
    ) -> bytes:
        if clip:
            return await self._page.screenshot(type="png", clip=clip)
        return await self._page.screenshot(type="png", full_page=full_page)


_NON_VISIBLE_TAGS = ["script", "style", "noscript", "template", "head"]
_SRC_TAGS = ("img", "script", "iframe", "source", "video", "audio", "embed")
_HREF_TAGS = ("a", "link", "area", "base")


class HTMLSnapshot(PageSnapshot):
    """Snapshot over static markup, parsed with BeautifulSoup.

    ``src``/``href`` are resolved against ``url`` the way a browser resolves
    the corresponding DOM properties. ``width`` comes from the ``width``
    attribute since nothing is laid out. ``text`` overrides the flattened
    text derived from the markup (for replaying a captured ``innerText``).
    """

    def __init__(self, html: str, url: str, text: str | None = None) -> None:
        self._html = html
        self._soup = BeautifulSoup(html, "html.parser")
        self._text = text
        self.url = url

    def _describe(self, el: Tag) -> ElementInfo:
        attributes = {
            name: " ".join(value) if isinstance(value, list) else str(value)
            for name, value in el.attrs.items()
        }
        src = ""
        if el.name in _SRC_TAGS and attributes.get("src"):
            src = urljoin(self.url, attributes["src"])
        href = ""
        if el.name in _HREF_TAGS and attributes.get("href"):
            href = urljoin(self.url, attributes["href"])
        width_raw = attributes.get("width", "").strip()
        return ElementInfo(
            tag=el.name,
            attributes=attributes,
            text=el.get_text().strip(),
            child_count=len(el.find_all(True, recursive=False)),
            src=src,
            href=href,
            srcset=attributes.get("srcset", ""),
            width=int(width_raw) if width_raw.isdigit() else 0,
        )

    async def query_all(self, selector: str) -> list[ElementInfo]:
        return [self._describe(el) for el in self._soup.select(selector)]

    async def query_in_container(
        self, selector: str, container: str, inner: str
    ) -> ElementInfo | None:
        anchor = self._soup.select_one(selector)
        if anchor is None:
            return None
        scope = anchor.css.closest(container)
        if scope is None:
            return None
        found = scope.select_one(inner)
        return self._describe(found) if found is not None else None

    async def visible_text(self) -> str:
        if self._text is not None:
            return self._text
        body = BeautifulSoup(self._html, "html.parser")
        for hidden in body.find_all(_NON_VISIBLE_TAGS):
            hidden.decompose()
        return body.get_text("\n", strip=True)

    async def title(self) -> str:
        title = self._soup.title
        return " ".join(title.get_text().split()) if title else ""

    async def html(self) -> str:
        return self._html

    async def screenshot(
        self, full_page: bool = True, clip: dict[str, int] | None = None
    ) -> bytes:
        # Static markup has no rendered pixels.
        return b""
