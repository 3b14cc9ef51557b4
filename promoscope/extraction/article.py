"""Press-article metadata extraction — site name, headline, excerpt, images."""

from __future__ import annotations

from urllib.parse import urlparse

import tldextract

from promoscope.browser.snapshot import ElementInfo, PageSnapshot
from promoscope.config.catalogues import ArticleCatalogue, default_catalogues
from promoscope.extraction.cascade import Candidate, first_of
from promoscope.extraction.models import ArticleResult
from promoscope.extraction.normalize import resolve_url

# Bundled public-suffix snapshot only; never fetch the list at runtime.
_extract_domain = tldextract.TLDExtract(suffix_list_urls=())


def site_label(url: str) -> str:
    """Registrable domain label with its first letter capitalized (``bbc.co.uk`` -> ``Bbc``)."""
    label = _extract_domain(url).domain
    if not label:
        host = urlparse(url).hostname or ""
        label = host.removeprefix("www.").split(".")[0]
    return label[:1].upper() + label[1:]


def _meta(selector: str) -> Candidate[str]:
    return Candidate(selector, lambda snapshot: snapshot.meta_content(selector))


def _element_text(selector: str) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        element = await snapshot.query(selector)
        return element.text if element else ""

    return Candidate(selector, run)


def _first_long_paragraph(catalogue: ArticleCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        for paragraph in await snapshot.query_all(catalogue.paragraph_selector):
            text = paragraph.text
            if len(text) > catalogue.excerpt_min_length:
                if len(text) > catalogue.excerpt_max_length:
                    return text[: catalogue.excerpt_max_length] + "..."
                return text
        return ""

    return Candidate("first-paragraph", run)


def _element_url(element: ElementInfo | None) -> str:
    if element is None:
        return ""
    return element.href or element.src or element.attr("content")


def _first_url(selector: str) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        return _element_url(await snapshot.query(selector))

    return Candidate(selector, run)


async def extract_article(
    snapshot: PageSnapshot, catalogue: ArticleCatalogue | None = None
) -> ArticleResult:
    catalogue = catalogue or default_catalogues().article
    url = snapshot.url

    site_name = await first_of(
        snapshot,
        [
            _meta('meta[property="og:site_name"]'),
            Candidate("domain", lambda s: site_label(s.url)),
        ],
        "",
        field="siteName",
    )
    title = await first_of(
        snapshot,
        [_meta('meta[property="og:title"]'), _element_text("h1"), _element_text("title")],
        "",
        field="title",
    )
    excerpt = await first_of(
        snapshot,
        [
            _meta('meta[property="og:description"]'),
            _meta('meta[name="description"]'),
            _first_long_paragraph(catalogue),
        ],
        "",
        field="excerpt",
    )
    hero_image = await first_of(
        snapshot,
        [_meta('meta[property="og:image"]'), _first_url(catalogue.hero_image_selector)],
        "",
        field="heroImage",
    )
    logo = await first_of(
        snapshot,
        [_first_url(selector) for selector in catalogue.logo_selectors],
        "",
        field="logo",
    )

    return ArticleResult(
        site_name=site_name,
        title=title,
        excerpt=excerpt,
        hero_image=resolve_url(hero_image, url),
        logo=resolve_url(logo, url),
        article_url=url,
    )
