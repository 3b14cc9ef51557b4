"""Smart-link artwork extraction.

Smart-link pages paint the release artwork as a CSS background. The clean
square artwork sits on the player background element; the page also carries
blurred variants of the same image, which must never win while a clean one
exists.
"""

from __future__ import annotations

import re

from promoscope.browser.snapshot import PageSnapshot
from promoscope.config.catalogues import SmartLinkCatalogue, default_catalogues
from promoscope.extraction.cascade import Candidate, first_of
from promoscope.extraction.models import SmartLinkResult
from promoscope.extraction.normalize import resolve_url

CSS_URL = re.compile(r"""url\(["']?([^"')]+)["']?\)""")


def css_url(style: str) -> str:
    """First ``url(...)`` reference in an inline style, or empty."""
    match = CSS_URL.search(style or "")
    return match.group(1) if match else ""


def _is_clean_asset(url: str, catalogue: SmartLinkCatalogue) -> bool:
    return catalogue.asset_host in url and catalogue.blur_token not in url


def _player_background(catalogue: SmartLinkCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        element = await snapshot.query(catalogue.player_selector)
        if element is None:
            return ""
        url = css_url(element.attr("style"))
        return url if _is_clean_asset(url, catalogue) else ""

    return Candidate("player-background", run)


def _asset_host_backgrounds(catalogue: SmartLinkCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        found: list[str] = []
        for element in await snapshot.query_all(catalogue.background_selector):
            style = element.attr("style")
            if catalogue.asset_host not in style:
                continue
            url = css_url(style)
            if url:
                found.append(url)
        clean = next((url for url in found if catalogue.blur_token not in url), "")
        return clean or (found[0] if found else "")

    return Candidate("asset-host-background", run)


def blurred_background_url(artwork: str, catalogue: SmartLinkCatalogue) -> str | None:
    """Derive the blurred backdrop variant of a CDN artwork URL.

    Only CDN URLs carrying a known format segment are rewritten; the blur
    transform is inserted right after the CDN signature segment. A URL
    without a signature segment is returned as is.
    """
    if not artwork or catalogue.cdn_host not in artwork:
        return None
    if not any(segment in artwork for segment in catalogue.format_segments):
        return None
    signature = re.compile(catalogue.signature_pattern)
    return signature.sub(lambda m: m.group(1) + catalogue.blur_transform, artwork, count=1)


def split_title(og_title: str, separator: str = " - ") -> tuple[str, str]:
    """``"Midnight - Aria Vance"`` -> ``("Midnight", "Aria Vance")``."""
    parts = og_title.split(separator)
    if len(parts) >= 2:
        return parts[0].strip(), parts[1].strip()
    return og_title.strip(), ""


async def extract_smartlink(
    snapshot: PageSnapshot, catalogue: SmartLinkCatalogue | None = None
) -> SmartLinkResult:
    catalogue = catalogue or default_catalogues().smartlink

    artwork = await first_of(
        snapshot,
        [
            _player_background(catalogue),
            _asset_host_backgrounds(catalogue),
            Candidate("og:image", lambda s: s.meta_content('meta[property="og:image"]')),
        ],
        default="",
        field="artwork",
    )
    artwork = resolve_url(artwork, snapshot.url)
    title, artist = split_title(
        await snapshot.meta_content('meta[property="og:title"]'), catalogue.title_separator
    )

    return SmartLinkResult(
        artwork=artwork,
        title=title,
        artist=artist,
        artwork_blurred=blurred_background_url(artwork, catalogue),
    )
