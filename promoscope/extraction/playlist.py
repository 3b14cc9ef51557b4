"""Playlist page extraction — name, curator, follower count, cover image.

Image URLs on the playlist host encode what they depict. Three asset codes
matter here: the playlist-cover code (what we want), the avatar code (the
curator's profile picture, never a cover), and the mosaic marker for
generated multi-track covers.
"""

from __future__ import annotations

import logging
import re

from promoscope.browser.snapshot import ElementInfo, PageSnapshot
from promoscope.config.catalogues import PlaylistCatalogue, default_catalogues
from promoscope.extraction.cascade import Candidate, first_of
from promoscope.extraction.models import PlaylistResult
from promoscope.extraction.normalize import resolve_url

logger = logging.getLogger(__name__)

_DENSITY = re.compile(r"^(\d+(?:\.\d+)?)[wx]$")


def playlist_id_from_url(url: str, pattern: str | None = None) -> str:
    """``https://open.spotify.com/playlist/37i9dQ`` -> ``37i9dQ``; empty if absent."""
    pattern = pattern or default_catalogues().playlist.playlist_id_pattern
    match = re.search(pattern, url or "")
    return match.group(1) if match else ""


def largest_srcset_url(srcset: str) -> str:
    """URL of the largest variant in a ``srcset``; the last entry wins ties."""
    best_url = ""
    best_size = -1.0
    for entry in srcset.split(","):
        parts = entry.strip().split()
        if not parts:
            continue
        size = 0.0
        if len(parts) > 1:
            match = _DENSITY.match(parts[1])
            if match:
                size = float(match.group(1))
        if size >= best_size:
            best_url, best_size = parts[0], size
    return best_url


# --- Name ---


def _heading(catalogue: PlaylistCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        for heading in await snapshot.query_all("h1"):
            text = heading.text
            if text and not any(label in text for label in catalogue.heading_denylist):
                return text
        return ""

    return Candidate("heading", run)


def _title_element(catalogue: PlaylistCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        element = await snapshot.query(catalogue.title_selector)
        return element.text if element else ""

    return Candidate("title-element", run)


def _document_title(pattern: str) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        match = re.search(pattern, await snapshot.title(), re.IGNORECASE)
        return match.group(1).strip() if match else ""

    return Candidate(f"document-title:{pattern}", run)


# --- Follower count ---


def _count_with_unit(unit: str) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        match = re.search(r"(\d[\d,]*)\s*" + unit, await snapshot.visible_text(), re.IGNORECASE)
        return match.group(1) if match else ""

    return Candidate(f"count:{unit}", run)


# --- Cover image ---


def _has(element: ElementInfo, token: str) -> bool:
    return token in element.src or token in element.srcset


def _og_cover(catalogue: PlaylistCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        content = await snapshot.meta_content('meta[property="og:image"]')
        return content if catalogue.avatar_code not in content else ""

    return Candidate("og:image", run)


def _primary_host_cover(catalogue: PlaylistCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        for image in await snapshot.query_all(catalogue.cdn_image_selector):
            if catalogue.primary_image_host in image.src and catalogue.cover_code in image.src:
                return image.src
        return ""

    return Candidate("primary-host-cover", run)


def _coded_cover(catalogue: PlaylistCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        for image in await snapshot.query_all(catalogue.cdn_image_selector):
            is_cover = _has(image, catalogue.cover_code) or _has(image, catalogue.mosaic_marker)
            if is_cover and not _has(image, catalogue.avatar_code):
                if image.srcset:
                    return largest_srcset_url(image.srcset) or image.src
                return image.src
        return ""

    return Candidate("coded-cover", run)


def _any_cdn_image(catalogue: PlaylistCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        for image in await snapshot.query_all(catalogue.cdn_image_selector):
            if catalogue.cdn_marker in image.src and catalogue.avatar_code not in image.src:
                return image.src
        return ""

    return Candidate("cdn-image", run)


def _wide_image(catalogue: PlaylistCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        for image in await snapshot.query_all(catalogue.cdn_image_selector):
            if image.width >= catalogue.min_cover_width and catalogue.avatar_code not in image.src:
                return image.src
        return ""

    return Candidate("wide-image", run)


async def extract_playlist(
    snapshot: PageSnapshot, catalogue: PlaylistCatalogue | None = None
) -> PlaylistResult:
    catalogue = catalogue or default_catalogues().playlist
    url = snapshot.url

    if logger.isEnabledFor(logging.DEBUG):
        for image in await snapshot.query_all("img"):
            if image.src:
                logger.debug("Playlist image seen: %s srcset=%r", image.src, image.srcset)

    name = await first_of(
        snapshot,
        [
            _heading(catalogue),
            _title_element(catalogue),
            *(_document_title(p) for p in catalogue.document_title_patterns),
        ],
        "",
        field="name",
    )

    owner = await snapshot.query(catalogue.profile_link_selector)
    avatar = await snapshot.query_in_container(catalogue.profile_link_selector, "div", "img")

    followers = await first_of(
        snapshot,
        [_count_with_unit(unit) for unit in catalogue.follower_units],
        "",
        field="followers",
    )
    cover_image = await first_of(
        snapshot,
        [
            _og_cover(catalogue),
            _primary_host_cover(catalogue),
            _coded_cover(catalogue),
            _any_cdn_image(catalogue),
            _wide_image(catalogue),
        ],
        "",
        field="coverImage",
    )

    return PlaylistResult(
        name=name,
        curator=owner.text if owner else "",
        curator_avatar=resolve_url(avatar.src, url) if avatar else "",
        followers=followers,
        cover_image=resolve_url(cover_image, url),
        spotify_url=url,
        playlist_id=playlist_id_from_url(url, catalogue.playlist_id_pattern),
    )
