"""Catalogues — the maintained lookup tables that drive the extractors.

Selectors, host markers, and the referrer/service/country name lists are
tied to the current rendering of each third-party site. They live in
``catalogues.json`` so they can be updated without touching extraction code;
``PROMOSCOPE_CATALOGUE_PATH`` points at a replacement file.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CATALOGUE_PATH = Path(__file__).with_name("catalogues.json")


class SmartLinkCatalogue(BaseModel):
    player_selector: str
    background_selector: str
    asset_host: str
    blur_token: str
    cdn_host: str
    format_segments: list[str]
    signature_pattern: str
    blur_transform: str
    title_separator: str = " - "


class ServiceEntry(BaseModel):
    name: str
    icon: str = ""


class AnalyticsCatalogue(BaseModel):
    overview_labels: dict[str, str]
    referrers: list[str]
    services: list[ServiceEntry]
    countries: list[str]
    partner_link_selector: str
    title_marker: str
    title_window: int = 500
    title_noise_patterns: list[str] = Field(default_factory=list)
    artwork_selector: str
    date_range_pattern: str
    date_range_max_children: int = 3


class ArticleCatalogue(BaseModel):
    paragraph_selector: str
    excerpt_min_length: int = 50
    excerpt_max_length: int = 200
    hero_image_selector: str
    logo_selectors: list[str]


class PlaylistCatalogue(BaseModel):
    heading_denylist: list[str]
    title_selector: str
    document_title_patterns: list[str]
    profile_link_selector: str
    follower_units: list[str]
    cdn_image_selector: str
    primary_image_host: str
    cdn_marker: str
    cover_code: str
    mosaic_marker: str
    avatar_code: str
    min_cover_width: int = 100
    playlist_id_pattern: str


class Catalogues(BaseModel):
    """All catalogues, one section per source type."""

    smartlink: SmartLinkCatalogue
    analytics: AnalyticsCatalogue
    article: ArticleCatalogue
    playlist: PlaylistCatalogue

    model_config = {"frozen": True}


def load_catalogues(path: Path | None = None) -> Catalogues:
    """Read and validate a catalogue file (the bundled one by default)."""
    source = path or DEFAULT_CATALOGUE_PATH
    logger.debug("Loading catalogues from %s", source)
    return Catalogues.model_validate(json.loads(source.read_text(encoding="utf-8")))


@lru_cache(maxsize=1)
def default_catalogues() -> Catalogues:
    return load_catalogues()
