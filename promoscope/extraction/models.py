"""Extraction result models — one typed record per source type.

Every field has an empty default; a cascade that finds nothing leaves its
field at that default. Records serialize with camelCase keys, which is the
shape the report store and report pages consume.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """Base for all extraction records: camelCase aliases, immutable."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict; unset optional fields (``None``) are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Metrics ---


class ReferralMetric(RecordModel):
    """One referrer row from the analytics dashboard."""

    name: str
    visits: int = Field(ge=0)
    visits_percent: str = ""
    song_previews: int = Field(default=0, ge=0)
    song_previews_percent: str = ""
    clicks_to_service: int = Field(default=0, ge=0)


class ServiceMetric(RecordModel):
    """Clicks through to one streaming service."""

    name: str
    icon: str = ""
    clicks: int = Field(ge=0)
    percentage: str = ""


class CountryMetric(RecordModel):
    """Visits from one country."""

    name: str
    visits: int = Field(ge=0)
    percentage: str = ""


# --- Smart link ---


class SmartLinkResult(RecordModel):
    artwork: str = ""
    title: str = ""
    artist: str = ""
    artwork_blurred: str | None = None
    screenshot: str | None = None


# --- Analytics dashboard ---


class ReleaseInfo(RecordModel):
    title: str = ""
    link: str = ""
    artwork: str = ""


class Overview(RecordModel):
    total_visits: int = Field(default=0, ge=0)
    unique_users: int = Field(default=0, ge=0)
    clicks_to_service: int = Field(default=0, ge=0)


class AnalyticsResult(RecordModel):
    release: ReleaseInfo = Field(default_factory=ReleaseInfo)
    date_range: str = ""
    overview: Overview = Field(default_factory=Overview)
    # Kept for report compatibility; nothing populates it yet.
    channels: list[dict[str, Any]] = Field(default_factory=list)
    referrals: list[ReferralMetric] = Field(default_factory=list)
    services: list[ServiceMetric] = Field(default_factory=list)
    countries: list[CountryMetric] = Field(default_factory=list)
    screenshot: str | None = None


# --- Article ---


class ArticleResult(RecordModel):
    site_name: str = ""
    title: str = ""
    excerpt: str = ""
    hero_image: str = ""
    logo: str = ""
    article_url: str = ""
    screenshot: str | None = None


# --- Playlist ---


class PlaylistResult(RecordModel):
    name: str = ""
    curator: str = ""
    curator_avatar: str = ""
    followers: str = ""
    cover_image: str = ""
    spotify_url: str = ""
    playlist_id: str = ""
    screenshot: str | None = None


ExtractionResult = Union[SmartLinkResult, AnalyticsResult, ArticleResult, PlaylistResult]
