"""Analytics dashboard extraction.

The dashboard has no API and no stable table markup, so every number is
recovered from the flattened visible text of the fully scrolled page. Each
catalogue entry (referrer, service, country) gets its own regex that expects
the entry name followed by its numbers in the dashboard's current column
order. These patterns are coupled to one site's rendering; they are kept
deliberately literal, and the catalogue is the thing to maintain when the
dashboard changes.
"""

from __future__ import annotations

import logging
import re

from promoscope.browser.snapshot import PageSnapshot
from promoscope.config.catalogues import AnalyticsCatalogue, ServiceEntry, default_catalogues
from promoscope.extraction.cascade import Candidate, first_of
from promoscope.extraction.models import (
    AnalyticsResult,
    CountryMetric,
    Overview,
    ReferralMetric,
    ReleaseInfo,
    ServiceMetric,
)
from promoscope.extraction.normalize import (
    backfill_percentages,
    dedupe_by_name,
    parse_count,
    rank,
    resolve_url,
)

logger = logging.getLogger(__name__)

_PERCENT = r"([\d.]+%)?"


# --- Flattened-text parsers ---


def parse_overview(text: str, labels: dict[str, str]) -> Overview:
    """Headline counters: the digits printed just before each label."""
    values: dict[str, int] = {}
    for field, label in labels.items():
        match = re.search(r"(\d+)\s*" + re.escape(label), text, re.IGNORECASE)
        values[field] = int(match.group(1)) if match else 0
    return Overview(**values)


def parse_referrals(text: str, referrers: list[str]) -> list[ReferralMetric]:
    """Referrer rows: visits, visit %, song previews, preview %, clicks to service."""
    rows: list[ReferralMetric] = []
    for name in referrers:
        pattern = (
            re.escape(name)
            + r"\s+(\d+)\s*"
            + _PERCENT
            + r"\s*(\d+)?\s*"
            + _PERCENT
            + r"\s*(\d+)?"
        )
        match = re.search(pattern, text, re.IGNORECASE)
        if not match or parse_count(match.group(1)) <= 0:
            continue
        rows.append(
            ReferralMetric(
                name=name,
                visits=parse_count(match.group(1)),
                visits_percent=match.group(2) or "",
                song_previews=parse_count(match.group(3)),
                song_previews_percent=match.group(4) or "",
                clicks_to_service=parse_count(match.group(5)),
            )
        )
    return rank(rows, key=lambda row: row.visits)


def parse_services(text: str, services: list[ServiceEntry]) -> list[ServiceMetric]:
    """Clicks per streaming service, with missing shares computed from the click total."""
    rows: list[ServiceMetric] = []
    for service in services:
        pattern = re.escape(service.name) + r"\s*(\d+)\s*" + _PERCENT
        match = re.search(pattern, text, re.IGNORECASE)
        if not match or parse_count(match.group(1)) <= 0:
            continue
        rows.append(
            ServiceMetric(
                name=service.name,
                icon=service.icon,
                clicks=parse_count(match.group(1)),
                percentage=match.group(2) or "",
            )
        )
    rows = rank(dedupe_by_name(rows), key=lambda row: row.clicks)
    total_clicks = sum(row.clicks for row in rows)
    return backfill_percentages(rows, lambda row: row.clicks, total_clicks)


def parse_countries(text: str, countries: list[str], total_visits: int = 0) -> list[CountryMetric]:
    """Visits per country.

    Missing shares are computed against the overview's total visits when
    known, otherwise against the sum of the country counts.
    """
    rows: list[CountryMetric] = []
    for country in countries:
        pattern = re.escape(country) + r"\s*[^\d]*(\d+)\s*" + _PERCENT
        match = re.search(pattern, text, re.IGNORECASE)
        if not match or parse_count(match.group(1)) <= 0:
            continue
        rows.append(
            CountryMetric(
                name=country,
                visits=parse_count(match.group(1)),
                percentage=match.group(2) or "",
            )
        )
    rows = rank(dedupe_by_name(rows), key=lambda row: row.visits)
    total = total_visits or sum(row.visits for row in rows)
    return backfill_percentages(rows, lambda row: row.visits, total)


def parse_release_title(
    text: str, marker: str, window: int = 500, noise_patterns: list[str] | None = None
) -> str:
    """Header text preceding the release link, minus dashboard chrome."""
    match = re.match(r"([\s\S]*?)" + re.escape(marker), text[:window])
    if not match:
        return ""
    title = match.group(1)
    if noise_patterns:
        title = re.sub("|".join(noise_patterns), "", title, flags=re.IGNORECASE)
    return re.sub(r"\s+", " ", title).strip()


# --- DOM cascades ---


def _date_range(catalogue: AnalyticsCatalogue) -> Candidate[str]:
    pattern = re.compile(catalogue.date_range_pattern)

    async def run(snapshot: PageSnapshot) -> str:
        # A container that merely holds the dates among other content has
        # more children; only a leaf-ish element counts.
        for element in await snapshot.query_all("*"):
            match = pattern.search(element.text)
            if match and element.child_count < catalogue.date_range_max_children:
                return match.group(0)
        return ""

    return Candidate("date-picker-text", run)


def _partner_link(catalogue: AnalyticsCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        element = await snapshot.query(catalogue.partner_link_selector)
        if element is None:
            return ""
        return element.href or element.text

    return Candidate("partner-link", run)


def _artwork_image(catalogue: AnalyticsCatalogue) -> Candidate[str]:
    async def run(snapshot: PageSnapshot) -> str:
        element = await snapshot.query(catalogue.artwork_selector)
        return element.src if element else ""

    return Candidate("artwork-image", run)


async def extract_analytics(
    snapshot: PageSnapshot, catalogue: AnalyticsCatalogue | None = None
) -> AnalyticsResult:
    catalogue = catalogue or default_catalogues().analytics

    link = await first_of(snapshot, [_partner_link(catalogue)], "", field="release.link")
    artwork = await first_of(snapshot, [_artwork_image(catalogue)], "", field="release.artwork")
    date_range = await first_of(snapshot, [_date_range(catalogue)], "", field="dateRange")

    text = await snapshot.visible_text()
    overview = parse_overview(text, catalogue.overview_labels)
    result = AnalyticsResult(
        release=ReleaseInfo(
            title=parse_release_title(
                text,
                catalogue.title_marker,
                catalogue.title_window,
                catalogue.title_noise_patterns,
            ),
            link=link,
            artwork=resolve_url(artwork, snapshot.url),
        ),
        date_range=date_range,
        overview=overview,
        referrals=parse_referrals(text, catalogue.referrers),
        services=parse_services(text, catalogue.services),
        countries=parse_countries(text, catalogue.countries, overview.total_visits),
    )
    logger.debug(
        "Analytics extracted: %d referrals, %d services, %d countries",
        len(result.referrals),
        len(result.services),
        len(result.countries),
    )
    return result
