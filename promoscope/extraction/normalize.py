"""Normalization & ranking for extracted candidates.

Count parsing, name de-duplication, percentage backfill, descending
ranking, and absolute URL resolution. All functions are pure and return
new objects.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Sequence, TypeVar
from urllib.parse import urljoin, urlparse

from pydantic import BaseModel

_DIGITS = re.compile(r"\d+")

M = TypeVar("M", bound=BaseModel)


def parse_count(raw: str | int | None) -> int:
    """Parse ``"1,234"`` / ``"1234"`` / ``1234`` into an int; anything else is 0."""
    if raw is None:
        return 0
    if isinstance(raw, int):
        return max(raw, 0)
    digits = "".join(_DIGITS.findall(str(raw)))
    return int(digits) if digits else 0


def format_share(part: int, total: int) -> str:
    """``part`` as a percentage of ``total`` with one decimal, e.g. ``"60.0%"``.

    Rounds half away from zero on the exact binary value of the ratio.
    """
    if total <= 0:
        return ""
    share = Decimal(part / total * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{share}%"


def dedupe_by_name(items: Iterable[M]) -> list[M]:
    """Keep the first item seen for each name."""
    seen: set[str] = set()
    unique: list[M] = []
    for item in items:
        name = getattr(item, "name")
        if name in seen:
            continue
        seen.add(name)
        unique.append(item)
    return unique


def rank(items: Iterable[M], key: Callable[[M], int]) -> list[M]:
    """Sort descending by ``key``; ties keep catalogue order."""
    return sorted(items, key=key, reverse=True)


def backfill_percentages(
    items: Sequence[M], count: Callable[[M], int], total: int
) -> list[M]:
    """Fill empty ``percentage`` fields with each item's share of ``total``."""
    if total <= 0:
        return list(items)
    return [
        item
        if getattr(item, "percentage")
        else item.model_copy(update={"percentage": format_share(count(item), total)})
        for item in items
    ]


def resolve_url(url: str, base: str) -> str:
    """Resolve ``url`` against ``base``; absolute http(s) URLs pass through unchanged."""
    url = (url or "").strip()
    if not url:
        return ""
    if urlparse(url).scheme in ("http", "https"):
        return url
    return urljoin(base, url)
