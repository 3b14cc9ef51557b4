"""Cascade runner — ordered heuristics, first success wins.

Every extracted field is a cascade: a list of named candidates tried in
priority order. The first candidate that yields a non-empty, non-zero
value decides the field and the remaining candidates are skipped. A
cascade that finds nothing is a soft miss and returns the field default.

Candidates may be plain functions or coroutines of the snapshot.
Exceptions raised by a candidate are not caught here: a failing page
evaluation is a hard failure for the whole extraction.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

from promoscope.browser.snapshot import PageSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Candidate(Generic[T]):
    """One named heuristic step."""

    name: str
    fn: Callable[[PageSnapshot], Any]

    async def evaluate(self, snapshot: PageSnapshot) -> T | None:
        value = self.fn(snapshot)
        if inspect.isawaitable(value):
            value = await value
        return value


def is_present(value: Any) -> bool:
    """Whether a candidate's value counts as a hit (non-empty and non-zero)."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return True


@dataclass(frozen=True)
class CascadeOutcome(Generic[T]):
    value: T
    source: str | None = None

    @property
    def matched(self) -> bool:
        return self.source is not None


async def run_cascade(
    snapshot: PageSnapshot,
    candidates: Sequence[Candidate[T]],
    default: T,
    field: str = "",
) -> CascadeOutcome[T]:
    """Evaluate ``candidates`` in order and return the first hit."""
    for step in candidates:
        value = await step.evaluate(snapshot)
        if is_present(value):
            logger.debug("Cascade %s resolved by %s", field or "<field>", step.name)
            return CascadeOutcome(value=value, source=step.name)
    logger.debug("Cascade %s found nothing", field or "<field>")
    return CascadeOutcome(value=default)


async def first_of(
    snapshot: PageSnapshot,
    candidates: Sequence[Candidate[T]],
    default: T,
    field: str = "",
) -> T:
    """``run_cascade`` without the provenance."""
    return (await run_cascade(snapshot, candidates, default, field)).value
