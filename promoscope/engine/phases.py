"""Extraction phase definitions — the lifecycle states of one extraction call."""

from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    """Phases of a single extraction call.

    Every call walks these in order; SCROLL is only entered by sources that
    lazy-load on scroll. Any phase may fail.
    """

    INIT = "INIT"
    NAVIGATE = "NAVIGATE"
    SETTLE = "SETTLE"
    SCROLL = "SCROLL"
    EXTRACT = "EXTRACT"
    CAPTURE = "CAPTURE"
    COMPLETE = "COMPLETE"
    FAIL = "FAIL"


# Valid phase transitions. Each key maps to a set of phases it can transition to.
VALID_TRANSITIONS: dict[Phase, set[Phase]] = {
    Phase.INIT: {Phase.NAVIGATE, Phase.FAIL},
    Phase.NAVIGATE: {Phase.SETTLE, Phase.FAIL},
    Phase.SETTLE: {Phase.SCROLL, Phase.EXTRACT, Phase.FAIL},
    Phase.SCROLL: {Phase.EXTRACT, Phase.FAIL},
    Phase.EXTRACT: {Phase.CAPTURE, Phase.FAIL},
    Phase.CAPTURE: {Phase.COMPLETE, Phase.FAIL},
    Phase.COMPLETE: set(),  # terminal
    Phase.FAIL: set(),  # terminal
}

TERMINAL_PHASES = {Phase.COMPLETE, Phase.FAIL}
