"""Structured error telemetry helpers."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Canonical error codes for operational telemetry."""

    NAVIGATION_FAILED = "NAVIGATION_FAILED"
    PAGE_EVALUATION_FAILED = "PAGE_EVALUATION_FAILED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    SCREENSHOT_STORE_FAILED = "SCREENSHOT_STORE_FAILED"
    BROWSER_CLEANUP_FAILED = "BROWSER_CLEANUP_FAILED"
    SIGNAL_SUBSCRIBER_FAILURE = "SIGNAL_SUBSCRIBER_FAILURE"
    REPORT_STORE_FAILED = "REPORT_STORE_FAILED"


def emit_structured_error(
    logger: logging.Logger,
    *,
    code: ErrorCode,
    message: str,
    suppressed: bool,
    run_id: str | None = None,
    phase: str | None = None,
    details: dict[str, Any] | None = None,
    exc: BaseException | None = None,
) -> None:
    """Emit a structured telemetry event via logging.

    When ``exc`` is given its type name is recorded in ``details`` so
    suppressed failures can be grouped without a traceback.
    """
    details = dict(details or {})
    if exc is not None:
        details.setdefault("exception_type", type(exc).__name__)
    logger.error(
        "promoscope_error",
        extra={
            "error_code": code,
            "error_message": message,
            "suppressed": suppressed,
            "run_id": run_id,
            "phase": phase,
            "details": details,
        },
    )
