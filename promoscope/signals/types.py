"""Signal type definitions for extraction lifecycle observability."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SignalType(str, Enum):
    """All signal types emitted during an extraction call."""

    PHASE_TRANSITION = "PHASE_TRANSITION"
    SCREENSHOT_STORED = "SCREENSHOT_STORED"
    EXTRACTION_COMPLETE = "EXTRACTION_COMPLETE"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"


class Signal(BaseModel):
    """An immutable signal emitted during an extraction call.

    Signals are append-only and cannot be modified after emission.
    """

    sequence: int = Field(description="Monotonic sequence number within the call")
    signal_type: SignalType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    run_id: str
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}
