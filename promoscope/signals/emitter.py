"""Signal emitter for extraction calls.

Handles emission, optional persistence, and fan-out of Signals.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from promoscope.signals.types import Signal, SignalType
from promoscope.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)


class SignalEmitter:
    """Emits, persists, and broadcasts signals for a single extraction call.

    Signals are:
    - Immutable once emitted
    - Assigned monotonic sequence numbers
    - Appended to a JSONL ledger when a ledger path is given
    - Delivered to subscribers in emission order
    """

    def __init__(self, run_id: str, ledger_path: Path | None = None) -> None:
        self._run_id = run_id
        self._sequence = 0
        self._ledger_path = ledger_path
        self._subscribers: list[Callable[[Signal], Any]] = []
        self._signals: list[Signal] = []
        self._lock = asyncio.Lock()

        if self._ledger_path:
            self._ledger_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def run_id(self) -> str:
        return self._run_id

    @property
    def signals(self) -> list[Signal]:
        """Return all emitted signals (read-only copy)."""
        return list(self._signals)

    def subscribe(self, callback: Callable[[Signal], Any]) -> None:
        """Register a subscriber; sync and async callables are both accepted."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Signal], Any]) -> None:
        self._subscribers = [s for s in self._subscribers if s is not callback]

    async def emit(self, signal_type: SignalType, payload: dict[str, Any] | None = None) -> Signal:
        """Emit a signal. This is the only way signals are created."""
        async with self._lock:
            self._sequence += 1
            signal = Signal(
                sequence=self._sequence,
                signal_type=signal_type,
                timestamp=datetime.now(timezone.utc),
                run_id=self._run_id,
                payload=payload or {},
            )
            self._signals.append(signal)

        if self._ledger_path:
            self._persist(signal)

        await self._broadcast(signal)

        return signal

    def _persist(self, signal: Signal) -> None:
        with open(self._ledger_path, "a") as f:
            f.write(signal.model_dump_json() + "\n")

    async def _broadcast(self, signal: Signal) -> None:
        for subscriber in self._subscribers:
            try:
                result = subscriber(signal)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                # Subscribers must not break the extraction.
                emit_structured_error(
                    logger,
                    code=ErrorCode.SIGNAL_SUBSCRIBER_FAILURE,
                    message=str(exc),
                    suppressed=True,
                    run_id=self._run_id,
                    details={"signal_type": signal.signal_type.value},
                    exc=exc,
                )

    async def emit_phase_transition(
        self, from_phase: str, to_phase: str, context: dict[str, Any] | None = None
    ) -> Signal:
        """Convenience: emit a PHASE_TRANSITION signal."""
        return await self.emit(
            SignalType.PHASE_TRANSITION,
            {"from_phase": from_phase, "to_phase": to_phase, **(context or {})},
        )

    async def emit_screenshot_stored(self, url: str, size_bytes: int) -> Signal:
        return await self.emit(
            SignalType.SCREENSHOT_STORED, {"url": url, "size_bytes": size_bytes}
        )

    async def emit_extraction_complete(
        self, source_type: str, url: str, duration_s: float, screenshot: str | None
    ) -> Signal:
        return await self.emit(
            SignalType.EXTRACTION_COMPLETE,
            {
                "source_type": source_type,
                "url": url,
                "duration_s": duration_s,
                "screenshot": screenshot,
            },
        )

    async def emit_extraction_failed(
        self, failure_reason: str, phase_at_failure: str, error_type: str
    ) -> Signal:
        return await self.emit(
            SignalType.EXTRACTION_FAILED,
            {
                "failure_reason": failure_reason,
                "phase_at_failure": phase_at_failure,
                "error_type": error_type,
            },
        )

    @staticmethod
    def load_ledger(ledger_path: Path) -> list[Signal]:
        """Load all signals from a JSONL ledger file."""
        signals = []
        if ledger_path.exists():
            with open(ledger_path) as f:
                for line in f:
                    line = line.strip()
                    if line:
                        signals.append(Signal.model_validate_json(line))
        return signals
