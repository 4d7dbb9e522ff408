"""Trace observers used by the CLI to print or record scan transitions."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TextIO

from core.scan.driver import TraceObserver
from core.scan.models import TraceEvent

END_MARKER = "<end>"


class ArrowTraceWriter:
    """Writes `"state"-c->` per step and `<end>` once input is exhausted."""

    def __init__(self, emit: Callable[[str], None]) -> None:
        self._emit = emit

    def on_step(self, event: TraceEvent) -> None:
        if event.is_end:
            self._emit(END_MARKER + "\n")
            return
        self._emit(f'"{event.state}"-{event.symbol}->')


class JsonlTraceWriter:
    """Writes one compact JSON object per trace event."""

    def __init__(self, handle: TextIO) -> None:
        self._handle = handle

    def on_step(self, event: TraceEvent) -> None:
        if event.is_end:
            payload: dict[str, object] = {"event": "end", "state": event.state}
        else:
            payload = {
                "event": "step",
                "state": event.state,
                "symbol": event.symbol,
                "next_state": event.next_state,
            }
        self._handle.write(
            json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
        )
        self._handle.write("\n")


class TraceFanout:
    """Forwards each event to several observers in order."""

    def __init__(self, observers: list[TraceObserver]) -> None:
        self._observers = observers

    def on_step(self, event: TraceEvent) -> None:
        for observer in self._observers:
            observer.on_step(event)
