"""Pull-based scan driver running input symbols through an automaton."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from core.automaton.engine import step
from core.automaton.models import Automaton, EndOfInput, ParseContext
from core.builder.record_graph import build_record_automaton
from core.scan.models import ScanReport, TraceEvent
from core.scan.sources import SymbolSource, TextSymbolSource
from core.utils.errors import UnhandledSymbolError

logger = logging.getLogger("spamscan.scan")


class TraceObserver(Protocol):
    """Receives one event per transition plus a final end event."""

    def on_step(self, event: TraceEvent) -> None:
        """Handle one trace event."""


def scan(
    automaton: Automaton,
    source: SymbolSource,
    observer: TraceObserver | None = None,
) -> ScanReport:
    """Run every symbol of source through automaton.

    Args:
        automaton: Built automaton; it is only read, so one instance can serve
            any number of sequential scans.
        source: Symbol source, consumed exactly once.
        observer: Optional trace observer notified after each transition and
            once at end of input.

    Returns:
        ScanReport with flagged record identifiers in record order.

    Raises:
        UnhandledSymbolError: If a state has no rule for a symbol. The scan
            stops and no report is produced.
    """

    context = ParseContext()
    state = automaton.start
    consumed = 0
    _log_event(logging.INFO, "scan_start", start_state=state.name, state_count=len(automaton))

    while True:
        symbol = source.read_symbol()
        if isinstance(symbol, EndOfInput):
            if observer is not None:
                observer.on_step(TraceEvent(state=state.name, is_end=True))
            break

        try:
            next_state = step(state, symbol, context)
        except UnhandledSymbolError as exc:
            _log_event(
                logging.ERROR,
                "scan_error",
                state=exc.state_name,
                symbol=exc.symbol,
                symbols_consumed=consumed,
            )
            raise

        consumed += 1
        if observer is not None:
            observer.on_step(
                TraceEvent(state=state.name, symbol=symbol, next_state=next_state.name)
            )
        state = next_state

    report = ScanReport(
        flagged_ids=list(context.flagged_ids),
        symbols_consumed=consumed,
        records_closed=context.records_closed,
        final_state=state.name,
        ended_mid_record=state is not automaton.start,
    )
    if report.ended_mid_record:
        _log_event(logging.WARNING, "scan_incomplete", final_state=report.final_state)
    _log_event(
        logging.INFO,
        "scan_done",
        flagged_count=len(report.flagged_ids),
        records_closed=report.records_closed,
        symbols_consumed=report.symbols_consumed,
    )
    return report


def scan_text(
    text: str,
    automaton: Automaton | None = None,
    observer: TraceObserver | None = None,
) -> ScanReport:
    """Scan an in-memory string, building the default automaton when omitted."""

    if automaton is None:
        automaton = build_record_automaton()
    return scan(automaton, TextSymbolSource(text), observer)


def _log_event(level: int, event: str, **fields: Any) -> None:
    payload = {"event": event, **fields}
    logger.log(level, _dump_json(payload))


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
