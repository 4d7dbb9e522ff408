from __future__ import annotations

import io
import json

from apps.cli.format_human import render_scan_summary
from apps.cli.trace import ArrowTraceWriter, JsonlTraceWriter, TraceFanout
from core.scan.driver import scan_text
from core.scan.models import ScanReport, TraceEvent


def test_arrow_trace_writes_quoted_state_and_symbol() -> None:
    chunks: list[str] = []
    writer = ArrowTraceWriter(chunks.append)

    scan_text("a<", observer=writer)

    assert "".join(chunks) == '"start"-a->"start"-<-><end>\n'


def test_jsonl_trace_writes_one_line_per_event() -> None:
    handle = io.StringIO()
    writer = JsonlTraceWriter(handle)

    writer.on_step(TraceEvent(state="start", symbol="<", next_state="open_doc_1"))
    writer.on_step(TraceEvent(state="open_doc_1", is_end=True))

    lines = [json.loads(line) for line in handle.getvalue().splitlines()]
    assert lines == [
        {"event": "step", "next_state": "open_doc_1", "state": "start", "symbol": "<"},
        {"event": "end", "state": "open_doc_1"},
    ]


def test_fanout_forwards_to_every_observer() -> None:
    first: list[str] = []
    second: list[str] = []
    fanout = TraceFanout([ArrowTraceWriter(first.append), ArrowTraceWriter(second.append)])

    fanout.on_step(TraceEvent(state="start", is_end=True))

    assert first == second == ["<end>\n"]


def test_render_scan_summary_lists_ids_in_order() -> None:
    report = ScanReport(flagged_ids=[30, 5], records_closed=3, final_state="start")

    text = render_scan_summary(report)

    assert text.splitlines()[0] == "The following messages were spam: 30 5"
    assert "WARNING" not in text


def test_render_scan_summary_without_ids_and_incomplete_input() -> None:
    report = ScanReport(final_state="flagged", ended_mid_record=True)

    lines = render_scan_summary(report).splitlines()

    assert lines[0] == "The following messages were spam:"
    assert lines[-1] == "WARNING(scan): input ended mid-record (final_state=flagged)"
