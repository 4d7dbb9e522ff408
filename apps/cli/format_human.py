"""Human-readable rendering of scan results and transition tables."""

from __future__ import annotations

from core.automaton.models import Automaton
from core.scan.models import ScanReport


def render_scan_summary(report: ScanReport) -> str:
    """Render the flagged identifier line plus any end-of-input warning."""

    ids_text = "".join(f" {flagged_id}" for flagged_id in report.flagged_ids)
    lines = [f"The following messages were spam:{ids_text}"]
    lines.append(
        f"records_closed={report.records_closed} symbols_consumed={report.symbols_consumed}"
    )
    if report.ended_mid_record:
        lines.append(f"WARNING(scan): input ended mid-record (final_state={report.final_state})")
    return "\n".join(lines)


def render_transition_table(automaton: Automaton) -> str:
    """Render every state's rules in evaluation order, start state first."""

    states = [automaton.start]
    states.extend(state for state in automaton if state is not automaton.start)

    lines: list[str] = []
    for state in states:
        lines.append(f"{state.name}:")
        for index, rule in enumerate(state.rules, start=1):
            line = f"  {index}. {rule.guard.describe()} -> {rule.target.name}"
            if rule.action is not None:
                line += f" [{rule.action.value}]"
            lines.append(line)
    return "\n".join(lines)


def render_phrase_list(phrases: list[str]) -> str:
    return "phrases: " + ", ".join(repr(phrase) for phrase in phrases)
