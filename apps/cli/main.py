"""Typer CLI entrypoint for spamscan."""

from __future__ import annotations

import json
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Annotated, Literal, cast

import typer

from apps.cli.format_human import (
    render_phrase_list,
    render_scan_summary,
    render_transition_table,
)
from apps.cli.io import write_fallback_report_atomic, write_report_atomic
from apps.cli.trace import ArrowTraceWriter, JsonlTraceWriter, TraceFanout
from core.builder.phrases import PhraseTrie
from core.builder.record_graph import build_record_automaton
from core.config.loader import load_config
from core.scan.driver import TraceObserver, scan
from core.scan.models import ScanReport
from core.scan.sources import ByteStreamSource
from core.utils.errors import AutomatonDefinitionError, UnhandledSymbolError

app = typer.Typer(help="Tagged record spam scanner CLI", rich_markup_mode=None)
ReportFormat = Literal["human", "json", "both"]


@app.callback()
def cli_callback() -> None:
    """CLI root callback to keep `spamscan scan` as explicit command form."""


@app.command("scan")
def scan_command(
    input_path: Annotated[
        Path,
        typer.Option("--input", exists=True, dir_okay=False, file_okay=True),
    ],
    config: Annotated[Path | None, typer.Option()] = None,
    report: Annotated[
        Path | None,
        typer.Option("--report", help="Write the JSON scan report to this path."),
    ] = None,
    report_format: Annotated[str, typer.Option()] = "human",
    trace: Annotated[
        bool, typer.Option("--trace", help="Print every transition to stdout.")
    ] = False,
    trace_jsonl: Annotated[
        Path | None,
        typer.Option("--trace-jsonl", help="Write every transition as JSON lines."),
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", help="Overwrite the report file when it already exists.")
    ] = False,
    no_overwrite: Annotated[
        bool,
        typer.Option("--no-overwrite", help="Fail when the report file already exists."),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Emit structured scan log events to stderr.")
    ] = False,
) -> None:
    """Scan one input file and report the identifiers of flagged records."""

    if force and no_overwrite:
        typer.echo("ERROR: --force and --no-overwrite cannot be used together.")
        if report is not None and not report.exists():
            _safe_write_fallback(report, "ArgumentConflict", "conflicting overwrite flags", "args")
        raise typer.Exit(code=1)

    report_exists = report is not None and report.exists()
    if report_exists and no_overwrite:
        typer.echo("ERROR: report already exists and --no-overwrite is enabled.")
        raise typer.Exit(code=1)

    normalized_report_format = report_format.lower().strip()
    if normalized_report_format not in {"human", "json", "both"}:
        typer.echo("ERROR: --report-format must be one of: human, json, both.")
        _safe_write_fallback(report, "ArgumentValidationError", "invalid report_format", "args")
        raise typer.Exit(code=1)
    report_format_typed = cast(ReportFormat, normalized_report_format)

    if report is not None and report_exists and report_format_typed != "json":
        typer.echo(f"INFO: overwriting existing report: {report.name}")

    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")

    result: ScanReport | None = None
    exit_code = 1
    reason = "unexpected error"
    failure_stage = "unknown"
    error: Exception | None = None

    try:
        failure_stage = "load_config"
        scan_config = load_config(config)
        failure_stage = "build_automaton"
        automaton = build_record_automaton(scan_config)
        failure_stage = "scan"
        with ExitStack() as stack:
            observers: list[TraceObserver] = []
            if trace:
                observers.append(ArrowTraceWriter(lambda text: typer.echo(text, nl=False)))
            if trace_jsonl is not None:
                trace_jsonl.parent.mkdir(parents=True, exist_ok=True)
                handle = stack.enter_context(trace_jsonl.open("w", encoding="utf-8"))
                observers.append(JsonlTraceWriter(handle))
            handle_in = stack.enter_context(input_path.open("rb"))
            observer = TraceFanout(observers) if observers else None
            result = scan(automaton, ByteStreamSource(handle_in), observer)
        exit_code = 0
        reason = "success"
    except UnhandledSymbolError as exc:
        error = exc
        exit_code = 3
        reason = "unhandled symbol"
        typer.echo(f"Error: Unhandled symbol:{exc.symbol} (state={exc.state_name})")
    except AutomatonDefinitionError as exc:
        error = exc
        exit_code = 3
        reason = "automaton definition invalid"
        typer.echo(f"ERROR: {reason}: {exc}")
    except Exception as exc:  # noqa: BLE001
        error = exc
        if failure_stage == "load_config":
            exit_code = 2
            reason = "invalid config"
            typer.echo(f"ERROR: {reason}: {exc}")
        else:
            exit_code = 1
            reason = "internal error"
            typer.echo(f"ERROR: {type(exc).__name__}: {exc}")

    if result is None:
        error_type = type(error).__name__ if error is not None else "UnknownError"
        error_message = str(error) if error is not None else reason
        _safe_write_fallback(report, error_type, error_message, failure_stage)
        raise typer.Exit(code=exit_code)

    if report_format_typed in {"human", "both"}:
        typer.echo(render_scan_summary(result))
    if report_format_typed in {"json", "both"}:
        typer.echo(json.dumps(result.model_dump(mode="json"), sort_keys=True))

    if report is not None:
        try:
            write_report_atomic(report, result)
        except Exception as exc:  # noqa: BLE001
            exit_code = 1
            reason = "write report failed"
            typer.echo(f"ERROR: {reason}: {exc}")

    if exit_code == 0 and report_format_typed != "json":
        typer.echo("INFO: success")

    raise typer.Exit(code=exit_code)


@app.command("describe")
def describe_command(
    config: Annotated[Path | None, typer.Option()] = None,
) -> None:
    """Print the configured phrases and the transition table of the automaton."""

    try:
        scan_config = load_config(config)
        automaton = build_record_automaton(scan_config)
    except AutomatonDefinitionError as exc:
        typer.echo(f"ERROR: automaton definition invalid: {exc}")
        raise typer.Exit(code=3) from exc
    except ValueError as exc:
        typer.echo(f"ERROR: invalid config: {exc}")
        raise typer.Exit(code=2) from exc

    typer.echo(render_phrase_list(PhraseTrie.from_phrases(scan_config.phrases).phrases()))
    typer.echo(render_transition_table(automaton))


def _safe_write_fallback(
    path: Path | None,
    error_type: str,
    error_message: str,
    stage: str,
) -> None:
    if path is None:
        return
    try:
        write_fallback_report_atomic(
            path,
            error_type=error_type,
            error_message=error_message,
            stage=stage,
        )
    except Exception:  # noqa: BLE001
        pass


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
