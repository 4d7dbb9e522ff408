"""CLI I/O helpers for atomic report writing."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any

from core.scan.models import ScanReport


def write_report_atomic(path: Path, report: ScanReport) -> None:
    """Write the scan report JSON atomically using a temporary file + replace."""

    path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_json(path, report.model_dump(mode="json"))


def write_fallback_report_atomic(
    path: Path,
    *,
    error_type: str,
    error_message: str,
    stage: str,
) -> None:
    """Write an empty report carrying the error metadata of a failed run."""

    error_block = {
        "error_type": error_type,
        "error_message": error_message,
        "stage": stage,
    }
    payload = {
        "flagged_ids": [],
        "symbols_consumed": 0,
        "records_closed": 0,
        "final_state": None,
        "ended_mid_record": False,
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_json(path, _with_error_block(payload, error_block))


def _with_error_block(payload: dict[str, Any], error_block: dict[str, Any]) -> dict[str, Any]:
    enriched = dict(payload)
    enriched["error"] = error_block
    return enriched


def _atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            json.dump(payload, tmp, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
        except Exception:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise

    tmp_path.replace(path)
