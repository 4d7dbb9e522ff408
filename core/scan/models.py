"""Scan result and trace event models."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class TraceEvent:
    """One observed scan step, or the end-of-input marker when is_end is set."""

    state: str
    symbol: str | None = None
    next_state: str | None = None
    is_end: bool = False


class ScanReport(BaseModel):
    """Outcome of one completed scan."""

    model_config = ConfigDict(extra="forbid")

    flagged_ids: list[int] = Field(default_factory=list)
    symbols_consumed: int = 0
    records_closed: int = 0
    final_state: str
    ended_mid_record: bool = False
