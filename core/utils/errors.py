"""Custom exceptions for core logic."""

from __future__ import annotations


class UnhandledSymbolError(Exception):
    """Raised when no rule of the current state accepts the input symbol.

    This signals a defect in the automaton definition rather than bad input;
    the scan that hit it produces no result.
    """

    def __init__(self, state_name: str, symbol: str) -> None:
        super().__init__(f"Unhandled symbol {symbol!r} in state '{state_name}'")
        self.state_name = state_name
        self.symbol = symbol


class AutomatonDefinitionError(Exception):
    """Raised when a built automaton violates the coverage contract."""

    def __init__(self, message: str, *, gaps: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.gaps = gaps or {}
