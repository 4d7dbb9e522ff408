"""Guard predicates and transition actions used by automaton rules.

Both are closed enumerations dispatched by kind so that the rule table stays
plain data and coverage can be checked mechanically.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.automaton.models import ParseContext

ALPHABET: tuple[str, ...] = tuple(chr(code) for code in range(256))
WHITESPACE_CHARS = frozenset(" \t\r\n")
DELIMITER_CHARS = frozenset(' "')
DIGIT_CHARS = frozenset("0123456789")


class GuardKind(str, Enum):
    """Symbol classes a transition rule can match on."""

    ALWAYS = "always"
    DIGIT = "digit"
    WHITESPACE = "whitespace"
    DELIMITER = "delimiter"
    LITERAL = "literal"


class ActionKind(str, Enum):
    """Side effects a transition can apply to the parse context."""

    BEGIN_RECORD = "begin_record"
    ACCUMULATE_DIGIT = "accumulate_digit"
    FLAG_RECORD = "flag_record"
    CLOSE_RECORD = "close_record"


@dataclass(frozen=True)
class Guard:
    """Pure predicate over one input symbol."""

    kind: GuardKind
    comparand: str | None = None

    def __post_init__(self) -> None:
        if self.kind is GuardKind.LITERAL:
            if self.comparand is None or len(self.comparand) != 1:
                raise ValueError("Literal guard requires a single-character comparand")
        elif self.comparand is not None:
            raise ValueError(f"Guard kind '{self.kind.value}' does not take a comparand")

    def accepts(self, symbol: str) -> bool:
        kind = self.kind
        if kind is GuardKind.ALWAYS:
            return True
        if kind is GuardKind.LITERAL:
            return symbol == self.comparand
        if kind is GuardKind.DIGIT:
            return symbol in DIGIT_CHARS
        if kind is GuardKind.WHITESPACE:
            return symbol in WHITESPACE_CHARS
        if kind is GuardKind.DELIMITER:
            return symbol in DELIMITER_CHARS
        raise ValueError(f"Unknown guard kind: {kind}")

    def describe(self) -> str:
        if self.kind is GuardKind.LITERAL:
            return f"literal({self.comparand!r})"
        return self.kind.value


def always() -> Guard:
    return Guard(GuardKind.ALWAYS)


def digit() -> Guard:
    return Guard(GuardKind.DIGIT)


def whitespace() -> Guard:
    return Guard(GuardKind.WHITESPACE)


def delimiter() -> Guard:
    return Guard(GuardKind.DELIMITER)


def literal(char: str) -> Guard:
    return Guard(GuardKind.LITERAL, char)


def apply_action(kind: ActionKind, symbol: str, context: ParseContext) -> None:
    """Apply one transition action to the scan context.

    Args:
        kind: Action attached to the rule being taken.
        symbol: The symbol that triggered the transition.
        context: Per-scan mutable state.
    """

    if kind is ActionKind.BEGIN_RECORD:
        context.current_id = 0
    elif kind is ActionKind.ACCUMULATE_DIGIT:
        if symbol not in DIGIT_CHARS:
            raise ValueError(f"Digit action received non-digit symbol {symbol!r}")
        context.current_id = context.current_id * 10 + (ord(symbol) - ord("0"))
    elif kind is ActionKind.FLAG_RECORD:
        context.flagged_ids.append(context.current_id)
    elif kind is ActionKind.CLOSE_RECORD:
        context.records_closed += 1
    else:
        raise ValueError(f"Unknown action kind: {kind}")
