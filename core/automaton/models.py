"""Data models for automaton states, rules, and per-scan context."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

from core.automaton.guards import ActionKind, Guard


class EndOfInput:
    """Sentinel type signalling that the symbol source is exhausted."""

    _instance: EndOfInput | None = None

    def __new__(cls) -> EndOfInput:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "END_OF_INPUT"


END_OF_INPUT = EndOfInput()


@dataclass(frozen=True)
class TransitionRule:
    """One ordered outgoing transition of a state."""

    guard: Guard
    target: State
    action: ActionKind | None = None


class State:
    """Named automaton state owning an insertion-ordered rule list.

    Rules can only be added until the state is sealed by the builder.
    """

    __slots__ = ("name", "_rules", "_sealed")

    def __init__(self, name: str) -> None:
        self.name = name
        self._rules: list[TransitionRule] = []
        self._sealed = False

    @property
    def rules(self) -> tuple[TransitionRule, ...]:
        return tuple(self._rules)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def add_rule(self, rule: TransitionRule) -> None:
        if self.sealed:
            raise RuntimeError(f"State '{self.name}' is sealed; rules cannot be added")
        self._rules.append(rule)

    def seal(self) -> None:
        self._sealed = True

    def __repr__(self) -> str:
        return f"State({self.name!r}, rules={len(self._rules)})"


@dataclass(frozen=True)
class Automaton:
    """Immutable state graph with a distinguished start state."""

    states: Mapping[str, State]
    start: State

    def state(self, name: str) -> State:
        try:
            return self.states[name]
        except KeyError as exc:
            raise KeyError(f"Unknown state: {name}") from exc

    def __iter__(self) -> Iterator[State]:
        return iter(self.states.values())

    def __len__(self) -> int:
        return len(self.states)


@dataclass
class ParseContext:
    """Mutable state owned by exactly one in-flight scan."""

    current_id: int = 0
    flagged_ids: list[int] = field(default_factory=list)
    records_closed: int = 0
