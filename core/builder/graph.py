"""Generic builder for priority-ordered automaton rule tables."""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from core.automaton.engine import find_coverage_gaps
from core.automaton.guards import ActionKind, Guard, literal
from core.automaton.models import Automaton, State, TransitionRule
from core.utils.errors import AutomatonDefinitionError


class AutomatonBuilder:
    """Collects states and rules, then freezes them into an Automaton.

    States are created on first reference so rules may point at states whose
    own rules are declared later.
    """

    def __init__(self) -> None:
        self._states: dict[str, State] = {}
        self._built = False

    def state(self, name: str) -> State:
        """Return the state called name, creating it when missing."""

        existing = self._states.get(name)
        if existing is not None:
            return existing
        self._ensure_open()
        created = State(name)
        self._states[name] = created
        return created

    def new_state(self, name: str) -> State:
        """Create a state whose name must not be taken yet."""

        if name in self._states:
            raise ValueError(f"Duplicate state name: {name}")
        return self.state(name)

    def rule(
        self,
        source: State,
        guard: Guard,
        target: State,
        action: ActionKind | None = None,
    ) -> None:
        self._ensure_open()
        source.add_rule(TransitionRule(guard=guard, target=target, action=action))

    def extend(self, source: State, rules: Iterable[TransitionRule]) -> None:
        self._ensure_open()
        for rule in rules:
            source.add_rule(rule)

    def build(self, start: State) -> Automaton:
        """Seal every state and verify that reachable states cover the alphabet.

        Raises:
            AutomatonDefinitionError: If a reachable state leaves symbols unhandled.
        """

        self._ensure_open()
        if self._states.get(start.name) is not start:
            raise AutomatonDefinitionError(f"Start state '{start.name}' is not owned by builder")

        for state in self._states.values():
            state.seal()
        self._built = True

        automaton = Automaton(states=MappingProxyType(dict(self._states)), start=start)
        gaps = find_coverage_gaps(automaton)
        if gaps:
            names = ", ".join(sorted(gaps))
            raise AutomatonDefinitionError(
                f"States without a rule for every symbol: {names}", gaps=gaps
            )
        return automaton

    def _ensure_open(self) -> None:
        if self._built:
            raise RuntimeError("Automaton already built; builder is closed")


def chain_entry(
    builder: AutomatonBuilder,
    prefix: str,
    text: str,
    done: State,
    action: ActionKind | None = None,
) -> TransitionRule:
    """Rule that consumes the first character of a literal marker chain."""

    if not text:
        raise ValueError(f"Marker text for '{prefix}' must not be empty")
    if len(text) == 1:
        return TransitionRule(guard=literal(text), target=done, action=action)
    return TransitionRule(guard=literal(text[0]), target=builder.state(f"{prefix}_1"))


def add_marker_chain(
    builder: AutomatonBuilder,
    prefix: str,
    text: str,
    done: State,
    fallback: Iterable[TransitionRule],
    action: ActionKind | None = None,
) -> TransitionRule:
    """Declare states `{prefix}_1..{prefix}_{n-1}` recognizing text literally.

    State `{prefix}_i` has consumed i characters. Each expects the next
    character, then falls back to the given rules; the last character moves
    to done and carries the optional action. Returns the entry rule, which
    the caller places on whichever states may start the marker.
    """

    entry = chain_entry(builder, prefix, text, done, action)
    fallback_rules = list(fallback)

    for index in range(1, len(text)):
        state = builder.state(f"{prefix}_{index}")
        if index == len(text) - 1:
            builder.rule(state, literal(text[index]), done, action)
        else:
            builder.rule(state, literal(text[index]), builder.state(f"{prefix}_{index + 1}"))
        builder.extend(state, fallback_rules)

    return entry
