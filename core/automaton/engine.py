"""Single-step execution and static checks over automaton rule tables."""

from __future__ import annotations

from collections import deque

from core.automaton.guards import ALPHABET, apply_action
from core.automaton.models import Automaton, EndOfInput, ParseContext, State, TransitionRule
from core.utils.errors import UnhandledSymbolError


def select_rule(state: State, symbol: str) -> TransitionRule | None:
    """Return the first rule in declaration order whose guard accepts symbol."""

    for rule in state.rules:
        if rule.guard.accepts(symbol):
            return rule
    return None


def step(state: State, symbol: str | EndOfInput, context: ParseContext) -> State:
    """Take one transition from state on symbol.

    The rule's action runs before the target is returned.

    Raises:
        UnhandledSymbolError: If no rule accepts the symbol.
        ValueError: If the end-of-input sentinel is submitted.
    """

    if isinstance(symbol, EndOfInput):
        raise ValueError("End of input is not a transition symbol")

    rule = select_rule(state, symbol)
    if rule is None:
        raise UnhandledSymbolError(state.name, symbol)
    if rule.action is not None:
        apply_action(rule.action, symbol, context)
    return rule.target


def reachable_states(automaton: Automaton) -> list[State]:
    """Return states reachable from start, breadth-first in rule order."""

    seen: set[int] = {id(automaton.start)}
    ordered: list[State] = []
    queue: deque[State] = deque([automaton.start])
    while queue:
        state = queue.popleft()
        ordered.append(state)
        for rule in state.rules:
            if id(rule.target) not in seen:
                seen.add(id(rule.target))
                queue.append(rule.target)
    return ordered


def find_coverage_gaps(automaton: Automaton) -> dict[str, list[str]]:
    """Map each reachable state lacking a rule for some symbol to those symbols."""

    gaps: dict[str, list[str]] = {}
    for state in reachable_states(automaton):
        missing = [symbol for symbol in ALPHABET if select_rule(state, symbol) is None]
        if missing:
            gaps[state.name] = missing
    return gaps
