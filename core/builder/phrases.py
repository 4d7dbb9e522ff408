"""Shared-prefix phrase matcher states built from a declarative phrase list."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from core.automaton.guards import DELIMITER_CHARS, ActionKind, delimiter, literal
from core.automaton.models import State, TransitionRule
from core.builder.graph import AutomatonBuilder


@dataclass
class PhraseNode:
    """Trie node for the phrase prefix consumed so far."""

    prefix: str
    children: dict[str, PhraseNode] = field(default_factory=dict)
    terminal: bool = False

    @property
    def at_boundary(self) -> bool:
        return bool(self.prefix) and self.prefix[-1] in DELIMITER_CHARS


class PhraseTrie:
    """Prefix tree merging phrases that share leading characters."""

    def __init__(self) -> None:
        self.root = PhraseNode(prefix="")

    @classmethod
    def from_phrases(cls, phrases: Iterable[str]) -> PhraseTrie:
        trie = cls()
        for phrase in phrases:
            trie.insert(phrase)
        return trie

    def insert(self, phrase: str) -> None:
        if not phrase:
            raise ValueError("Phrase must not be empty")
        node = self.root
        for char in phrase:
            child = node.children.get(char)
            if child is None:
                child = PhraseNode(prefix=node.prefix + char)
                node.children[char] = child
            node = child
        node.terminal = True

    def nodes(self) -> Iterator[PhraseNode]:
        """Yield non-root nodes depth-first in insertion order."""

        stack = list(reversed(self.root.children.values()))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children.values()))

    def phrases(self) -> list[str]:
        return [node.prefix for node in self.nodes() if node.terminal]


def phrase_state_name(prefix: str) -> str:
    return "phrase_" + prefix.replace(" ", "_")


def add_phrase_states(
    builder: AutomatonBuilder,
    trie: PhraseTrie,
    *,
    token_rules: list[TransitionRule],
    flagged: State,
) -> list[TransitionRule]:
    """Declare one state per trie node and return the phrase-start rules.

    Per node the rule order is: a completed phrase followed by a delimiter
    flags the record; otherwise the next character of any phrase sharing the
    prefix; otherwise the character is re-read as ordinary body text. Nodes
    whose prefix ends on a delimiter sit on a boundary and may also start a
    new phrase.
    """

    states = {
        node.prefix: builder.new_state(phrase_state_name(node.prefix)) for node in trie.nodes()
    }
    start_rules = [
        TransitionRule(guard=literal(char), target=states[child.prefix])
        for char, child in trie.root.children.items()
    ]

    for node in trie.nodes():
        state = states[node.prefix]
        if node.terminal:
            builder.rule(state, delimiter(), flagged, ActionKind.FLAG_RECORD)
        for char, child in node.children.items():
            builder.rule(state, literal(char), states[child.prefix])
        if node.at_boundary:
            builder.extend(state, start_rules)
        builder.extend(state, token_rules)

    return start_rules
