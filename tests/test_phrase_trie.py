from __future__ import annotations

import pytest

from core.automaton.guards import ActionKind, GuardKind, delimiter, literal
from core.builder.phrases import PhraseTrie, phrase_state_name
from core.builder.record_graph import build_record_automaton


def test_shared_prefixes_are_merged() -> None:
    trie = PhraseTrie.from_phrases(["win", "winners", "winnings"])

    assert list(trie.root.children) == ["w"]
    assert [node.prefix for node in trie.nodes()] == [
        "w",
        "wi",
        "win",
        "winn",
        "winne",
        "winner",
        "winners",
        "winni",
        "winnin",
        "winning",
        "winnings",
    ]
    assert trie.phrases() == ["win", "winners", "winnings"]


def test_free_family_fans_out_after_space() -> None:
    trie = PhraseTrie.from_phrases(
        ["free access", "free software", "free trials", "free vacation"]
    )
    node = trie.root
    for char in "free ":
        node = node.children[char]

    assert node.prefix == "free "
    assert node.at_boundary
    assert not node.terminal
    assert list(node.children) == ["a", "s", "t", "v"]


def test_empty_phrase_is_rejected() -> None:
    with pytest.raises(ValueError, match="must not be empty"):
        PhraseTrie.from_phrases(["win", ""])


def test_phrase_state_name_replaces_spaces() -> None:
    assert phrase_state_name("free s") == "phrase_free_s"
    assert phrase_state_name("w") == "phrase_w"


def test_completed_phrase_checks_delimiter_before_extending() -> None:
    automaton = build_record_automaton()
    rules = automaton.state("phrase_win").rules

    assert rules[0].guard == delimiter()
    assert rules[0].action is ActionKind.FLAG_RECORD
    assert rules[0].target.name == "flagged"
    assert rules[1].guard == literal("n")
    assert rules[1].target.name == "phrase_winn"
    assert rules[-1].guard.kind is GuardKind.ALWAYS
    assert rules[-1].target.name == "body_token"


def test_incomplete_prefix_never_flags() -> None:
    automaton = build_record_automaton()

    for name in ("phrase_w", "phrase_winning", "phrase_free_"):
        actions = [rule.action for rule in automaton.state(name).rules]
        assert ActionKind.FLAG_RECORD not in actions, name


def test_boundary_node_can_start_new_phrase() -> None:
    automaton = build_record_automaton()
    rules = automaton.state("phrase_free_").rules

    targets = {rule.guard.comparand: rule.target.name for rule in rules if rule.guard.comparand}
    assert targets["a"] == "phrase_free_a"
    assert targets["w"] == "phrase_w"
    assert targets["f"] == "phrase_f"
    assert targets["<"] == "close_doc_1"
