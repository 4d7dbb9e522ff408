from __future__ import annotations

import pytest

from core.automaton.engine import step
from core.automaton.guards import ActionKind, always, literal
from core.automaton.models import ParseContext, TransitionRule
from core.builder.graph import AutomatonBuilder, add_marker_chain, chain_entry
from core.utils.errors import AutomatonDefinitionError


def test_state_is_get_or_create() -> None:
    builder = AutomatonBuilder()

    assert builder.state("a") is builder.state("a")


def test_new_state_rejects_duplicates() -> None:
    builder = AutomatonBuilder()
    builder.state("a")

    with pytest.raises(ValueError, match="Duplicate state name"):
        builder.new_state("a")


def test_build_rejects_reachable_state_without_catch_all() -> None:
    builder = AutomatonBuilder()
    start = builder.state("start")
    stuck = builder.state("stuck")
    builder.rule(start, literal("x"), stuck)
    builder.rule(start, always(), start)
    builder.rule(stuck, literal("y"), start)

    with pytest.raises(AutomatonDefinitionError) as exc_info:
        builder.build(start)

    assert list(exc_info.value.gaps) == ["stuck"]
    assert "y" not in exc_info.value.gaps["stuck"]


def test_build_ignores_unreachable_incomplete_state() -> None:
    builder = AutomatonBuilder()
    start = builder.state("start")
    builder.state("island")
    builder.rule(start, always(), start)

    automaton = builder.build(start)

    assert automaton.start is start
    assert "island" in automaton.states


def test_builder_is_closed_after_build() -> None:
    builder = AutomatonBuilder()
    start = builder.state("start")
    builder.rule(start, always(), start)
    assert not start.sealed
    builder.build(start)

    assert start.sealed
    with pytest.raises(RuntimeError, match="already built"):
        builder.rule(start, literal("a"), start)
    with pytest.raises(RuntimeError, match="already built"):
        builder.state("late")
    with pytest.raises(RuntimeError, match="sealed"):
        start.add_rule(TransitionRule(guard=always(), target=start))


def test_start_state_must_belong_to_builder() -> None:
    other = AutomatonBuilder().state("start")
    builder = AutomatonBuilder()
    builder.rule(builder.state("start"), always(), builder.state("start"))

    with pytest.raises(AutomatonDefinitionError, match="not owned"):
        builder.build(other)


def test_marker_chain_recognizes_text_and_runs_action_on_last_char() -> None:
    builder = AutomatonBuilder()
    start = builder.state("start")
    done = builder.state("done")
    fallback = [TransitionRule(guard=always(), target=start)]
    entry = add_marker_chain(builder, "tag", "<AB>", done, fallback, ActionKind.CLOSE_RECORD)
    builder.extend(start, [entry, *fallback])
    builder.rule(done, always(), start)
    automaton = builder.build(start)

    assert entry.target.name == "tag_1"
    assert [name for name in automaton.states if name.startswith("tag_")] == [
        "tag_1",
        "tag_2",
        "tag_3",
    ]

    context = ParseContext()
    state = automaton.start
    visited = []
    for symbol in "<AB>":
        state = step(state, symbol, context)
        visited.append(state.name)

    assert visited == ["tag_1", "tag_2", "tag_3", "done"]
    assert context.records_closed == 1


def test_marker_chain_falls_back_on_mismatch() -> None:
    builder = AutomatonBuilder()
    start = builder.state("start")
    done = builder.state("done")
    fallback = [TransitionRule(guard=always(), target=start)]
    entry = add_marker_chain(builder, "tag", "<AB>", done, fallback)
    builder.extend(start, [entry, *fallback])
    builder.rule(done, always(), start)
    automaton = builder.build(start)

    state = automaton.start
    for symbol in "<AX":
        state = step(state, symbol, ParseContext())

    assert state is start


def test_single_character_marker_enters_done_directly() -> None:
    builder = AutomatonBuilder()
    done = builder.state("done")

    entry = chain_entry(builder, "tag", "|", done, ActionKind.BEGIN_RECORD)

    assert entry.target is done
    assert entry.action is ActionKind.BEGIN_RECORD
    assert entry.guard == literal("|")


def test_empty_marker_is_rejected() -> None:
    builder = AutomatonBuilder()

    with pytest.raises(ValueError, match="must not be empty"):
        chain_entry(builder, "tag", "", builder.state("done"))
