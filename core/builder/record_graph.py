"""State graph recognizing tagged records and flagged body phrases.

Layout of the graph, in scan order:

- header: open marker, optional whitespace, identifier open marker, optional
  identifier prefix, decimal digits, optional whitespace, identifier close
  marker. Any unexpected symbol returns to ``start``; the open marker's first
  character re-enters the open marker chain instead.
- header lines: skipped until a line holding only whitespace. The close marker
  ends the record here too, so a record without a body is still closed.
- body: ``body_delimited`` / ``body_token`` track word boundaries; phrases can
  only start on a boundary. A matched phrase followed by a delimiter flags the
  record and parks the scan in ``flagged`` until the close marker.
"""

from __future__ import annotations

from core.automaton.guards import ActionKind, always, delimiter, digit, literal, whitespace
from core.automaton.models import Automaton, TransitionRule
from core.builder.graph import AutomatonBuilder, add_marker_chain, chain_entry
from core.builder.phrases import PhraseTrie, add_phrase_states
from core.config.loader import load_config
from core.config.models import ScanConfig


def build_record_automaton(config: ScanConfig | None = None) -> Automaton:
    """Build the record scanning automaton for the given markers and phrases."""

    config = config or load_config()
    builder = AutomatonBuilder()

    start = builder.state("start")
    doc_open = builder.state("doc_open")
    docid_open = builder.state("docid_open")
    id_digits = builder.state("id_digits")
    id_trailing = builder.state("id_trailing")
    header_line = builder.state("header_line")
    header_break = builder.state("header_break")
    body_delimited = builder.state("body_delimited")
    body_token = builder.state("body_token")
    flagged = builder.state("flagged")

    # Header
    open_entry = chain_entry(
        builder, "open_doc", config.open_marker, doc_open, ActionKind.BEGIN_RECORD
    )
    resync = [open_entry, TransitionRule(guard=always(), target=start)]

    builder.extend(start, resync)
    add_marker_chain(
        builder, "open_doc", config.open_marker, doc_open, resync, ActionKind.BEGIN_RECORD
    )

    docid_entry = add_marker_chain(
        builder, "open_docid", config.id_open_marker, docid_open, resync
    )
    builder.rule(doc_open, whitespace(), doc_open)
    builder.extend(doc_open, [docid_entry, *resync])

    builder.rule(docid_open, whitespace(), docid_open)
    if config.id_prefix:
        id_expect_digit = builder.state("id_expect_digit")
        prefix_entry = add_marker_chain(
            builder, "id_prefix", config.id_prefix, id_expect_digit, resync
        )
        builder.extend(docid_open, [prefix_entry, *resync])
        builder.rule(id_expect_digit, digit(), id_digits, ActionKind.ACCUMULATE_DIGIT)
        builder.extend(id_expect_digit, resync)
    else:
        builder.rule(docid_open, digit(), id_digits, ActionKind.ACCUMULATE_DIGIT)
        builder.extend(docid_open, resync)

    close_docid_entry = add_marker_chain(
        builder, "close_docid", config.id_close_marker, header_line, resync
    )
    builder.rule(id_digits, digit(), id_digits, ActionKind.ACCUMULATE_DIGIT)
    builder.rule(id_digits, whitespace(), id_trailing)
    builder.extend(id_digits, [close_docid_entry, *resync])
    builder.rule(id_trailing, whitespace(), id_trailing)
    builder.extend(id_trailing, [close_docid_entry, *resync])

    # Header lines up to the first blank line; a close marker here ends the record
    header_close_entry = chain_entry(
        builder, "header_close_doc", config.close_marker, start, ActionKind.CLOSE_RECORD
    )
    header_rules = [
        header_close_entry,
        TransitionRule(guard=literal("\n"), target=header_break),
        TransitionRule(guard=always(), target=header_line),
    ]
    add_marker_chain(
        builder,
        "header_close_doc",
        config.close_marker,
        start,
        header_rules,
        ActionKind.CLOSE_RECORD,
    )
    builder.extend(header_line, header_rules)
    builder.rule(header_break, literal("\n"), body_delimited)
    builder.extend(
        header_break,
        [
            header_close_entry,
            TransitionRule(guard=whitespace(), target=header_break),
            TransitionRule(guard=always(), target=header_line),
        ],
    )

    # Body
    close_entry = chain_entry(
        builder, "close_doc", config.close_marker, start, ActionKind.CLOSE_RECORD
    )
    token_rules = [
        close_entry,
        TransitionRule(guard=delimiter(), target=body_delimited),
        TransitionRule(guard=always(), target=body_token),
    ]
    add_marker_chain(
        builder, "close_doc", config.close_marker, start, token_rules, ActionKind.CLOSE_RECORD
    )

    phrase_starts = add_phrase_states(
        builder,
        PhraseTrie.from_phrases(config.phrases),
        token_rules=token_rules,
        flagged=flagged,
    )
    builder.extend(body_delimited, [*phrase_starts, *token_rules])
    builder.extend(body_token, token_rules)

    # Flagged records ignore everything up to the close marker
    flagged_rules = [
        chain_entry(
            builder, "flagged_close_doc", config.close_marker, start, ActionKind.CLOSE_RECORD
        ),
        TransitionRule(guard=always(), target=flagged),
    ]
    add_marker_chain(
        builder,
        "flagged_close_doc",
        config.close_marker,
        start,
        flagged_rules,
        ActionKind.CLOSE_RECORD,
    )
    builder.extend(flagged, flagged_rules)

    return builder.build(start)
