"""Tests for the svn log parser."""

import logging

import pytest

from ticket_changesets.core.errors import ParseSkipped
from ticket_changesets.core.log_parser import (
    LogParser,
    ParserMode,
    ParserState,
    flush,
    parse_svn_log,
    step,
)
from ticket_changesets.models.changeset import ChangeType

SEPARATOR = "-" * 72
HEADER = "r1 | alice | 2024-01-01 10:00:00 +0000 (Mon, 01 Jan 2024) | 1 line"


def make_log(*segments: str) -> str:
    """Join segments with separator lines the way svn prints them."""
    lines = [SEPARATOR]
    for segment in segments:
        lines.append(segment.strip("\n"))
        lines.append(SEPARATOR)
    return "\n".join(lines) + "\n"


SINGLE_SEGMENT = f"""{HEADER}
Changed paths:
   A /trunk/a.txt
   M /trunk/b.txt

fixes #100
"""


def test_single_segment_round_trip():
    """A well-formed segment citing the ticket yields one changeset."""
    changesets = parse_svn_log(make_log(SINGLE_SEGMENT), "100")

    assert len(changesets) == 1
    changeset = changesets[0]
    assert changeset.revision == 1
    assert changeset.author == "alice"
    assert changeset.date == "2024-01-01 10:00:00 +0000 (Mon, 01 Jan 2024)"
    assert changeset.message == "fixes #100"
    assert changeset.paths == ["/trunk/a.txt", "/trunk/b.txt"]
    assert [f.change_type for f in changeset.files] == [
        ChangeType.ADDED,
        ChangeType.MODIFIED,
    ]


def test_other_ticket_is_dropped():
    """A message citing a different ticket is filtered out."""
    log = make_log(SINGLE_SEGMENT.replace("#100", "#200"))

    assert parse_svn_log(log, "100") == []


def test_multiple_segments_keep_log_order(ticket_log):
    """Only matching revisions are kept, in the order they were logged."""
    changesets = parse_svn_log(ticket_log, "100")

    assert [c.revision for c in changesets] == [20, 15]
    assert changesets[0].message == "Fix login redirect #100\nFollow-up from review"
    assert changesets[1].paths == ["/trunk/src/app.ts"]


def test_every_changeset_references_ticket(ticket_log):
    for ticket_id in ("100", "200", "300"):
        for changeset in parse_svn_log(ticket_log, ticket_id):
            assert f"#{ticket_id}" in changeset.message
            assert changeset.revision > 0


def test_parsing_is_idempotent(ticket_log):
    assert parse_svn_log(ticket_log, "100") == parse_svn_log(ticket_log, "100")


def test_last_segment_without_trailing_separator():
    """Output that stops without a final separator still flushes."""
    log = SEPARATOR + "\n" + SINGLE_SEGMENT

    changesets = parse_svn_log(log, "100")

    assert [c.revision for c in changesets] == [1]


def test_malformed_header_drops_segment():
    """A header that does not parse leaves the segment without a revision."""
    segment = SINGLE_SEGMENT.replace(HEADER, "r1 alice 2024-01-01")

    assert parse_svn_log(make_log(segment), "100") == []


def test_malformed_header_does_not_affect_neighbours():
    broken = SINGLE_SEGMENT.replace(HEADER, "r1 alice 2024-01-01")
    good = SINGLE_SEGMENT.replace("r1 |", "r2 |")

    changesets = parse_svn_log(make_log(broken, good), "100")

    assert [c.revision for c in changesets] == [2]


@pytest.mark.parametrize(
    "header",
    [
        "r5 |   | 2024-01-01 10:00:00 +0000 | 1 line",
        "r0 | alice | 2024-01-01 10:00:00 +0000 | 1 line",
    ],
)
def test_header_without_author_or_revision_is_skipped(header):
    bad = SINGLE_SEGMENT.replace(HEADER, header)
    good = SINGLE_SEGMENT.replace("r1 |", "r2 |")

    assert parse_svn_log(make_log(bad), "100") == []
    assert [c.revision for c in parse_svn_log(make_log(bad, good), "100")] == [2]


def test_segment_without_header_is_dropped():
    segment = "Changed paths:\n   M /trunk/a.txt\n\nfixes #100\n"

    assert parse_svn_log(make_log(segment), "100") == []


def test_segment_without_message_is_dropped():
    segment = f"{HEADER}\nChanged paths:\n   M /trunk/a.txt\n"

    assert parse_svn_log(make_log(segment), "100") == []


def test_log_without_changed_paths_has_no_files():
    """Non-verbose log output parses with an empty file list."""
    segment = f"{HEADER}\n\nfixes #100\n"

    changesets = parse_svn_log(make_log(segment), "100")

    assert len(changesets) == 1
    assert changesets[0].files == []


def test_author_with_punctuation():
    segment = SINGLE_SEGMENT.replace("alice", "john.doe-ext")

    changesets = parse_svn_log(make_log(segment), "100")

    assert changesets[0].author == "john.doe-ext"


def test_header_without_line_count():
    segment = SINGLE_SEGMENT.replace(" | 1 line", "")

    changesets = parse_svn_log(make_log(segment), "100")

    assert changesets[0].date == "2024-01-01 10:00:00 +0000 (Mon, 01 Jan 2024)"


def test_message_lines_are_trimmed_and_paragraphs_kept():
    segment = f"""{HEADER}
Changed paths:
   M /trunk/a.txt

  Summary line #100

   A /trunk/not-a-file.txt
r99 was reverted first
"""
    changesets = parse_svn_log(make_log(segment), "100")

    assert changesets[0].message == (
        "Summary line #100\n\nA /trunk/not-a-file.txt\nr99 was reverted first"
    )
    assert changesets[0].paths == ["/trunk/a.txt"]


def test_replaced_paths_are_kept():
    segment = SINGLE_SEGMENT.replace("   M /trunk/b.txt", "   R /trunk/b.txt")

    changesets = parse_svn_log(make_log(segment), "100")

    assert changesets[0].files[1].change_type == ChangeType.REPLACED


def test_copy_source_stays_in_path():
    segment = SINGLE_SEGMENT.replace(
        "   A /trunk/a.txt", "   A /trunk/a.txt (from /trunk/old.txt:7)"
    )

    changesets = parse_svn_log(make_log(segment), "100")

    assert changesets[0].paths[0] == "/trunk/a.txt (from /trunk/old.txt:7)"


def test_windows_line_endings():
    log = make_log(SINGLE_SEGMENT).replace("\n", "\r\n")

    changesets = parse_svn_log(log, "100")

    assert changesets[0].paths == ["/trunk/a.txt", "/trunk/b.txt"]
    assert changesets[0].message == "fixes #100"


def test_ticket_match_is_substring():
    """Known limitation: #1000 is accepted when searching for ticket 100."""
    log = make_log(SINGLE_SEGMENT.replace("#100", "#1000"))

    assert len(parse_svn_log(log, "100")) == 1


def test_empty_input():
    assert parse_svn_log("", "100") == []


def test_skipped_segments_are_logged(caplog):
    logger = logging.getLogger("tests.log_parser")
    log = make_log(
        SINGLE_SEGMENT.replace(HEADER, "r1 alice 2024-01-01"),
        SINGLE_SEGMENT.replace("#100", "#200"),
    )

    with caplog.at_level(logging.DEBUG, logger="tests.log_parser"):
        LogParser(logger).parse(log, "100")

    assert "malformed revision header" in caplog.text
    assert "r1 does not reference #100" in caplog.text


class TestStep:
    """Transitions of the parser state machine."""

    def test_header_moves_to_header_parsed(self):
        transition = step(ParserState(), HEADER, "100")

        assert transition.state.mode is ParserMode.HEADER_PARSED
        assert transition.state.revision == 1
        assert transition.emitted is None

    def test_malformed_header_reports_skip(self):
        transition = step(ParserState(), "r1 nonsense", "100")

        assert transition.state == ParserState()
        assert isinstance(transition.skipped, ParseSkipped)

    @pytest.mark.parametrize("header", ["r0 | alice | 2024-01-01", "r7 |  | 2024-01-01"])
    def test_impossible_header_reports_skip(self, header):
        transition = step(ParserState(), header, "100")

        assert transition.state == ParserState()
        assert isinstance(transition.skipped, ParseSkipped)

    def test_changed_paths_marker(self):
        state = step(ParserState(), HEADER, "100").state

        transition = step(state, "Changed paths:", "100")

        assert transition.state.mode is ParserMode.IN_CHANGED_PATHS

    def test_blank_line_starts_message(self):
        state = ParserState(mode=ParserMode.IN_CHANGED_PATHS, revision=1)

        transition = step(state, "", "100")

        assert transition.state.mode is ParserMode.IN_MESSAGE

    def test_indented_line_outside_changed_paths_is_ignored(self):
        state = step(ParserState(), HEADER, "100").state

        transition = step(state, "   M /trunk/a.txt", "100")

        assert transition.state.files == ()

    def test_unrecognised_path_line_is_ignored(self):
        state = ParserState(mode=ParserMode.IN_CHANGED_PATHS, revision=1)

        transition = step(state, "   ? /trunk/a.txt", "100")

        assert transition.state == state

    def test_separator_flushes(self):
        state = ParserState()
        for line in (HEADER, "Changed paths:", "   M /trunk/a.txt", "", "fixes #100"):
            state = step(state, line, "100").state

        transition = step(state, SEPARATOR, "100")

        assert transition.emitted is not None
        assert transition.emitted.revision == 1
        assert transition.state == ParserState()

    def test_step_does_not_mutate_state(self):
        state = ParserState(mode=ParserMode.IN_MESSAGE, revision=1)

        step(state, "fixes #100", "100")

        assert state.message_lines == ()


@pytest.mark.parametrize(
    "state",
    [
        ParserState(),
        ParserState(mode=ParserMode.IN_MESSAGE, message_lines=("", "")),
    ],
)
def test_flushing_empty_buffer_is_silent(state):
    transition = flush(state, "100")

    assert transition.emitted is None
    assert transition.skipped is None
