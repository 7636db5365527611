"""Parser for verbose ``svn log`` output.

The log is read line by line through a small state machine::

    IDLE --header--> HEADER_PARSED --"Changed paths:"--> IN_CHANGED_PATHS
      |                   |                                   |
      +------blank--------+-------------blank-----------------+--> IN_MESSAGE

A separator line flushes the buffered revision from any state. ``step`` is a
pure function so the transitions can be exercised one line at a time;
``LogParser`` drives it and logs what was dropped.
"""

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from ticket_changesets.core.errors import ParseSkipped
from ticket_changesets.core.matching import references_ticket
from ticket_changesets.models.changeset import Changeset, ChangeType, FileChange

SEPARATOR = "-" * 72
CHANGED_PATHS_MARKER = "Changed paths:"

HEADER_START_RE = re.compile(r"^r\d")
HEADER_RE = re.compile(
    r"^r(?P<revision>\d+)\s+\|\s+(?P<author>[^|]+?)\s+\|\s+(?P<date>[^|]+?)"
    r"(?:\s+\|\s+\d+\s+lines?)?\s*$"
)
CHANGED_PATH_RE = re.compile(r"^ {3,}(?P<status>[AMDR])\s+(?P<path>\S.*?)\s*$")


class ParserMode(str, Enum):
    """States of the log parser."""

    IDLE = "idle"
    HEADER_PARSED = "header_parsed"
    IN_CHANGED_PATHS = "in_changed_paths"
    IN_MESSAGE = "in_message"


@dataclass(frozen=True)
class ParserState:
    """Buffer for the revision currently being read."""

    mode: ParserMode = ParserMode.IDLE
    revision: Optional[int] = None
    author: Optional[str] = None
    date: Optional[str] = None
    files: Tuple[FileChange, ...] = ()
    message_lines: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return (
            self.revision is None
            and not self.files
            and not any(self.message_lines)
        )


class Transition(NamedTuple):
    """Outcome of feeding one line to the parser."""

    state: ParserState
    emitted: Optional[Changeset] = None
    skipped: Optional[ParseSkipped] = None


def is_separator(line: str) -> bool:
    return line.startswith(SEPARATOR)


def _message_from(lines: Tuple[str, ...]) -> str:
    start, end = 0, len(lines)
    while start < end and not lines[start]:
        start += 1
    while end > start and not lines[end - 1]:
        end -= 1
    return "\n".join(lines[start:end])


def flush(state: ParserState, ticket_id: str) -> Transition:
    """Close the buffered revision and start over from IDLE.

    The revision is emitted only if it had a header, a non-empty message and
    that message references the ticket.
    """
    fresh = ParserState()
    if state.is_empty:
        return Transition(fresh)
    if state.revision is None:
        return Transition(
            fresh, skipped=ParseSkipped("segment has no revision header")
        )

    message = _message_from(state.message_lines)
    if not message:
        return Transition(
            fresh, skipped=ParseSkipped(f"r{state.revision} has no message")
        )
    if not references_ticket(message, ticket_id):
        return Transition(
            fresh,
            skipped=ParseSkipped(
                f"r{state.revision} does not reference #{ticket_id}"
            ),
        )

    changeset = Changeset(
        revision=state.revision,
        author=state.author,
        date=state.date,
        message=message,
        files=list(state.files),
    )
    return Transition(fresh, emitted=changeset)


def _parse_header(state: ParserState, line: str) -> Transition:
    match = HEADER_RE.match(line)
    if not match:
        return Transition(
            state, skipped=ParseSkipped(f"malformed revision header: {line!r}")
        )

    revision = int(match.group("revision"))
    author = match.group("author").strip()
    # Revisions start at 1 and every commit has an author
    if revision < 1 or not author:
        return Transition(
            state, skipped=ParseSkipped(f"malformed revision header: {line!r}")
        )
    return Transition(
        replace(
            state,
            mode=ParserMode.HEADER_PARSED,
            revision=revision,
            author=author,
            date=match.group("date").strip(),
            files=(),
        )
    )


def step(state: ParserState, line: str, ticket_id: str) -> Transition:
    """Advance the parser by one line."""
    if is_separator(line):
        return flush(state, ticket_id)

    if state.mode is ParserMode.IN_MESSAGE:
        return Transition(
            replace(state, message_lines=state.message_lines + (line.strip(),))
        )

    if not line.strip():
        return Transition(replace(state, mode=ParserMode.IN_MESSAGE))

    if state.mode is ParserMode.IDLE and HEADER_START_RE.match(line):
        return _parse_header(state, line)

    if line == CHANGED_PATHS_MARKER:
        return Transition(replace(state, mode=ParserMode.IN_CHANGED_PATHS))

    if state.mode is ParserMode.IN_CHANGED_PATHS:
        match = CHANGED_PATH_RE.match(line)
        if match:
            change = FileChange(
                change_type=ChangeType(match.group("status")),
                path=match.group("path"),
            )
            return Transition(replace(state, files=state.files + (change,)))

    return Transition(state)


class LogParser:
    """Turns verbose svn log text into changesets that cite a ticket."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def parse(self, log_text: str, ticket_id: str) -> List[Changeset]:
        """Parse ``svn log -v`` output, keeping revisions that cite ``#ticket_id``.

        Args:
            log_text: Raw stdout of the log query
            ticket_id: Ticket number without the leading hash

        Returns:
            Changesets in log order
        """
        changesets: List[Changeset] = []
        state = ParserState()

        for line in log_text.splitlines():
            state = self._record(step(state, line, ticket_id), changesets)

        # Output may end without a trailing separator
        self._record(flush(state, ticket_id), changesets)

        self.logger.debug(
            "Parsed %d changesets referencing #%s", len(changesets), ticket_id
        )
        return changesets

    def _record(
        self, transition: Transition, changesets: List[Changeset]
    ) -> ParserState:
        if transition.emitted is not None:
            changesets.append(transition.emitted)
        if transition.skipped:
            self.logger.debug("Skipped: %s", transition.skipped)
        return transition.state


def parse_svn_log(
    log_text: str, ticket_id: str, logger: Optional[logging.Logger] = None
) -> List[Changeset]:
    """Parse verbose svn log output for changesets citing a ticket."""
    return LogParser(logger).parse(log_text, ticket_id)
