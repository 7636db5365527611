"""Orchestrates searching, parsing and diffing the changesets of a ticket."""

import logging
import posixpath
import re
from typing import List, Optional, Sequence

from ticket_changesets.core.changed_files import extract_changed_files
from ticket_changesets.core.errors import (
    ContentRetrievalFailure,
    ExternalToolFailure,
    InvalidTicketId,
)
from ticket_changesets.core.log_parser import LogParser
from ticket_changesets.core.paths import resolve_path
from ticket_changesets.core.svn_client import SvnClient
from ticket_changesets.core.unified_diff import plan_unified_diff
from ticket_changesets.models.changeset import Changeset
from ticket_changesets.models.comparison import DiffLoaded, FileComparison

TICKET_ID_RE = re.compile(r"^\d+$")


def validate_ticket_id(ticket_id: str) -> str:
    """Return the ticket ID stripped of whitespace and a leading ``#``."""
    cleaned = ticket_id.strip().lstrip("#")
    if not TICKET_ID_RE.match(cleaned):
        raise InvalidTicketId(ticket_id)
    return cleaned


def sort_newest_first(changesets: Sequence[Changeset]) -> List[Changeset]:
    return sorted(changesets, key=lambda changeset: changeset.revision, reverse=True)


class ChangesetViewer:
    """Ticket-centric view over an svn working copy."""

    def __init__(self, client: SvnClient, logger: Optional[logging.Logger] = None):
        self.client = client
        self.logger = logger or logging.getLogger(__name__)
        self.parser = LogParser(self.logger)

    @property
    def working_dir(self) -> str:
        return str(self.client.working_dir)

    def find_changesets(self, ticket_id: str) -> List[Changeset]:
        """Changesets whose message cites the ticket, newest first."""
        ticket_id = validate_ticket_id(ticket_id)
        self.logger.info("Searching for commits containing #%s", ticket_id)
        log_output = self.client.search_log(ticket_id)
        changesets = self.parser.parse(log_output, ticket_id)
        self.logger.info(
            "Found %d changesets for ticket #%s", len(changesets), ticket_id
        )
        return sort_newest_first(changesets)

    def load_diff(self, revision: int, index: int) -> DiffLoaded:
        """Fetch the diff of one revision.

        Requests are independent and answered under the caller's ``index``.
        Tool failures come back as a failed ``DiffLoaded`` instead of raising.
        """
        self.logger.debug("Loading diff for revision %d", revision)
        try:
            diff = self.client.revision_diff(revision)
        except ExternalToolFailure as e:
            self.logger.warning("Error loading diff for r%d: %s", revision, e)
            return DiffLoaded(
                index=index,
                revision=revision,
                diff=f"Error loading diff: {e}",
                ok=False,
                error=str(e),
            )
        return DiffLoaded(index=index, revision=revision, diff=diff)

    def changed_files(self, revision: int) -> List[str]:
        """Paths touched by one revision, as listed in its verbose log."""
        log_output = self.client.revision_log(revision)
        files = extract_changed_files(log_output, self.logger)
        self.logger.debug(
            "Found %d changed files in revision %d", len(files), revision
        )
        return files

    def compare_revision(self, revision: int, file_path: str) -> FileComparison:
        """Compare a file before and after one revision."""
        return self._compare(file_path, revision - 1, revision)

    def compare_unified(
        self, changesets: Sequence[Changeset], file_path: str
    ) -> FileComparison:
        """Compare a file across every revision of the ticket that touched it.

        Raises:
            NoMatchingRevisions: If no changeset touches the file
        """
        span = plan_unified_diff(file_path, changesets, self.logger)
        return self._compare(
            file_path, span.from_revision, span.to_revision, label="Unified Diff "
        )

    def _compare(
        self, file_path: str, from_revision: int, to_revision: int, label: str = ""
    ) -> FileComparison:
        path = resolve_path(file_path, self.working_dir, self.logger)

        before_missing = False
        try:
            before = self.client.cat(path, from_revision)
        except ContentRetrievalFailure as e:
            # Usually a file added within the window
            self.logger.info(
                "r%d of %s not available, comparing against an empty file: %s",
                from_revision,
                path,
                e,
            )
            before = ""
            before_missing = True

        after = self.client.cat(path, to_revision)

        return FileComparison(
            path=path,
            from_revision=from_revision,
            to_revision=to_revision,
            before=before,
            after=after,
            before_missing=before_missing,
            title=(
                f"{posixpath.basename(path)} "
                f"({label}r{from_revision} → r{to_revision})"
            ),
        )
