"""Work out which revisions bound a file's cumulative change for a ticket."""

import logging
from typing import Iterable, List, Optional

from ticket_changesets.core.errors import NoMatchingRevisions
from ticket_changesets.core.matching import path_matches
from ticket_changesets.models.changeset import Changeset
from ticket_changesets.models.comparison import RevisionSpan


def revisions_touching(target_path: str, changesets: Iterable[Changeset]) -> List[int]:
    """Revisions, oldest first, whose file list mentions ``target_path``."""
    return sorted(
        changeset.revision
        for changeset in changesets
        if any(path_matches(path, target_path) for path in changeset.paths)
    )


def plan_unified_diff(
    target_path: str,
    changesets: Iterable[Changeset],
    logger: Optional[logging.Logger] = None,
) -> RevisionSpan:
    """Compute the revision span for a unified diff of one file.

    The span starts one revision before the first change to the file, so the
    "before" side may predate the file entirely. Callers treat a failed
    lookup there as an empty file.

    Raises:
        NoMatchingRevisions: If no changeset touches the file
    """
    logger = logger or logging.getLogger(__name__)
    revisions = revisions_touching(target_path, changesets)
    if not revisions:
        raise NoMatchingRevisions(target_path)

    span = RevisionSpan(from_revision=revisions[0] - 1, to_revision=revisions[-1])
    logger.debug(
        "Unified diff for %s spans r%d to r%d (%d revisions)",
        target_path,
        span.from_revision,
        span.to_revision,
        len(revisions),
    )
    return span


def collect_unique_files(changesets: Iterable[Changeset]) -> List[str]:
    """Distinct paths across the changesets in first-seen order, leading slash removed."""
    unique_files: List[str] = []
    seen = set()
    for changeset in changesets:
        for path in changeset.paths:
            stripped = path[1:] if path.startswith("/") else path
            if stripped not in seen:
                seen.add(stripped)
                unique_files.append(stripped)
    return unique_files
