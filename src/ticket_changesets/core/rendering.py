"""Text rendering for changesets and diffs."""

import difflib
from typing import List, Sequence

from ticket_changesets.core.viewer import sort_newest_first
from ticket_changesets.models.changeset import Changeset, ChangeType
from ticket_changesets.models.comparison import FileComparison

CHANGE_TYPE_STYLES = {
    ChangeType.ADDED: "green",
    ChangeType.DELETED: "red",
    ChangeType.MODIFIED: "yellow",
    ChangeType.REPLACED: "magenta",
}

DIFF_LINE_STYLES = {
    "header": "bold",
    "add": "green",
    "remove": "red",
    "hunk": "cyan",
    "context": "",
}


def change_type_style(change_type: ChangeType) -> str:
    return CHANGE_TYPE_STYLES.get(change_type, "white")


def classify_diff_line(line: str) -> str:
    """Classify a diff line by its prefix for highlighting.

    Only the leading characters are inspected; diff bodies are never parsed.
    """
    if line.startswith(("+++", "---", "Index: ", "=" * 10)):
        return "header"
    if line.startswith("@@"):
        return "hunk"
    if line.startswith("+"):
        return "add"
    if line.startswith("-"):
        return "remove"
    return "context"


def render_summary(ticket_id: str, changesets: Sequence[Changeset]) -> str:
    """Markdown summary of every changeset for a ticket, newest first."""
    parts = [
        f"# Changesets for Ticket #{ticket_id}\n\n",
        f"Found {len(changesets)} changesets associated with this ticket.\n\n",
    ]
    for changeset in sort_newest_first(changesets):
        files = "\n".join(str(file) for file in changeset.files)
        parts.append(f"## Revision {changeset.revision}\n\n")
        parts.append(f"**Author:** {changeset.author}\n\n")
        parts.append(f"**Date:** {changeset.date}\n\n")
        parts.append(f"**Message:**\n```\n{changeset.message}\n```\n\n")
        parts.append(f"**Changed Files:**\n```\n{files}\n```\n\n")
        parts.append("---\n\n")
    return "".join(parts)


def comparison_diff_lines(comparison: FileComparison) -> List[str]:
    """Unified diff lines between the two sides of a comparison."""
    from_label = f"{comparison.path}\t(r{comparison.from_revision})"
    if comparison.before_missing:
        from_label += " (nonexistent)"
    return list(
        difflib.unified_diff(
            comparison.before.splitlines(),
            comparison.after.splitlines(),
            fromfile=from_label,
            tofile=f"{comparison.path}\t(r{comparison.to_revision})",
            lineterm="",
        )
    )
