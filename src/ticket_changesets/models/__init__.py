"""Data models for Ticket Changesets."""

from .changeset import Changeset, ChangeType, FileChange
from .comparison import DiffLoaded, FileComparison, RevisionSpan

__all__ = [
    "Changeset",
    "ChangeType",
    "FileChange",
    "RevisionSpan",
    "DiffLoaded",
    "FileComparison",
]
