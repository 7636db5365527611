"""Changeset model for revisions parsed from svn log output."""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class ChangeType(str, Enum):
    """Status letter reported for a path in a changed-paths block."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    REPLACED = "R"


class FileChange(BaseModel):
    """A single path touched by a changeset."""

    change_type: ChangeType
    path: str  # Repository-absolute, exactly as logged

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.change_type.value} {self.path}"


class Changeset(BaseModel):
    """Represents one committed revision referencing a ticket."""

    revision: int = Field(gt=0)
    author: str = Field(min_length=1)
    date: str
    message: str
    files: List[FileChange] = []

    model_config = {"frozen": True}

    @property
    def paths(self) -> List[str]:
        """Logged paths of every file in this changeset, in log order."""
        return [file.path for file in self.files]
