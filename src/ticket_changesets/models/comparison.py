"""Result models produced when diffing changesets."""

from typing import Optional

from pydantic import BaseModel


class RevisionSpan(BaseModel):
    """Revision window bounding a file's cumulative change."""

    from_revision: int
    to_revision: int

    model_config = {"frozen": True}


class DiffLoaded(BaseModel):
    """Answer to a diff request, tagged with the caller's request index."""

    index: int
    revision: int
    diff: str
    ok: bool = True
    error: Optional[str] = None


class FileComparison(BaseModel):
    """Both sides of a file comparison between two revisions."""

    path: str
    from_revision: int
    to_revision: int
    before: str
    after: str
    before_missing: bool = False
    title: str
