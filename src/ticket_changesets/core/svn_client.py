"""Thin wrapper around the svn command line client."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ticket_changesets.core.errors import (
    ContentRetrievalFailure,
    ExternalToolFailure,
    NotAWorkingCopy,
)
from ticket_changesets.core.matching import ticket_reference


class SvnClient:
    """Runs svn commands inside a working copy.

    Commands run one at a time and are never retried. A non-zero exit raises
    ``ExternalToolFailure`` carrying svn's own error text.
    """

    def __init__(
        self,
        working_dir: Path,
        svn_path: str = "svn",
        logger: Optional[logging.Logger] = None,
    ):
        self.working_dir = Path(working_dir)
        self.svn_path = svn_path
        self.logger = logger or logging.getLogger(__name__)

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        cmd = [self.svn_path] + args
        self.logger.debug("Running %s in %s", " ".join(cmd), self.working_dir)
        try:
            return subprocess.run(  # noqa: S603
                cmd,
                cwd=self.working_dir,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            raise ExternalToolFailure(
                " ".join(cmd), f"{self.svn_path}: command not found"
            ) from e
        except NotADirectoryError as e:
            raise ExternalToolFailure(
                " ".join(cmd), f"{self.working_dir} is not a directory"
            ) from e

    def run(self, args: List[str]) -> str:
        """Run an svn subcommand and return its stdout."""
        result = self._run(args)
        if result.returncode != 0:
            stderr = result.stderr.strip() or "Unknown svn error"
            self.logger.debug("svn %s failed: %s", args[0], stderr)
            raise ExternalToolFailure(
                " ".join([self.svn_path] + args), stderr, result.returncode
            )
        return result.stdout

    def is_working_copy(self) -> bool:
        """Check whether ``svn info`` succeeds in the working directory."""
        try:
            self.run(["info"])
        except ExternalToolFailure as e:
            self.logger.debug("%s is not an SVN working copy: %s", self.working_dir, e)
            return False
        return True

    def ensure_working_copy(self) -> None:
        """Raise ``NotAWorkingCopy`` unless the directory is under svn control."""
        if not self.working_dir.is_dir():
            raise NotAWorkingCopy(str(self.working_dir), "no such directory")
        if not self.is_working_copy():
            raise NotAWorkingCopy(str(self.working_dir))

    def search_log(self, ticket_id: str) -> str:
        """Verbose log of revisions the server matches against ``#ticket_id``."""
        return self.run(["log", "-v", "--search", ticket_reference(ticket_id)])

    def revision_log(self, revision: int) -> str:
        """Verbose log of exactly one revision."""
        return self.run(["log", "-v", "-c", str(int(revision))])

    def revision_diff(self, revision: int) -> str:
        """Diff introduced by one revision."""
        return self.run(["diff", "-c", str(int(revision))])

    def cat(self, path: str, revision: int) -> str:
        """File content at a revision.

        Raises:
            ContentRetrievalFailure: If the path does not exist at that revision
                or svn fails
        """
        # An "@" in the name would otherwise be read as a peg revision
        target = f"{path}@" if "@" in path else path
        result = self._run(["cat", "-r", str(int(revision)), target])
        if result.returncode != 0:
            stderr = result.stderr.strip() or "Unknown svn error"
            self.logger.debug("Error getting r%d of %s: %s", revision, path, stderr)
            raise ContentRetrievalFailure(path, revision, stderr, result.returncode)
        return result.stdout
