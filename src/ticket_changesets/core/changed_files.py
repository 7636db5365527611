"""Extract the files touched by a single revision from its verbose log."""

import logging
import re
from typing import List, Optional

from ticket_changesets.core.log_parser import CHANGED_PATHS_MARKER

# "   M /trunk/path/file.cs", "M /trunk/path/file.cs" and "M trunk/path/file.cs"
# all appear in the wild
CHANGED_FILE_RE = re.compile(r"^(?P<status>[AMD])\s+/?(?P<path>.+)$")


def extract_changed_files(
    log_text: str, logger: Optional[logging.Logger] = None
) -> List[str]:
    """Return the paths listed in the changed-paths block of ``svn log -v -c``.

    Status letters and one leading slash are stripped. Lines inside the block
    that do not look like a path entry are skipped without ending the block.
    """
    logger = logger or logging.getLogger(__name__)
    changed_files: List[str] = []
    in_changed_paths = False

    for raw_line in log_text.splitlines():
        line = raw_line.strip()

        if line == CHANGED_PATHS_MARKER:
            in_changed_paths = True
            continue

        if not in_changed_paths:
            continue

        if not line or line.startswith("---"):
            in_changed_paths = False
            continue

        match = CHANGED_FILE_RE.match(line)
        if not match:
            continue

        logger.debug(
            "Found changed file: %s %s", match.group("status"), match.group("path")
        )
        changed_files.append(match.group("path"))

    logger.debug("Extracted %d changed files", len(changed_files))
    return changed_files
