"""Map logged repository paths onto the local working copy."""

import logging
import re
from typing import Optional

SEPARATORS = ("/", "\\")


def resolve_path(
    raw_path: str,
    working_directory: str,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Turn a path from the log into one ``svn cat`` accepts inside the working copy.

    Removes a single leading separator, then the working copy's own folder
    name when the log repeats it (``/trunk/src/app.ts`` checked out as
    ``.../trunk`` becomes ``src/app.ts``).

    This is a heuristic. A checkout whose folder name matches none of the
    logged segments, or nested directories sharing that name, are left as-is.
    """
    adjusted = raw_path
    if adjusted.startswith(SEPARATORS):
        adjusted = adjusted[1:]

    root_name = re.split(r"[/\\]", working_directory.rstrip("/\\"))[-1]
    if root_name:
        for separator in SEPARATORS:
            prefix = root_name + separator
            if adjusted.startswith(prefix):
                adjusted = adjusted[len(prefix):]
                break

    logger = logger or logging.getLogger(__name__)
    logger.debug("Adjusted file path: %s -> %s", raw_path, adjusted)
    return adjusted
