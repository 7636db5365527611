"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ticket_changesets.core.svn_client import SvnClient

SEPARATOR = "-" * 72

TICKET_LOG = f"""{SEPARATOR}
r20 | alice | 2024-03-02 09:15:00 +0100 (Sat, 02 Mar 2024) | 2 lines
Changed paths:
   M /trunk/src/app.ts
   A /trunk/src/util.ts

Fix login redirect #100
Follow-up from review
{SEPARATOR}
r18 | bob | 2024-03-01 17:40:12 +0100 (Fri, 01 Mar 2024) | 1 line
Changed paths:
   M /trunk/README.md

Mention #200 in docs
{SEPARATOR}
r15 | alice | 2024-03-01 11:02:33 +0100 (Fri, 01 Mar 2024) | 1 line
Changed paths:
   M /trunk/src/app.ts

Handle empty redirect target, refs #100
{SEPARATOR}
"""

REVISION_LOG = f"""{SEPARATOR}
r20 | alice | 2024-03-02 09:15:00 +0100 (Sat, 02 Mar 2024) | 2 lines
Changed paths:
   M /trunk/src/app.ts
   A /trunk/src/util.ts

Fix login redirect #100
Follow-up from review
{SEPARATOR}
"""

REVISION_DIFF = """Index: src/app.ts
===================================================================
--- src/app.ts\t(revision 19)
+++ src/app.ts\t(revision 20)
@@ -1,2 +1,2 @@
-redirect('/')
+redirect(target)
 export {}
"""


@pytest.fixture
def ticket_log():
    """Verbose log output of a ticket search, newest first."""
    return TICKET_LOG


@pytest.fixture
def mock_svn_client():
    """SvnClient double rooted at a working copy named ``trunk``."""
    client = MagicMock(spec=SvnClient)
    client.working_dir = Path("/work/trunk")
    client.search_log.return_value = TICKET_LOG
    client.revision_log.return_value = REVISION_LOG
    client.revision_diff.return_value = REVISION_DIFF
    return client
