"""Exception hierarchy for Ticket Changesets."""

from typing import Optional


class TicketChangesetsError(Exception):
    """Base class for every error raised by this package."""


class ParseSkipped(TicketChangesetsError):
    """A log segment could not be parsed.

    Returned, not raised, by the parser when a malformed or incomplete
    segment is dropped; the parser logs it and carries on.
    """


class NoMatchingRevisions(TicketChangesetsError):
    """No changeset touches the requested file."""

    def __init__(self, target_path: str):
        self.target_path = target_path
        super().__init__(f"Could not find revisions for {target_path}")


class ExternalToolFailure(TicketChangesetsError):
    """The svn executable failed or could not be started."""

    def __init__(self, command: str, stderr: str, returncode: Optional[int] = None):
        self.command = command
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(stderr or f"{command} failed")


class ContentRetrievalFailure(ExternalToolFailure):
    """File content could not be fetched at a given revision."""

    def __init__(
        self,
        path: str,
        revision: int,
        stderr: str,
        returncode: Optional[int] = None,
    ):
        self.path = path
        self.revision = revision
        super().__init__(f"svn cat -r {revision} {path}", stderr, returncode)


class InvalidTicketId(TicketChangesetsError):
    """Ticket IDs are numbers only."""

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(
            f"Invalid ticket ID {ticket_id!r}: please enter numbers only"
        )


class NotAWorkingCopy(TicketChangesetsError):
    """The directory is not an svn working copy."""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        message = f"{path} is not an SVN working copy"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class ConfigError(TicketChangesetsError):
    """The configuration file could not be read or validated."""
