"""Ticket Changesets - find and diff Subversion revisions that reference a ticket."""

__version__ = "0.1.0"
