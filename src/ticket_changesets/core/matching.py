"""Matching predicates shared by the parser and the diff planner.

Both rules are plain substring tests. They over-match (``#100`` is found in
``#1000``, ``a.txt`` in ``/trunk/ba.txt``); swap in a stricter predicate here
rather than in the callers.
"""


def ticket_reference(ticket_id: str) -> str:
    """Return the hash-prefixed form a commit message uses to cite a ticket."""
    return f"#{ticket_id}"


def references_ticket(message: str, ticket_id: str) -> bool:
    """Check whether a commit message cites the ticket."""
    return ticket_reference(ticket_id) in message


def path_matches(logged_path: str, target_path: str) -> bool:
    """Check whether a logged path refers to the target file."""
    return target_path in logged_path
