"""Exception hierarchy for bracket progression and pick handling.

Every error the core raises derives from :class:`BracketPoolError`, so a
collaborator (web handler, CLI) can translate the whole family into one
user-facing failure without coupling to individual operations.
"""

from __future__ import annotations


class BracketPoolError(Exception):
    """Base exception for all bracket pool errors."""


class TopologyError(BracketPoolError, ValueError):
    """A round/region/match-number combination does not exist in the bracket."""


class FieldError(BracketPoolError, ValueError):
    """The entrant field is not 4 regions of 16 uniquely seeded entrants."""


class InvalidPickError(BracketPoolError):
    """The picked entrant is not a current virtual occupant of the match."""


class InvalidWinnerError(BracketPoolError):
    """The submitted winner is not one of the match's stored entrants."""


class BracketLockedError(BracketPoolError):
    """Picks can no longer be changed (past the lock deadline or submitted)."""


class SubmissionError(BracketPoolError):
    """The bracket cannot be submitted (already submitted or incomplete)."""
