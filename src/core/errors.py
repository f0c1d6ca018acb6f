"""
Exceptions raised by bracket generation and bracket state operations.
"""


class BracketError(Exception):
    """Base class for all bracket errors."""


class InvalidBracketSize(BracketError, ValueError):
    """Team count below 2, or a negative / non-integer requested size."""


class UnsupportedBracketType(BracketError, ValueError):
    pass


class InvalidTeam(BracketError, ValueError):
    pass


class InvalidSlot(BracketError, ValueError):
    """Slot index outside {0, 1}, or the slot cannot take the operation."""


class InvalidScore(BracketError, ValueError):
    pass


class MatchNotFound(BracketError, LookupError):
    pass


class TeamNotFound(BracketError, LookupError):
    pass


class InconsistentPropagation(BracketError, RuntimeError):
    """Internal invariant violation while carrying a winner forward.

    Signals a logic fault in the bracket structure, not a user error.
    """
