"""
Tournament engine errors.

Every failure the engine can report is one of these typed exceptions.
They are deterministic for a given input; the caller decides how to
surface them.
"""


class TournamentError(Exception):
    """Base class for all engine errors."""


class InvalidPlayerCount(TournamentError, ValueError):
    """Too few players, a count mismatch, or group/bracket math given zero."""


class DuplicatePlayer(TournamentError, ValueError):
    """The same player id appears more than once in a roster."""


class MapPoolExhausted(TournamentError):
    """Not enough maps remain to fill the requested match length."""

    def __init__(self, message: str, remaining: int = 0, required: int = 0):
        super().__init__(message)
        self.remaining = remaining
        self.required = required


class InvalidMapBans(TournamentError, ValueError):
    """A ban submission does not fit the match length or the map pool."""


class DuplicateBracketAdvancement(TournamentError):
    """An advancement would overwrite an already-filled bracket slot."""


class IncompleteGroupStage(TournamentError):
    """Playoffs were requested before every group finished."""


class MatchAlreadyReported(TournamentError):
    """A match result can only be set once."""


class InvalidMatchResult(TournamentError, ValueError):
    """The reported result does not fit the match."""
