"""
Tourney Core Engine

Tournament structuring and match progression.
This module performs no I/O and has no GUI dependencies.
"""

from engine.errors import (
    TournamentError,
    InvalidPlayerCount,
    DuplicatePlayer,
    MapPoolExhausted,
    InvalidMapBans,
    DuplicateBracketAdvancement,
    IncompleteGroupStage,
    MatchAlreadyReported,
    InvalidMatchResult,
)
from engine.map_bans import resolve_map_bans
from engine.progression import TournamentProgressionTracker
from engine.tournament_bracket import TournamentBracket

__all__ = [
    "TournamentError",
    "InvalidPlayerCount",
    "DuplicatePlayer",
    "MapPoolExhausted",
    "InvalidMapBans",
    "DuplicateBracketAdvancement",
    "IncompleteGroupStage",
    "MatchAlreadyReported",
    "InvalidMatchResult",
    "resolve_map_bans",
    "TournamentProgressionTracker",
    "TournamentBracket",
]
