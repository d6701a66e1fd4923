"""
Tourney Core Models

Domain dataclasses and pydantic input schemas.
"""

from models.player import Player
from models.map import GameMap
from models.tournament import (
    Group,
    GroupParticipant,
    Match,
    MatchParticipant,
    MatchResult,
    MatchResultType,
    MatchStatus,
    Tournament,
    TournamentFormat,
    TournamentMatchType,
    TournamentSettings,
    TournamentStage,
)
from models.schemas import (
    MapBanSubmission,
    MatchReport,
    PlayerCreate,
    TournamentSettingsSchema,
)

__all__ = [
    "Player",
    "GameMap",
    "Group",
    "GroupParticipant",
    "Match",
    "MatchParticipant",
    "MatchResult",
    "MatchResultType",
    "MatchStatus",
    "Tournament",
    "TournamentFormat",
    "TournamentMatchType",
    "TournamentSettings",
    "TournamentStage",
    "MapBanSubmission",
    "MatchReport",
    "PlayerCreate",
    "TournamentSettingsSchema",
]
