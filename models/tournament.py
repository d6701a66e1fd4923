"""
Tournament domain model.

Plain dataclasses describing groups, matches and the playoff bracket.
Playoff matches live in one flat list on the Tournament; bracket links
(next_match, third_place_match) are integer indices into that list so
the structure stays acyclic and trivially serialisable.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from models.player import Player


class TournamentFormat(enum.Enum):
    """Overall tournament formats."""
    GROUP_STAGE_WITH_PLAYOFFS = "group_stage_with_playoffs"
    SINGLE_ELIMINATION = "single_elimination"
    DOUBLE_ELIMINATION = "double_elimination"
    ROUND_ROBIN = "round_robin"


class TournamentStage(enum.Enum):
    """Tournament progression stages. Transitions only move forward."""
    GROUPS = "groups"
    PLAYOFFS = "playoffs"
    COMPLETE = "complete"


class TournamentMatchType(enum.Enum):
    GROUP_STAGE = "group_stage"
    PLAYOFF_STAGE = "playoff_stage"
    QUARTERFINAL = "quarterfinal"
    SEMIFINAL = "semifinal"
    FINAL = "final"
    THIRD_PLACE = "third_place"


class MatchStatus(enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MatchResultType(enum.Enum):
    NORMAL = "normal"
    FORFEIT = "forfeit"
    DISQUALIFICATION = "disqualification"
    TIEBREAKER = "tiebreaker"
    DEFAULT = "default"  # Byes and other automatic advancements


ELIMINATION_FORMATS = (
    TournamentFormat.SINGLE_ELIMINATION,
    TournamentFormat.DOUBLE_ELIMINATION,
)


def _odd(best_of: int) -> int:
    return best_of + 1 if best_of % 2 == 0 else best_of


@dataclass
class TournamentSettings:
    """Per-tournament options."""
    include_third_place_match: bool = False
    best_of_group_stage: int = 3
    best_of_quarterfinals: int = 3
    best_of_semifinals: int = 3
    best_of_playoffs: int = 3
    best_of_finals: int = 5
    best_of_third_place: int = 3
    matches_per_player: int = 0  # 0 = full round robin

    def __post_init__(self) -> None:
        # Best-of series must have an odd length
        self.best_of_group_stage = _odd(self.best_of_group_stage)
        self.best_of_quarterfinals = _odd(self.best_of_quarterfinals)
        self.best_of_semifinals = _odd(self.best_of_semifinals)
        self.best_of_playoffs = _odd(self.best_of_playoffs)
        self.best_of_finals = _odd(self.best_of_finals)
        self.best_of_third_place = _odd(self.best_of_third_place)

    def best_of_for(self, match_type: TournamentMatchType) -> int:
        """Series length for a match type."""
        return {
            TournamentMatchType.GROUP_STAGE: self.best_of_group_stage,
            TournamentMatchType.QUARTERFINAL: self.best_of_quarterfinals,
            TournamentMatchType.SEMIFINAL: self.best_of_semifinals,
            TournamentMatchType.FINAL: self.best_of_finals,
            TournamentMatchType.THIRD_PLACE: self.best_of_third_place,
        }.get(match_type, self.best_of_playoffs)


@dataclass
class GroupParticipant:
    """A player's record within a group."""
    player: Player
    seed: int = 0  # 0 = unseeded
    wins: int = 0
    losses: int = 0
    draws: int = 0
    games_won: int = 0
    games_lost: int = 0
    advanced_to_playoffs: bool = False
    qualification_info: Optional[str] = None

    @property
    def points(self) -> int:
        """3 points per win, 1 per draw."""
        return self.wins * 3 + self.draws

    @property
    def game_differential(self) -> int:
        return self.games_won - self.games_lost

    @property
    def played(self) -> int:
        return self.wins + self.losses + self.draws


@dataclass
class MatchParticipant:
    """One of the two slots of a match. player is None until resolved."""
    player: Optional[Player] = None
    score: int = 0
    is_winner: bool = False
    source_group: Optional[str] = None
    source_group_position: int = 0
    source_match: Optional[int] = None

    @property
    def display(self) -> str:
        if self.player is not None:
            return self.player.name
        if self.source_group:
            return f"{self.source_group} #{self.source_group_position}"
        return "TBD"


@dataclass
class MatchResult:
    winner: Optional[Player]
    map_results: list[str] = field(default_factory=list)
    completed_at: Optional[datetime] = None
    status: MatchStatus = MatchStatus.COMPLETED
    result_type: MatchResultType = MatchResultType.NORMAL
    forfeiter: Optional[Player] = None


def _two_slots() -> list[MatchParticipant]:
    return [MatchParticipant(), MatchParticipant()]


@dataclass
class Match:
    """
    A best-of-N match between two slots.

    For playoff matches, index is the match's position in
    Tournament.playoff_matches; next_match/next_slot say where the winner
    goes, third_place_match where a semifinal loser goes.
    """
    name: str
    match_type: TournamentMatchType = TournamentMatchType.GROUP_STAGE
    best_of: int = 3
    participants: list[MatchParticipant] = field(default_factory=_two_slots)
    result: Optional[MatchResult] = None
    display_position: str = ""
    round_number: int = 0  # 1-based playoff round, 0 for group matches
    index: Optional[int] = None
    next_match: Optional[int] = None
    next_slot: Optional[int] = None
    third_place_match: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.result is not None

    @property
    def is_bye(self) -> bool:
        return (
            self.result is not None
            and self.result.result_type == MatchResultType.DEFAULT
        )

    @property
    def is_ready(self) -> bool:
        """Both players known and no result yet."""
        return not self.is_complete and all(p.player is not None for p in self.participants)

    @property
    def players(self) -> list[Optional[Player]]:
        return [p.player for p in self.participants]

    @property
    def winner(self) -> Optional[Player]:
        return self.result.winner if self.result else None

    def slot_of(self, player: Player) -> Optional[int]:
        """Slot index holding player, or None."""
        for i, participant in enumerate(self.participants):
            if participant.player is not None and participant.player == player:
                return i
        return None

    def refresh_name(self) -> None:
        """Rename from the currently known players ("A vs TBD")."""
        self.name = " vs ".join(p.display for p in self.participants)


@dataclass
class Group:
    name: str
    participants: list[GroupParticipant] = field(default_factory=list)
    matches: list[Match] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True iff every match in the group has a result."""
        return all(m.is_complete for m in self.matches)

    def participant_for(self, player: Player) -> Optional[GroupParticipant]:
        return next((p for p in self.participants if p.player == player), None)


@dataclass
class Tournament:
    name: str = "Tournament"
    format: TournamentFormat = TournamentFormat.GROUP_STAGE_WITH_PLAYOFFS
    stage: TournamentStage = TournamentStage.GROUPS
    groups: list[Group] = field(default_factory=list)
    playoff_matches: list[Match] = field(default_factory=list)
    settings: TournamentSettings = field(default_factory=TournamentSettings)
    is_complete: bool = False

    @property
    def player_count(self) -> int:
        return sum(len(g.participants) for g in self.groups)

    @property
    def group_matches(self) -> list[Match]:
        return [m for g in self.groups for m in g.matches]

    @property
    def final_match(self) -> Optional[Match]:
        return next(
            (m for m in self.playoff_matches if m.match_type == TournamentMatchType.FINAL),
            None,
        )

    @property
    def third_place_match(self) -> Optional[Match]:
        return next(
            (m for m in self.playoff_matches
             if m.match_type == TournamentMatchType.THIRD_PLACE),
            None,
        )

    @property
    def champion(self) -> Optional[Player]:
        final = self.final_match
        return final.winner if final else None

    def group_of(self, match: Match) -> Optional[Group]:
        """The group a group-stage match belongs to."""
        for group in self.groups:
            if any(m is match for m in group.matches):
                return group
        return None

    def playoff_rounds(self) -> dict[int, list[Match]]:
        """Bracket matches keyed by round number (third-place match excluded)."""
        rounds: dict[int, list[Match]] = {}
        for match in self.playoff_matches:
            if match.match_type == TournamentMatchType.THIRD_PLACE:
                continue
            rounds.setdefault(match.round_number, []).append(match)
        return rounds

    def feeders_of(self, match: Match) -> list[Match]:
        """Matches whose winners feed into match, in slot order."""
        feeders = [m for m in self.playoff_matches if m.next_match == match.index]
        return sorted(feeders, key=lambda m: m.next_slot or 0)
