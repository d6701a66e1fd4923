"""
Tournament Bracket Engine

Entry point for the platform layer. Wires group formation, match
generation, playoff building, map bans and progression together:

    Groups -> Playoffs -> Complete

The engine performs no I/O; it takes plain data and returns plain data,
announcing state changes through Qt signals.
"""

import dataclasses
import logging
import random
from typing import Optional

from PySide6.QtCore import QObject, Signal
from pydantic import ValidationError

from engine import group_formation, map_bans, match_generator, playoff_bracket
from engine.errors import InvalidMapBans, InvalidMatchResult, InvalidPlayerCount
from engine.progression import TournamentProgressionTracker
from models.player import Player
from models.schemas import MapBanSubmission, MatchReport, PlayerCreate
from models.tournament import (
    ELIMINATION_FORMATS,
    Group,
    GroupParticipant,
    Match,
    MatchResultType,
    Tournament,
    TournamentFormat,
    TournamentSettings,
)


logger = logging.getLogger(__name__)


class TournamentBracket(QObject):
    """
    Runs tournaments from roster to champion.

    Usage:
        bracket = TournamentBracket()
        tournament = bracket.create_tournament("Weekly Cup", players)
        bracket.report_result(tournament, match, winner, 2, 1)
        maps = bracket.resolve_map_bans(bans1, bans2, pool, best_of=3)
    """

    # Signals
    stage_changed = Signal(str)  # stage name
    match_completed = Signal(dict)  # match details
    group_completed = Signal(str)  # group name
    tournament_completed = Signal(dict)  # final results
    bracket_updated = Signal()  # bracket structure changed

    def __init__(
        self,
        settings: Optional[TournamentSettings] = None,
        rng: Optional[random.Random] = None,
        event_bus=None,
    ):
        super().__init__()
        self.settings = settings or TournamentSettings()
        self.rng = rng or random.Random()
        self.event_bus = event_bus
        self.tracker = TournamentProgressionTracker()

        # Re-emit tracker signals from the facade
        self.tracker.stage_changed.connect(self.stage_changed)
        self.tracker.match_completed.connect(self.match_completed)
        self.tracker.group_completed.connect(self.group_completed)
        self.tracker.tournament_completed.connect(self.tournament_completed)
        self.tracker.bracket_updated.connect(self.bracket_updated)

        if event_bus is not None:
            self.stage_changed.connect(event_bus.stage_changed)
            self.match_completed.connect(event_bus.match_completed)
            self.group_completed.connect(event_bus.group_completed)
            self.tournament_completed.connect(event_bus.tournament_completed)
            self.bracket_updated.connect(event_bus.bracket_updated)

    # ============ Setup ============

    @staticmethod
    def load_roster(entries: list[dict]) -> tuple[list[Player], dict[Player, int]]:
        """
        Validate raw roster entries into players and their seeds.

        Raises:
            InvalidPlayerCount: an entry is malformed
        """
        players = []
        seeds = {}
        for entry in entries:
            try:
                data = PlayerCreate.model_validate(entry)
            except ValidationError as exc:
                raise InvalidPlayerCount(f"Invalid roster entry {entry!r}: {exc}") from exc
            player = Player(data.player_id, data.display_name)
            players.append(player)
            if data.seed:
                seeds[player] = data.seed
        return players, seeds

    def form_groups(
        self,
        players: list[Player],
        seeds: Optional[dict[Player, int]] = None,
        fmt: TournamentFormat = TournamentFormat.GROUP_STAGE_WITH_PLAYOFFS,
        player_count: Optional[int] = None,
    ) -> list[Group]:
        """
        Partition players into groups (no matches yet).

        Raises:
            InvalidPlayerCount: fewer than 2 players, or player_count mismatch
            DuplicatePlayer: a player appears twice
        """
        if player_count is not None and player_count != len(players):
            raise InvalidPlayerCount(
                f"Expected {player_count} players, got {len(players)}"
            )
        return group_formation.create_groups(players, seeds, fmt, self.rng)

    def generate_round_robin(self, group: Group) -> list[Match]:
        return match_generator.generate_round_robin(
            group,
            best_of=self.settings.best_of_group_stage,
            matches_per_player=self.settings.matches_per_player,
        )

    def create_tournament(
        self,
        name: str,
        players: list[Player],
        seeds: Optional[dict[Player, int]] = None,
        fmt: TournamentFormat = TournamentFormat.GROUP_STAGE_WITH_PLAYOFFS,
    ) -> Tournament:
        """
        Create a tournament with groups and their matches.

        Elimination formats skip group play and get their bracket right away.
        """
        tournament = Tournament(
            name=name,
            format=fmt,
            groups=self.form_groups(players, seeds, fmt),
            settings=dataclasses.replace(self.settings),
        )

        if fmt not in ELIMINATION_FORMATS:
            for group in tournament.groups:
                self.generate_round_robin(group)

        logger.info(
            "%s: created (%s, %d players, %d groups)",
            name, fmt.value, len(players), len(tournament.groups),
        )
        if self.event_bus is not None:
            self.event_bus.tournament_created.emit({
                "name": name,
                "format": fmt.value,
                "players": len(players),
                "groups": [g.name for g in tournament.groups],
            })

        if fmt in ELIMINATION_FORMATS:
            self.tracker.check_progression(tournament)
        return tournament

    def build_playoffs(self, tournament: Tournament) -> list[Match]:
        """
        Build the playoff bracket and move the tournament into the playoffs.

        Raises:
            IncompleteGroupStage: a group still has matches to play
        """
        if tournament.format == TournamentFormat.ROUND_ROBIN:
            logger.warning("%s: round robin tournaments have no playoffs", tournament.name)
            return []

        matches = playoff_bracket.build_playoffs(tournament)
        self.tracker.check_progression(tournament)
        return matches

    def create_third_place_match(self, tournament: Tournament) -> Optional[Match]:
        """Create the third place match once both semifinals are decided."""
        if tournament.third_place_match is not None:
            return tournament.third_place_match
        if not playoff_bracket.can_create_third_place_match(tournament):
            logger.warning("%s: third place match cannot be created yet", tournament.name)
            return None

        match = playoff_bracket.create_third_place_match(tournament)
        self.bracket_updated.emit()
        return match

    # ============ Map bans ============

    def resolve_map_bans(
        self,
        team1_bans: list[str],
        team2_bans: list[str],
        pool: list[str],
        best_of: int,
    ) -> list[str]:
        """
        Resolve both teams' bans into the maps to play.

        Raises:
            InvalidMapBans: a submission is malformed
            MapPoolExhausted: too few maps survive the bans
        """
        try:
            first = MapBanSubmission(bans=team1_bans)
            second = MapBanSubmission(bans=team2_bans)
        except ValidationError as exc:
            raise InvalidMapBans(str(exc)) from exc

        maps = map_bans.resolve_map_bans(first.bans, second.bans, pool, best_of, self.rng)
        if self.event_bus is not None:
            self.event_bus.map_bans_resolved.emit(list(maps))
        return maps

    # ============ Results ============

    def report_result(
        self,
        tournament: Tournament,
        match: Match,
        winner: Optional[Player],
        score1: int = 0,
        score2: int = 0,
        map_results: Optional[list[str]] = None,
    ) -> None:
        """Record a result; winner None is a group-stage draw."""
        self.tracker.report_result(tournament, match, winner, score1, score2, map_results)

    def submit_report(self, tournament: Tournament, match: Match, payload: dict) -> None:
        """
        Record a result from a raw score report.

        Raises:
            InvalidMatchResult: the payload is malformed or names a stranger
        """
        try:
            report = MatchReport.model_validate(payload)
        except ValidationError as exc:
            raise InvalidMatchResult(str(exc)) from exc

        winner = None
        if report.winner_id is not None:
            winner = next(
                (p for p in match.players
                 if p is not None and p.player_id == report.winner_id),
                None,
            )
            if winner is None:
                raise InvalidMatchResult(
                    f"{report.winner_id} is not playing in '{match.name}'"
                )

        self.report_result(
            tournament, match, winner, report.score1, report.score2, report.map_results
        )

    def process_forfeit(
        self,
        tournament: Tournament,
        match: Match,
        forfeiting_player: Player,
        result_type: MatchResultType = MatchResultType.FORFEIT,
    ) -> None:
        self.tracker.process_forfeit(tournament, match, forfeiting_player, result_type)

    # ============ Queries ============

    def get_group_standings(self, group: Group) -> list[GroupParticipant]:
        return self.tracker.get_group_standings(group)

    def get_upcoming_matches(self, tournament: Tournament) -> list[Match]:
        return self.tracker.get_upcoming_matches(tournament)

    def get_bracket_display(self, tournament: Tournament) -> dict:
        return self.tracker.get_bracket_display(tournament)
