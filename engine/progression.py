"""
Tournament Progression Tracker

Applies reported results to group standings and the playoff bracket and
moves the tournament through its stages:
    Groups -> Playoffs -> Complete

Mutations on one tournament must be serialized by the caller; the tracker
does no locking.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from PySide6.QtCore import QObject, Signal

from engine.errors import InvalidMatchResult, MatchAlreadyReported
from engine.playoff_bracket import (
    advance_winner,
    build_playoffs,
    loser_of,
    place_player,
    rank_participants,
)
from models.player import Player
from models.tournament import (
    Group,
    GroupParticipant,
    Match,
    MatchResult,
    MatchResultType,
    Tournament,
    TournamentFormat,
    TournamentMatchType,
    TournamentStage,
)


logger = logging.getLogger(__name__)


def _player_dict(player: Optional[Player]) -> Optional[dict]:
    if player is None:
        return None
    return {"id": player.player_id, "name": player.name}


def match_to_dict(match: Match) -> dict:
    """Convert a Match to a plain dictionary."""
    return {
        "index": match.index,
        "name": match.name,
        "match_type": match.match_type.value,
        "display_position": match.display_position,
        "round": match.round_number,
        "best_of": match.best_of,
        "participants": [
            {
                "player": _player_dict(p.player),
                "display": p.display,
                "score": p.score,
                "is_winner": p.is_winner,
                "source_group": p.source_group,
                "source_group_position": p.source_group_position,
            }
            for p in match.participants
        ],
        "is_complete": match.is_complete,
        "is_bye": match.is_bye,
        "winner": _player_dict(match.winner),
        "result_type": match.result.result_type.value if match.result else None,
        "map_results": list(match.result.map_results) if match.result else [],
        "next_match": match.next_match,
    }


def _standing_dict(participant: GroupParticipant) -> dict:
    return {
        "player": _player_dict(participant.player),
        "seed": participant.seed,
        "played": participant.played,
        "wins": participant.wins,
        "losses": participant.losses,
        "draws": participant.draws,
        "points": participant.points,
        "games_won": participant.games_won,
        "games_lost": participant.games_lost,
        "game_differential": participant.game_differential,
        "advanced_to_playoffs": participant.advanced_to_playoffs,
        "qualification_info": participant.qualification_info,
    }


class TournamentProgressionTracker(QObject):
    """
    Applies match results and advances the tournament.

    Usage:
        tracker = TournamentProgressionTracker()
        tracker.stage_changed.connect(on_stage_changed)
        tracker.report_result(tournament, match, winner, 2, 1)
    """

    # Signals
    match_completed = Signal(dict)  # match details
    group_completed = Signal(str)  # group name
    stage_changed = Signal(str)  # stage name
    tournament_completed = Signal(dict)  # final results
    bracket_updated = Signal()  # bracket slots changed

    def __init__(self):
        super().__init__()

    # ============ Result reporting ============

    def report_result(
        self,
        tournament: Tournament,
        match: Match,
        winner: Optional[Player],
        score1: int = 0,
        score2: int = 0,
        map_results: Optional[list[str]] = None,
    ) -> None:
        """
        Record the result of a match and apply everything that follows from it.

        Args:
            tournament: Tournament the match belongs to
            match: Match being reported
            winner: Winning player; None reports a draw (group stage only)
            score1: Games won by the player in slot 0
            score2: Games won by the player in slot 1
            map_results: Maps played, in order

        Raises:
            MatchAlreadyReported: the match already has a result
            InvalidMatchResult: the result does not fit the match
        """
        self._check_reportable(tournament, match)

        if score1 < 0 or score2 < 0:
            raise InvalidMatchResult("Scores cannot be negative")

        if winner is None:
            if match.match_type != TournamentMatchType.GROUP_STAGE:
                raise InvalidMatchResult(f"'{match.name}' cannot end in a draw")
        else:
            slot = match.slot_of(winner)
            if slot is None:
                raise InvalidMatchResult(f"{winner.name} is not playing in '{match.name}'")
            winner = match.participants[slot].player

        for participant, score in zip(match.participants, (score1, score2)):
            participant.score = score
            participant.is_winner = winner is not None and participant.player == winner

        match.result = MatchResult(
            winner=winner,
            map_results=list(map_results or []),
            completed_at=datetime.now(timezone.utc),
        )
        self._apply_result(tournament, match)

    def process_forfeit(
        self,
        tournament: Tournament,
        match: Match,
        forfeiting_player: Player,
        result_type: MatchResultType = MatchResultType.FORFEIT,
    ) -> None:
        """
        Award the match to the opponent of forfeiting_player.

        Raises:
            MatchAlreadyReported: the match already has a result
            InvalidMatchResult: the player is not in the match or has no opponent
        """
        self._check_reportable(tournament, match)

        slot = match.slot_of(forfeiting_player)
        if slot is None:
            raise InvalidMatchResult(
                f"{forfeiting_player.name} is not playing in '{match.name}'"
            )

        opponent = match.participants[1 - slot]
        opponent.is_winner = True
        match.result = MatchResult(
            winner=opponent.player,
            completed_at=datetime.now(timezone.utc),
            result_type=result_type,
            forfeiter=match.participants[slot].player,
        )
        logger.info(
            "%s: %s wins '%s' by %s",
            tournament.name, opponent.player.name, match.name, result_type.value,
        )
        self._apply_result(tournament, match)

    def _check_reportable(self, tournament: Tournament, match: Match) -> None:
        if match.match_type == TournamentMatchType.GROUP_STAGE:
            belongs = tournament.group_of(match) is not None
        else:
            belongs = (
                match.index is not None
                and 0 <= match.index < len(tournament.playoff_matches)
                and tournament.playoff_matches[match.index] is match
            )
        if not belongs:
            raise InvalidMatchResult(f"'{match.name}' is not part of {tournament.name}")
        if match.is_complete:
            raise MatchAlreadyReported(f"'{match.name}' already has a result")
        if any(p.player is None for p in match.participants):
            raise InvalidMatchResult(f"'{match.name}' does not have both players yet")

    def _apply_result(self, tournament: Tournament, match: Match) -> None:
        self.match_completed.emit(match_to_dict(match))

        if match.match_type == TournamentMatchType.GROUP_STAGE:
            group = tournament.group_of(match)
            self._update_standings(group, match)
            if group.is_complete:
                logger.info("%s: %s is complete", tournament.name, group.name)
                self.group_completed.emit(group.name)
        else:
            self.advance_winner(tournament, match)

        self.check_progression(tournament)

    def _update_standings(self, group: Group, match: Match) -> None:
        first, second = match.participants
        records = (group.participant_for(first.player), group.participant_for(second.player))

        for record, own, other in ((records[0], first, second), (records[1], second, first)):
            if record is None:
                continue
            record.games_won += own.score
            record.games_lost += other.score
            if match.winner is None:
                record.draws += 1
            elif match.winner == record.player:
                record.wins += 1
            else:
                record.losses += 1

    # ============ Bracket advancement ============

    def advance_winner(self, tournament: Tournament, match: Match) -> Optional[Match]:
        """
        Move the winner of a playoff match forward, and a semifinal loser
        into the third place match when there is one.

        Raises:
            DuplicateBracketAdvancement: the target slot is already filled
        """
        next_match = advance_winner(tournament, match)

        if match.third_place_match is not None:
            loser = loser_of(match)
            if loser is not None:
                third_place = tournament.playoff_matches[match.third_place_match]
                place_player(third_place, match.next_slot or 0, loser, source=match)

        self.bracket_updated.emit()
        return next_match

    # ============ Progression ============

    def is_group_complete(self, group: Group) -> bool:
        return group.is_complete

    def is_group_stage_complete(self, tournament: Tournament) -> bool:
        return bool(tournament.groups) and all(g.is_complete for g in tournament.groups)

    def is_tournament_complete(self, tournament: Tournament) -> bool:
        """
        Round robin: every group match is reported.
        Otherwise: the final and any third place match have results.
        """
        if tournament.format == TournamentFormat.ROUND_ROBIN:
            return self.is_group_stage_complete(tournament)

        final = tournament.final_match
        if final is None or not final.is_complete:
            return False
        third_place = tournament.third_place_match
        return third_place is None or third_place.is_complete

    def check_progression(self, tournament: Tournament) -> None:
        """Advance the tournament stage when its current stage is finished."""
        if tournament.stage == TournamentStage.GROUPS:
            if not self.is_group_stage_complete(tournament):
                return
            if tournament.format == TournamentFormat.ROUND_ROBIN:
                self._complete(tournament)
                return

            build_playoffs(tournament)
            self._set_stage(tournament, TournamentStage.PLAYOFFS)
            self.bracket_updated.emit()

        if tournament.stage == TournamentStage.PLAYOFFS and self.is_tournament_complete(tournament):
            self._complete(tournament)

    def _set_stage(self, tournament: Tournament, stage: TournamentStage) -> None:
        tournament.stage = stage
        logger.info("%s: stage changed to %s", tournament.name, stage.value)
        self.stage_changed.emit(stage.value)

    def _complete(self, tournament: Tournament) -> None:
        tournament.is_complete = True
        self._set_stage(tournament, TournamentStage.COMPLETE)

        results = self.final_results(tournament)
        champion = results["champion"]
        logger.info(
            "%s: complete, champion %s",
            tournament.name, champion["name"] if champion else "none",
        )
        self.tournament_completed.emit(results)

    def final_results(self, tournament: Tournament) -> dict:
        """Champion, runner-up and third place of a finished tournament."""
        champion = runner_up = third = None

        if tournament.format == TournamentFormat.ROUND_ROBIN:
            standings = [rank_participants(g.participants) for g in tournament.groups]
            ranked = standings[0] if standings else []
            if ranked:
                champion = ranked[0].player
            if len(ranked) > 1:
                runner_up = ranked[1].player
            if len(ranked) > 2:
                third = ranked[2].player
        else:
            final = tournament.final_match
            if final is not None:
                champion = final.winner
                runner_up = loser_of(final)
            third_place = tournament.third_place_match
            if third_place is not None:
                third = third_place.winner

        return {
            "tournament": tournament.name,
            "format": tournament.format.value,
            "champion": _player_dict(champion),
            "runner_up": _player_dict(runner_up),
            "third_place": _player_dict(third),
        }

    # ============ Queries ============

    def get_group_standings(self, group: Group) -> list[GroupParticipant]:
        """Group participants in ranking order."""
        return rank_participants(group.participants)

    def get_upcoming_matches(self, tournament: Tournament) -> list[Match]:
        """Matches with both players known and no result yet."""
        matches = tournament.group_matches + tournament.playoff_matches
        return [m for m in matches if m.is_ready]

    def get_bracket_display(self, tournament: Tournament) -> dict:
        """
        Get bracket data for visualization.

        Returns a nested dict the platform layer renders however it likes.
        """
        third_place = tournament.third_place_match
        return {
            "name": tournament.name,
            "format": tournament.format.value,
            "stage": tournament.stage.value,
            "is_complete": tournament.is_complete,
            "groups": {
                group.name: {
                    "standings": [
                        _standing_dict(p) for p in self.get_group_standings(group)
                    ],
                    "matches": [match_to_dict(m) for m in group.matches],
                    "is_complete": group.is_complete,
                }
                for group in tournament.groups
            },
            "playoffs": {
                round_number: [match_to_dict(m) for m in matches]
                for round_number, matches in sorted(tournament.playoff_rounds().items())
            },
            "third_place": match_to_dict(third_place) if third_place else None,
            "champion": (
                self.final_results(tournament)["champion"]
                if tournament.is_complete else None
            ),
        }
