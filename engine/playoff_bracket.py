"""
Playoff Bracket Builder

Selects qualifiers from completed groups and builds a single-elimination
bracket in Tournament.playoff_matches.

Round 1 pairs qualifier i with qualifier (bracket_size - 1 - i); indices
past the qualifier count are byes and are resolved on the spot. Later
rounds are created empty ("TBD vs TBD") and linked by integer index:
matches 2k and 2k+1 of a round feed slots 0 and 1 of match k of the next.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from engine.errors import (
    DuplicateBracketAdvancement,
    IncompleteGroupStage,
    InvalidPlayerCount,
)
from engine.group_formation import GROUP_COUNT_TABLE
from models.player import Player
from models.tournament import (
    ELIMINATION_FORMATS,
    GroupParticipant,
    Match,
    MatchParticipant,
    MatchResult,
    MatchResultType,
    Tournament,
    TournamentMatchType,
)


logger = logging.getLogger(__name__)


# player count -> (group winners, best third places) tuned for an exact bracket fill
ADVANCEMENT_TABLE: dict[int, tuple[int, int]] = {
    7: (4, 0),
    8: (2, 0),
    9: (2, 2),
    10: (2, 0),
    11: (2, 2),
    12: (2, 2),
    13: (2, 2),
    14: (4, 0),
    15: (2, 2),
    16: (2, 0),
    17: (2, 2),
    18: (2, 2),
}


def get_advancement_criteria(player_count: int, group_count: int) -> tuple[int, int]:
    """
    How many players advance from each group, and how many of the best
    third-placed players advance on top of that.

    The player-count table wins whenever the groups were formed from it.
    """
    if group_count <= 0:
        raise InvalidPlayerCount("Group count must be positive")

    if GROUP_COUNT_TABLE.get(player_count) == group_count:
        return ADVANCEMENT_TABLE[player_count]

    if group_count == 1:
        if player_count <= 4:
            return 2, 0
        if player_count <= 8:
            return 4, 0
        return 8, 0
    if group_count in (2, 4):
        return 2, 0
    if group_count == 3:
        return 2, 2
    if 5 <= group_count <= 8:
        return 1, 8 - group_count
    return 1, 0


def _rank_key(participant: GroupParticipant) -> tuple[int, int, int]:
    return (-participant.points, -participant.wins, -participant.game_differential)


def rank_participants(participants: list[GroupParticipant]) -> list[GroupParticipant]:
    """Order by points, then wins, then game differential (all descending)."""
    return sorted(participants, key=_rank_key)


def next_power_of_two(n: int) -> int:
    if n <= 0:
        raise InvalidPlayerCount("Bracket size needs at least one qualifier")
    size = 1
    while size < n:
        size *= 2
    return size


def determine_match_type(position: int, round_size: int) -> TournamentMatchType:
    """
    Match type for the match at position in a round of round_size players.
    """
    if round_size == 2:
        return TournamentMatchType.FINAL
    if round_size == 4:
        return TournamentMatchType.SEMIFINAL
    if round_size == 8 and position < 4:
        return TournamentMatchType.QUARTERFINAL
    return TournamentMatchType.PLAYOFF_STAGE


def select_qualifiers(tournament: Tournament) -> list[MatchParticipant]:
    """
    Pick the playoff qualifiers from the ranked groups.

    Order is by finishing position first (every group winner, then every
    runner-up, ...), group order within a position, best third places last.
    Qualifying GroupParticipants are flagged and tagged with their provenance.
    """
    groups = tournament.groups
    group_winners, best_extra = get_advancement_criteria(
        tournament.player_count, len(groups)
    )
    ranked = {g.name: rank_participants(g.participants) for g in groups}

    qualifiers: list[MatchParticipant] = []

    def qualify(group_name: str, participant: GroupParticipant, position: int,
                suffix: str = "") -> None:
        participant.advanced_to_playoffs = True
        participant.qualification_info = f"{group_name} - Position {position}{suffix}"
        qualifiers.append(MatchParticipant(
            player=participant.player,
            source_group=group_name,
            source_group_position=position,
        ))

    for position in range(group_winners):
        for group in groups:
            standings = ranked[group.name]
            if position < len(standings):
                qualify(group.name, standings[position], position + 1)

    if best_extra > 0:
        # Third-ranked player of every group with at least 3 participants
        candidates = [
            (group.name, ranked[group.name][2])
            for group in groups
            if len(ranked[group.name]) >= 3
            and not ranked[group.name][2].advanced_to_playoffs
        ]
        candidates.sort(key=lambda item: _rank_key(item[1]))
        for name, participant in candidates[:best_extra]:
            qualify(name, participant, 3, " (Best Third Place)")

    logger.info(
        "%s: %d qualifiers (%d per group + %d best third places)",
        tournament.name, len(qualifiers), group_winners, best_extra,
    )
    return qualifiers


def _seeded_roster(tournament: Tournament) -> list[MatchParticipant]:
    """Whole roster ordered by seed (unseeded last) for elimination formats."""
    roster = [p for g in tournament.groups for p in g.participants]
    ordered = sorted(roster, key=lambda p: (p.seed == 0, p.seed))
    qualifiers = []
    for participant in ordered:
        participant.advanced_to_playoffs = True
        if participant.seed:
            participant.qualification_info = f"Seed {participant.seed}"
        qualifiers.append(MatchParticipant(player=participant.player))
    return qualifiers


def loser_of(match: Match) -> Optional[Player]:
    """The participant that did not win a completed match."""
    if not match.is_complete or match.winner is None:
        return None
    for participant in match.participants:
        if participant.player is not None and participant.player != match.winner:
            return participant.player
    return None


def place_player(
    target: Match,
    slot: int,
    player: Player,
    source: Optional[Match] = None,
) -> None:
    """
    Put player into a slot of target; an occupied slot is never overwritten.
    """
    participant = target.participants[slot]
    if participant.player is not None:
        raise DuplicateBracketAdvancement(
            f"Slot {slot} of '{target.name}' already holds {participant.player.name}"
        )
    participant.player = player
    if source is not None:
        participant.source_match = source.index
    target.refresh_name()


def advance_winner(tournament: Tournament, match: Match) -> Optional[Match]:
    """
    Copy the winner of match into its next match.

    Returns:
        The next match, or None when match is the final
    """
    if not match.is_complete or match.winner is None:
        return None
    if match.next_match is None:
        return None

    # Copy the bracket's own Player value, not the one a reporter passed in
    slot = match.slot_of(match.winner)
    winner = match.participants[slot].player if slot is not None else match.winner

    parent = tournament.playoff_matches[match.next_match]
    place_player(parent, match.next_slot or 0, winner, source=match)
    logger.debug("%s advances to %s", winner.name, parent.display_position)
    return parent


def _resolve_bye(match: Match) -> None:
    filled = [p for p in match.participants if p.player is not None]
    survivor = filled[0]
    survivor.is_winner = True
    match.name = f"{survivor.player.name} - Bye"
    match.result = MatchResult(
        winner=survivor.player,
        completed_at=datetime.now(timezone.utc),
        result_type=MatchResultType.DEFAULT,
    )


def _create_first_round(
    tournament: Tournament,
    qualifiers: list[MatchParticipant],
    bracket_size: int,
) -> list[Match]:
    settings = tournament.settings
    matches = []

    for i in range(bracket_size // 2):
        match_type = determine_match_type(i, bracket_size)
        opponent = bracket_size - 1 - i
        participants = [
            qualifiers[i] if i < len(qualifiers) else MatchParticipant(),
            qualifiers[opponent] if opponent < len(qualifiers) else MatchParticipant(),
        ]
        match = Match(
            name=f"Playoff Match {i + 1}",
            match_type=match_type,
            best_of=settings.best_of_for(match_type),
            participants=participants,
            display_position="Final" if bracket_size == 2 else f"Match {i + 1}",
            round_number=1,
            index=len(tournament.playoff_matches),
        )
        filled = sum(1 for p in participants if p.player is not None)
        if filled == 2:
            match.refresh_name()
        elif filled == 1:
            _resolve_bye(match)

        tournament.playoff_matches.append(match)
        matches.append(match)

    return matches


def _create_subsequent_rounds(
    tournament: Tournament,
    previous: list[Match],
    round_number: int,
) -> None:
    if len(previous) < 2:
        return

    settings = tournament.settings
    round_size = len(previous)  # players in the new round
    current = []

    for k in range(round_size // 2):
        match_type = determine_match_type(k, round_size)
        parent = Match(
            name="TBD vs TBD",
            match_type=match_type,
            best_of=settings.best_of_for(match_type),
            display_position="Final" if round_size == 2 else f"Match {k + 1}",
            round_number=round_number,
            index=len(tournament.playoff_matches),
        )
        for slot, child in enumerate(previous[2 * k:2 * k + 2]):
            child.next_match = parent.index
            child.next_slot = slot

        tournament.playoff_matches.append(parent)
        current.append(parent)

    _create_subsequent_rounds(tournament, current, round_number + 1)


def can_create_third_place_match(tournament: Tournament) -> bool:
    """True when both semifinals are complete, neither was a bye, and none exists yet."""
    final = tournament.final_match
    if final is None or tournament.third_place_match is not None or tournament.is_complete:
        return False
    semifinals = tournament.feeders_of(final)
    return (
        len(semifinals) == 2
        and all(m.is_complete and not m.is_bye for m in semifinals)
    )


def create_third_place_match(tournament: Tournament) -> Optional[Match]:
    """
    Create the match between the two semifinal losers.

    Losers already known are placed right away, slot order following
    semifinal order. Returns the existing match if there is one, or None
    when the bracket has no proper semifinals.
    """
    existing = tournament.third_place_match
    if existing is not None:
        return existing

    final = tournament.final_match
    if final is None:
        logger.warning("%s: no final, cannot create a third place match", tournament.name)
        return None

    semifinals = tournament.feeders_of(final)
    if len(semifinals) != 2:
        logger.warning(
            "%s: expected 2 semifinals, found %d; no third place match",
            tournament.name, len(semifinals),
        )
        return None
    if any(m.is_bye for m in semifinals):
        logger.warning("%s: a semifinal was a bye; no third place match", tournament.name)
        return None

    match = Match(
        name="Third Place Match",
        match_type=TournamentMatchType.THIRD_PLACE,
        best_of=tournament.settings.best_of_third_place,
        display_position="3rd Place",
        round_number=final.round_number,
        index=len(tournament.playoff_matches),
    )
    tournament.playoff_matches.append(match)

    for slot, semifinal in enumerate(semifinals):
        semifinal.third_place_match = match.index
        loser = loser_of(semifinal)
        if loser is not None:
            place_player(match, slot, loser, source=semifinal)

    logger.info("%s: third place match created", tournament.name)
    return match


def build_playoffs(tournament: Tournament) -> list[Match]:
    """
    Build the full playoff bracket once every group is complete.

    Calling it again on a built bracket returns the existing matches.

    Raises:
        IncompleteGroupStage: if any group still has unreported matches
        InvalidPlayerCount: if fewer than 2 players qualify
    """
    if tournament.playoff_matches:
        return tournament.playoff_matches

    pending = [g.name for g in tournament.groups if not g.is_complete]
    if pending:
        raise IncompleteGroupStage(
            f"Groups not complete: {', '.join(pending)}"
        )

    if tournament.format in ELIMINATION_FORMATS:
        qualifiers = _seeded_roster(tournament)
    else:
        qualifiers = select_qualifiers(tournament)

    if len(qualifiers) < 2:
        raise InvalidPlayerCount(
            f"At least 2 qualifiers are required, got {len(qualifiers)}"
        )

    bracket_size = next_power_of_two(len(qualifiers))
    first_round = _create_first_round(tournament, qualifiers, bracket_size)
    _create_subsequent_rounds(tournament, first_round, round_number=2)

    for match in first_round:
        if match.is_bye:
            advance_winner(tournament, match)

    if tournament.settings.include_third_place_match and bracket_size >= 4:
        create_third_place_match(tournament)

    logger.info(
        "%s: bracket of %d built for %d qualifiers (%d byes)",
        tournament.name, bracket_size, len(qualifiers), bracket_size - len(qualifiers),
    )
    return tournament.playoff_matches
