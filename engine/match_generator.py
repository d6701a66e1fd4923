"""
Round-robin match generation for a group.
"""

import logging

from models.tournament import (
    Group,
    Match,
    MatchParticipant,
    TournamentMatchType,
)


logger = logging.getLogger(__name__)


def generate_round_robin(
    group: Group,
    best_of: int = 3,
    matches_per_player: int = 0,
) -> list[Match]:
    """
    Generate one match per unordered pair of group participants.

    The matches are stored on the group (replacing any previous ones) and
    returned. A non-zero matches_per_player asks for a partial schedule,
    which is not supported; no matches are generated in that case.
    """
    group.matches = []
    participants = group.participants

    if len(participants) < 2:
        return group.matches

    if matches_per_player != 0:
        logger.warning(
            "%s: partial schedules (%d matches per player) are not supported",
            group.name, matches_per_player,
        )
        return group.matches

    for i, first in enumerate(participants):
        for second in participants[i + 1:]:
            group.matches.append(Match(
                name=f"{first.player.name} vs {second.player.name}",
                match_type=TournamentMatchType.GROUP_STAGE,
                best_of=best_of,
                participants=[
                    MatchParticipant(player=first.player, source_group=group.name),
                    MatchParticipant(player=second.player, source_group=group.name),
                ],
            ))

    logger.debug("%s: generated %d matches", group.name, len(group.matches))
    return group.matches
