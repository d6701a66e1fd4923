"""
Group Formation Engine

Decides how many groups a roster is split into, how large each group is,
and which player lands in which group.

Seeded players are walked into groups in snake-draft order:
    A, B, C, C, B, A, A, B, C, ...
Unseeded players are shuffled and topped up into the emptiest group.
"""

import logging
import random
from typing import Iterator, Optional

from engine.errors import DuplicatePlayer, InvalidPlayerCount
from models.player import Player
from models.tournament import (
    ELIMINATION_FORMATS,
    Group,
    GroupParticipant,
    TournamentFormat,
)


logger = logging.getLogger(__name__)


# player count -> group count for GroupStageWithPlayoffs
GROUP_COUNT_TABLE: dict[int, int] = {
    7: 1,
    8: 2,
    9: 3,
    10: 2,
    11: 3,
    12: 3,
    13: 3,
    14: 2,
    15: 3,
    16: 4,
    17: 3,
    18: 3,
}

# player count -> literal group sizes
GROUP_SIZE_TABLE: dict[int, list[int]] = {
    7: [7],
    8: [4, 4],
    9: [3, 3, 3],
    10: [5, 5],
    11: [4, 4, 3],
    12: [4, 4, 4],
    13: [4, 4, 5],
    14: [7, 7],
    15: [5, 5, 5],
    16: [4, 4, 4, 4],
    17: [6, 6, 5],
    18: [6, 6, 6],
}

LARGE_TOURNAMENT_GROUPS = 4


def determine_group_count(player_count: int, fmt: TournamentFormat) -> int:
    """
    Number of groups for a roster size and format.

    Elimination and round-robin formats always use a single group.
    """
    if player_count <= 0:
        raise InvalidPlayerCount(f"Cannot form groups from {player_count} players")

    if fmt in ELIMINATION_FORMATS or fmt == TournamentFormat.ROUND_ROBIN:
        return 1

    if player_count < 7:
        return 1
    return GROUP_COUNT_TABLE.get(player_count, LARGE_TOURNAMENT_GROUPS)


def get_optimal_group_sizes(player_count: int, group_count: int) -> list[int]:
    """
    Target size of each group.

    The literal table is used when it agrees with group_count; anything
    else is split evenly with the remainder going to the first groups.
    """
    if group_count <= 0:
        raise InvalidPlayerCount("Group count must be positive")

    literal = GROUP_SIZE_TABLE.get(player_count)
    if literal is not None and len(literal) == group_count:
        return list(literal)

    base, remainder = divmod(player_count, group_count)
    return [base + (1 if i < remainder else 0) for i in range(group_count)]


def group_name(index: int) -> str:
    return f"Group {chr(ord('A') + index)}"


def snake_order(group_count: int) -> Iterator[int]:
    """
    Endless snake-draft sequence of group indices.

    The end groups are visited twice on each turn: 0, 1, 2, 2, 1, 0, 0, ...
    """
    index = 0
    forward = True
    while True:
        yield index
        if group_count == 1:
            continue
        if forward:
            if index == group_count - 1:
                forward = False
            else:
                index += 1
        else:
            if index == 0:
                forward = True
            else:
                index -= 1


def _check_roster(players: list[Player]) -> None:
    if len(players) < 2:
        raise InvalidPlayerCount(f"At least 2 players are required, got {len(players)}")

    seen: set[Player] = set()
    for player in players:
        if player in seen:
            raise DuplicatePlayer(f"Player {player.player_id} appears more than once")
        seen.add(player)


def create_groups(
    players: list[Player],
    seeds: Optional[dict[Player, int]] = None,
    fmt: TournamentFormat = TournamentFormat.GROUP_STAGE_WITH_PLAYOFFS,
    rng: Optional[random.Random] = None,
) -> list[Group]:
    """
    Partition a roster into named groups.

    Args:
        players: Roster; every player must be distinct
        seeds: Optional player -> seed (1 = top seed, 0 = unseeded)
        fmt: Tournament format, drives the group count
        rng: Random source for shuffling

    Returns:
        Groups with participants filled in and no matches yet
    """
    _check_roster(players)
    rng = rng or random.Random()

    group_count = determine_group_count(len(players), fmt)
    sizes = get_optimal_group_sizes(len(players), group_count)
    groups = [Group(name=group_name(i)) for i in range(group_count)]

    logger.info(
        "Creating %d groups for %d players with sizes %s",
        group_count, len(players), sizes,
    )

    seeds = {p: s for p, s in (seeds or {}).items() if s > 0}
    if seeds:
        _distribute_seeded(groups, sizes, players, seeds, rng)
    else:
        _distribute_randomly(groups, sizes, players, rng)

    return groups


def _distribute_seeded(
    groups: list[Group],
    sizes: list[int],
    players: list[Player],
    seeds: dict[Player, int],
    rng: random.Random,
) -> None:
    seeded = sorted((p for p in players if p in seeds), key=lambda p: seeds[p])
    unseeded = [p for p in players if p not in seeds]

    order = snake_order(len(groups))
    for player in seeded:
        index = next(order)
        # Skip groups that already hold their target size
        while len(groups[index].participants) >= sizes[index]:
            index = next(order)
        groups[index].participants.append(
            GroupParticipant(player=player, seed=seeds[player])
        )

    rng.shuffle(unseeded)
    for player in unseeded:
        open_groups = [
            i for i, g in enumerate(groups) if len(g.participants) < sizes[i]
        ]
        index = min(open_groups, key=lambda i: len(groups[i].participants))
        groups[index].participants.append(GroupParticipant(player=player))


def _distribute_randomly(
    groups: list[Group],
    sizes: list[int],
    players: list[Player],
    rng: random.Random,
) -> None:
    shuffled = list(players)
    rng.shuffle(shuffled)

    position = 0
    for group, size in zip(groups, sizes):
        for player in shuffled[position:position + size]:
            group.participants.append(GroupParticipant(player=player))
        position += size
