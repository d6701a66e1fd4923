"""
Map Ban Resolver

Turns two priority-ordered ban lists into the maps played in a Bo1/Bo3/Bo5.

Which maps get removed depends on the match length and on how many bans
the two teams share. Only the tie-break choices and the final draw are
random; everything else is deterministic for the same input.
"""

import logging
import random
from typing import Iterable, Optional

from config import MAP_BAN_SETTINGS
from engine.errors import InvalidMapBans, MapPoolExhausted
from models.map import GameMap


logger = logging.getLogger(__name__)


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(name.strip() for name in names))


def _check_ban_counts(team1_bans: list[str], team2_bans: list[str], best_of: int) -> None:
    if best_of not in MAP_BAN_SETTINGS.match_lengths:
        raise InvalidMapBans(f"Unsupported match length: Bo{best_of}")

    required = MAP_BAN_SETTINGS.required_bans(best_of)
    if required is None:
        return
    for team, bans in (("team 1", team1_bans), ("team 2", team2_bans)):
        if len(bans) != required:
            raise InvalidMapBans(
                f"Bo{best_of} needs {required} bans per team, {team} sent {len(bans)}"
            )
        if len(set(bans)) != len(bans):
            raise InvalidMapBans(f"{team} banned the same map twice")


def _bo3_removals(team1: list[str], team2: list[str], rng: random.Random) -> list[str]:
    common = [m for m in team1 if m in team2]

    if len(common) == 1:
        shared = common[0]
        if team1.index(shared) < 2 and team2.index(shared) < 2:
            # Collision among the guaranteed bans: one priority-3 ban applies
            conditional = rng.choice([team1[2], team2[2]])
            return [shared, conditional]
        return _unique(team1[:2] + team2[:2])

    if len(common) == 2:
        leftovers = [m for m in team1 if m not in common] + [m for m in team2 if m not in common]
        return _unique(common + leftovers)

    if len(common) == 3:
        return list(team1)

    return _unique(team1[:2] + team2[:2])


def _bo5_removals(team1: list[str], team2: list[str], rng: random.Random) -> list[str]:
    common = [m for m in team1 if m in team2]

    if len(common) == 1:
        shared = common[0]
        candidates = [m for m in team1 if m != shared] + [m for m in team2 if m != shared]
        return [shared, rng.choice(candidates)]

    if len(common) == 2:
        return list(team1)

    return _unique([team1[0], team2[0]])


def compute_removals(
    team1_bans: list[str],
    team2_bans: list[str],
    best_of: int,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """
    Maps removed from the pool for the given bans and match length.

    Raises:
        InvalidMapBans: unsupported length or wrong number of bans
    """
    team1_bans = [name.strip() for name in team1_bans]
    team2_bans = [name.strip() for name in team2_bans]
    _check_ban_counts(team1_bans, team2_bans, best_of)
    rng = rng or random.Random()

    if best_of == 1:
        return _unique(team1_bans + team2_bans)
    if best_of == 3:
        return _bo3_removals(team1_bans, team2_bans, rng)
    return _bo5_removals(team1_bans, team2_bans, rng)


def resolve_map_bans(
    team1_bans: list[str],
    team2_bans: list[str],
    pool: list[str],
    best_of: int,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """
    Resolve both teams' bans into the ordered list of maps to play.

    Args:
        team1_bans: Team 1 bans, index 0 = highest priority
        team2_bans: Team 2 bans, index 0 = highest priority
        pool: Candidate maps
        best_of: Match length (1, 3 or 5)
        rng: Random source for tie-breaks and the final draw

    Returns:
        best_of distinct maps in play order

    Raises:
        InvalidMapBans: unsupported length or wrong number of bans
        MapPoolExhausted: fewer than best_of maps survive the bans
    """
    rng = rng or random.Random()
    removed = compute_removals(team1_bans, team2_bans, best_of, rng)
    remaining = [m for m in _unique(pool) if m not in removed]

    logger.debug("Bo%d bans removed %s, %d maps remain", best_of, removed, len(remaining))

    if len(remaining) < best_of:
        raise MapPoolExhausted(
            f"Only {len(remaining)} maps remain after bans, Bo{best_of} needs {best_of}",
            remaining=len(remaining),
            required=best_of,
        )

    if best_of == 1:
        return [rng.choice(remaining)]

    rng.shuffle(remaining)
    return remaining[:best_of]


def validate_map_bans(bans: list[str], pool: list[str], best_of: int) -> list[str]:
    """
    Check one team's submission against a pool and match length.

    Returns:
        The stripped ban names

    Raises:
        InvalidMapBans: blank, duplicate or unknown names, or the wrong count
    """
    if best_of not in MAP_BAN_SETTINGS.match_lengths:
        raise InvalidMapBans(f"Unsupported match length: Bo{best_of}")

    cleaned = [name.strip() for name in bans]
    if not cleaned:
        raise InvalidMapBans("No maps were banned")
    if any(not name for name in cleaned):
        raise InvalidMapBans("Map ban names cannot be empty")

    duplicates = sorted({name for name in cleaned if cleaned.count(name) > 1})
    if duplicates:
        raise InvalidMapBans(f"Maps banned more than once: {', '.join(duplicates)}")

    unknown = [name for name in cleaned if name not in pool]
    if unknown:
        raise InvalidMapBans(f"Maps not in the pool: {', '.join(unknown)}")

    required = MAP_BAN_SETTINGS.required_bans(best_of)
    if required is not None and len(cleaned) != required:
        raise InvalidMapBans(f"Bo{best_of} needs {required} bans, got {len(cleaned)}")

    return cleaned


# ============ Map catalog helpers ============

def tournament_pool(catalog: list[GameMap], one_v_one: bool = True) -> list[str]:
    """Names of tournament-eligible maps of the right size."""
    size = "1v1" if one_v_one else "2v2"
    names = [m.name for m in catalog if m.in_tournament_pool and m.size == size]
    if not names:
        raise MapPoolExhausted(f"No {size} maps in the tournament pool")
    return names


def random_map(catalog: list[GameMap], rng: Optional[random.Random] = None) -> GameMap:
    """A random map from the random-eligible part of the catalog."""
    eligible = [m for m in catalog if m.in_random_pool]
    if not eligible:
        raise MapPoolExhausted("No maps in the random pool")
    return (rng or random.Random()).choice(eligible)


def available_maps_for_next_game(
    pool: list[str],
    banned: Iterable[str],
    played: Iterable[str],
) -> list[str]:
    """Pool maps that are neither banned nor already played in the series."""
    excluded = {name.strip() for name in banned} | {name.strip() for name in played}
    return [m for m in _unique(pool) if m not in excluded]


def random_map_for_next_game(
    pool: list[str],
    banned: Iterable[str],
    played: Iterable[str],
    rng: Optional[random.Random] = None,
) -> str:
    """
    Pick the next game's map.

    Raises:
        MapPoolExhausted: when every map is banned or played
    """
    available = available_maps_for_next_game(pool, banned, played)
    if not available:
        raise MapPoolExhausted("No maps left for the next game", required=1)
    return (rng or random.Random()).choice(available)
