"""
Tests for the Map Ban Resolver

Tests ban removal rules per match length, pool exhaustion, validation and
the map catalog helpers.
"""

import random

import pytest

from engine.errors import InvalidMapBans, MapPoolExhausted
from engine.map_bans import (
    available_maps_for_next_game,
    compute_removals,
    random_map,
    random_map_for_next_game,
    resolve_map_bans,
    tournament_pool,
    validate_map_bans,
)
from models.map import GameMap


POOL = ["A", "B", "C", "D", "E", "F", "G"]
BIG_POOL = ["A", "B", "C", "D", "E", "F", "G", "H", "I", "J"]


class TestBestOfThree:
    """Bo3: three bans per team."""

    def test_no_common_bans(self, rng):
        """Priority 1 and 2 of each team go; priority 3 is never applied."""
        removed = compute_removals(["A", "B", "C"], ["D", "E", "F"], 3, rng)

        assert removed == ["A", "B", "D", "E"]

    def test_no_common_bans_scenario(self, rng):
        maps = resolve_map_bans(["A", "B", "C"], ["D", "E", "F"], POOL, 3, rng)

        assert len(maps) == 3
        assert sorted(maps) == ["C", "F", "G"]

    def test_one_common_ban_in_top_two(self, rng):
        """Shared ban plus one of the two priority-3 bans."""
        removed = compute_removals(["A", "B", "C"], ["D", "A", "E"], 3, rng)

        assert len(removed) == 2
        assert removed[0] == "A"
        assert removed[1] in ("C", "E")

    def test_one_common_ban_conditional_choice_varies(self):
        seen = {
            compute_removals(["A", "B", "C"], ["A", "D", "E"], 3, random.Random(seed))[1]
            for seed in range(50)
        }

        assert seen == {"C", "E"}

    def test_one_common_ban_at_priority_three(self, rng):
        """A collision involving a priority-3 ban falls back to the no-common rule."""
        removed = compute_removals(["A", "B", "C"], ["D", "E", "C"], 3, rng)

        assert removed == ["A", "B", "D", "E"]

    def test_one_common_ban_mixed_priority(self, rng):
        removed = compute_removals(["C", "A", "B"], ["D", "E", "C"], 3, rng)

        assert removed == ["C", "A", "D", "E"]

    def test_two_common_bans(self, rng):
        """Both shared maps plus each team's leftover ban."""
        removed = compute_removals(["A", "B", "C"], ["B", "A", "D"], 3, rng)

        assert sorted(removed) == ["A", "B", "C", "D"]

    def test_three_common_bans(self, rng):
        removed = compute_removals(["A", "B", "C"], ["C", "B", "A"], 3, rng)

        assert sorted(removed) == ["A", "B", "C"]

    def test_result_excludes_removed_maps(self, rng):
        maps = resolve_map_bans(["A", "B", "C"], ["B", "A", "D"], BIG_POOL, 3, rng)

        assert len(maps) == 3
        assert len(set(maps)) == 3
        assert not set(maps) & {"A", "B", "C", "D"}

    def test_wrong_ban_count_raises(self, rng):
        with pytest.raises(InvalidMapBans):
            resolve_map_bans(["A", "B"], ["D", "E", "F"], POOL, 3, rng)

    def test_duplicate_ban_raises(self, rng):
        with pytest.raises(InvalidMapBans):
            resolve_map_bans(["A", "A", "B"], ["D", "E", "F"], POOL, 3, rng)


class TestBestOfFive:
    """Bo5: two bans per team."""

    def test_no_common_bans(self, rng):
        """Only each team's first ban applies."""
        removed = compute_removals(["A", "B"], ["C", "D"], 5, rng)

        assert removed == ["A", "C"]

    def test_one_common_ban(self, rng):
        removed = compute_removals(["X", "Y"], ["X", "Z"], 5, rng)

        assert len(removed) == 2
        assert removed[0] == "X"
        assert removed[1] in ("Y", "Z")

    def test_one_common_ban_picks_either_leftover(self):
        """The tie-break is a fair choice between both leftover bans."""
        seen = {
            compute_removals(["X", "Y"], ["Z", "X"], 5, random.Random(seed))[1]
            for seed in range(50)
        }

        assert seen == {"Y", "Z"}

    def test_two_common_bans(self, rng):
        removed = compute_removals(["A", "B"], ["B", "A"], 5, rng)

        assert sorted(removed) == ["A", "B"]

    def test_five_maps_played(self, rng):
        maps = resolve_map_bans(["A", "B"], ["C", "D"], POOL, 5, rng)

        assert len(maps) == 5
        assert sorted(maps) == ["B", "D", "E", "F", "G"]

    def test_pool_exhausted(self, rng):
        with pytest.raises(MapPoolExhausted) as exc_info:
            resolve_map_bans(["A", "B"], ["C", "D"], ["A", "C", "E", "F"], 5, rng)

        assert exc_info.value.remaining == 2
        assert exc_info.value.required == 5


class TestBestOfOne:
    """Bo1: every ban applies, one random map."""

    def test_union_removed(self, rng):
        removed = compute_removals(["A", "B"], ["B", "C", "D"], 1, rng)

        assert removed == ["A", "B", "C", "D"]

    def test_single_map(self, rng):
        maps = resolve_map_bans(["A", "B", "C"], ["D", "E"], POOL, 1, rng)

        assert len(maps) == 1
        assert maps[0] in ("F", "G")

    def test_no_bans(self, rng):
        maps = resolve_map_bans([], [], POOL, 1, rng)

        assert maps[0] in POOL

    def test_everything_banned(self, rng):
        with pytest.raises(MapPoolExhausted):
            resolve_map_bans(["A", "B", "C", "D"], ["E", "F", "G"], POOL, 1, rng)


class TestResolverBehaviour:
    """General resolver properties."""

    def test_same_seed_same_result(self):
        first = resolve_map_bans(["A", "B", "C"], ["D", "E", "F"], BIG_POOL, 3,
                                 random.Random(7))
        second = resolve_map_bans(["A", "B", "C"], ["D", "E", "F"], BIG_POOL, 3,
                                  random.Random(7))

        assert first == second

    def test_duplicate_pool_entries_not_repeated(self, rng):
        maps = resolve_map_bans(["A", "B", "C"], ["D", "E", "F"],
                                POOL + ["C", "F"], 3, rng)

        assert sorted(maps) == ["C", "F", "G"]

    def test_padded_pool_names_match_bans(self, rng):
        maps = resolve_map_bans(["A"], ["B"], [" A", "B ", " C "], 1, rng)

        assert maps == ["C"]

    def test_padded_ban_names_match_pool(self, rng):
        removed = compute_removals([" A", "B", "C"], ["A ", "D", "E"], 3, rng)

        assert removed[0] == "A"
        assert len(removed) == 2

    def test_pool_not_mutated(self, rng):
        pool = list(POOL)
        resolve_map_bans(["A", "B", "C"], ["D", "E", "F"], pool, 3, rng)

        assert pool == POOL

    @pytest.mark.parametrize("best_of", [0, 2, 4, 7])
    def test_unsupported_length(self, best_of, rng):
        with pytest.raises(InvalidMapBans):
            resolve_map_bans(["A"], ["B"], POOL, best_of, rng)


class TestValidateMapBans:
    """Tests for checking a single submission."""

    def test_valid_submission(self):
        assert validate_map_bans([" A", "B ", "C"], POOL, 3) == ["A", "B", "C"]

    def test_empty_submission(self):
        with pytest.raises(InvalidMapBans):
            validate_map_bans([], POOL, 1)

    def test_blank_name(self):
        with pytest.raises(InvalidMapBans):
            validate_map_bans(["A", " ", "C"], POOL, 3)

    def test_duplicate_names(self):
        with pytest.raises(InvalidMapBans, match="more than once"):
            validate_map_bans(["A", "A", "C"], POOL, 3)

    def test_unknown_map(self):
        with pytest.raises(InvalidMapBans, match="not in the pool"):
            validate_map_bans(["A", "B", "Z"], POOL, 3)

    def test_wrong_count(self):
        with pytest.raises(InvalidMapBans):
            validate_map_bans(["A", "B", "C"], POOL, 5)


class TestMapCatalog:
    """Tests for catalog filtering and next-game selection."""

    @pytest.fixture
    def catalog(self):
        return [
            GameMap("Arena", size="1v1", in_tournament_pool=True, in_random_pool=True),
            GameMap("Canyon", size="1v1", in_tournament_pool=True),
            GameMap("Delta", size="2v2", in_tournament_pool=True, in_random_pool=True),
            GameMap("Fjord", size="1v1"),
        ]

    def test_tournament_pool_by_size(self, catalog):
        assert tournament_pool(catalog) == ["Arena", "Canyon"]
        assert tournament_pool(catalog, one_v_one=False) == ["Delta"]

    def test_empty_tournament_pool(self):
        with pytest.raises(MapPoolExhausted):
            tournament_pool([GameMap("Fjord", size="1v1")])

    def test_random_map_from_random_pool(self, catalog, rng):
        assert random_map(catalog, rng).name in ("Arena", "Delta")

    def test_random_map_empty(self, rng):
        with pytest.raises(MapPoolExhausted):
            random_map([GameMap("Fjord")], rng)

    def test_available_maps_exclude_banned_and_played(self):
        available = available_maps_for_next_game(POOL, ["A", "B"], ["C"])

        assert available == ["D", "E", "F", "G"]

    def test_available_maps_with_padded_names(self):
        available = available_maps_for_next_game([" A", "B ", "C"], ["A"], [" B"])

        assert available == ["C"]

    def test_next_game_map(self, rng):
        chosen = random_map_for_next_game(POOL, ["A", "B", "C"], ["D", "E", "F"], rng)

        assert chosen == "G"

    def test_next_game_no_maps_left(self, rng):
        with pytest.raises(MapPoolExhausted):
            random_map_for_next_game(["A", "B"], ["A"], ["B"], rng)
