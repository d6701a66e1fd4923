"""
Tests for Group Formation

Tests group count and size tables, snake-draft seeding and random
distribution.
"""

import itertools
import random

import pytest

from engine.errors import DuplicatePlayer, InvalidPlayerCount
from engine.group_formation import (
    create_groups,
    determine_group_count,
    get_optimal_group_sizes,
    snake_order,
)
from models.player import Player
from models.tournament import TournamentFormat


GROUP_STAGE = TournamentFormat.GROUP_STAGE_WITH_PLAYOFFS


class TestGroupTables:
    """Tests for group count and size lookup."""

    @pytest.mark.parametrize("player_count,expected_sizes", [
        (7, [7]),
        (8, [4, 4]),
        (9, [3, 3, 3]),
        (10, [5, 5]),
        (11, [4, 4, 3]),
        (12, [4, 4, 4]),
        (13, [4, 4, 5]),
        (14, [7, 7]),
        (15, [5, 5, 5]),
        (16, [4, 4, 4, 4]),
        (17, [6, 6, 5]),
        (18, [6, 6, 6]),
    ])
    def test_literal_table(self, player_count, expected_sizes):
        """Counts 7-18 use the exact partition and sum to the player count."""
        group_count = determine_group_count(player_count, GROUP_STAGE)
        sizes = get_optimal_group_sizes(player_count, group_count)

        assert group_count == len(expected_sizes)
        assert sizes == expected_sizes
        assert sum(sizes) == player_count

    def test_small_tournaments_use_one_group(self):
        for count in range(1, 7):
            assert determine_group_count(count, GROUP_STAGE) == 1

    def test_large_tournaments_use_four_groups(self):
        assert determine_group_count(19, GROUP_STAGE) == 4
        assert determine_group_count(64, GROUP_STAGE) == 4

    def test_even_split_for_unlisted_counts(self):
        """First groups take the remainder."""
        assert get_optimal_group_sizes(30, 4) == [8, 8, 7, 7]
        assert get_optimal_group_sizes(20, 4) == [5, 5, 5, 5]

    def test_literal_table_ignored_when_group_count_differs(self):
        """Round robin with 9 players is one group of 9, not 3x3."""
        assert get_optimal_group_sizes(9, 1) == [9]

    @pytest.mark.parametrize("fmt", [
        TournamentFormat.ROUND_ROBIN,
        TournamentFormat.SINGLE_ELIMINATION,
        TournamentFormat.DOUBLE_ELIMINATION,
    ])
    def test_single_group_formats(self, fmt):
        assert determine_group_count(16, fmt) == 1

    def test_zero_players_raises(self):
        with pytest.raises(InvalidPlayerCount):
            determine_group_count(0, GROUP_STAGE)

    def test_zero_groups_raises(self):
        with pytest.raises(InvalidPlayerCount):
            get_optimal_group_sizes(8, 0)


class TestSnakeOrder:
    """Tests for the snake-draft index sequence."""

    def test_three_groups(self):
        order = list(itertools.islice(snake_order(3), 12))
        assert order == [0, 1, 2, 2, 1, 0, 0, 1, 2, 2, 1, 0]

    def test_two_groups(self):
        order = list(itertools.islice(snake_order(2), 6))
        assert order == [0, 1, 1, 0, 0, 1]

    def test_single_group(self):
        assert list(itertools.islice(snake_order(1), 4)) == [0, 0, 0, 0]


class TestCreateGroups:
    """Tests for distributing a roster into groups."""

    def test_random_distribution_fills_target_sizes(self, make_players, rng):
        players = make_players(13)

        groups = create_groups(players, rng=rng)

        assert [g.name for g in groups] == ["Group A", "Group B", "Group C"]
        assert [len(g.participants) for g in groups] == [4, 4, 5]

        placed = [p.player for g in groups for p in g.participants]
        assert sorted(p.player_id for p in placed) == sorted(p.player_id for p in players)

    def test_random_distribution_is_reproducible(self, make_players):
        players = make_players(9)

        first = create_groups(players, rng=random.Random(42))
        second = create_groups(players, rng=random.Random(42))

        def ids(groups):
            return [[p.player.player_id for p in g.participants] for g in groups]

        assert ids(first) == ids(second)

    def test_snake_draft_with_full_seeding(self, make_players, rng):
        """12 seeded players in 3 groups zig-zag A B C C B A A B C C B A."""
        players = make_players(12)
        seeds = {p: i + 1 for i, p in enumerate(players)}

        groups = create_groups(players, seeds=seeds, rng=rng)

        assert [p.seed for p in groups[0].participants] == [1, 6, 7, 12]
        assert [p.seed for p in groups[1].participants] == [2, 5, 8, 11]
        assert [p.seed for p in groups[2].participants] == [3, 4, 9, 10]

    def test_seed_order_not_roster_order(self, make_players, rng):
        """Seeds are walked ascending regardless of roster order."""
        players = make_players(8)
        seeds = {p: 8 - i for i, p in enumerate(players)}  # p8 is seed 1

        groups = create_groups(players, seeds=seeds, rng=rng)

        assert groups[0].participants[0].player.player_id == "p8"
        assert groups[1].participants[0].player.player_id == "p7"

    def test_snake_draft_skips_full_groups(self, make_players, rng):
        players = make_players(11)
        seeds = {p: i + 1 for i, p in enumerate(players)}

        groups = create_groups(players, seeds=seeds, rng=rng)

        assert [len(g.participants) for g in groups] == [4, 4, 3]
        assert [p.seed for p in groups[1].participants] == [2, 5, 8, 10]
        assert [p.seed for p in groups[0].participants] == [1, 6, 7, 11]

    def test_partial_seeding_spreads_top_seeds(self, make_players, rng):
        """Unseeded players top up the emptiest groups."""
        players = make_players(9)
        seeds = {players[0]: 1, players[1]: 2, players[2]: 3}

        groups = create_groups(players, seeds=seeds, rng=rng)

        assert [len(g.participants) for g in groups] == [3, 3, 3]
        for group, seed in zip(groups, [1, 2, 3]):
            assert group.participants[0].seed == seed
            assert all(p.seed == 0 for p in group.participants[1:])

    def test_zero_seeds_treated_as_unseeded(self, make_players, rng):
        players = make_players(8)
        seeds = {p: 0 for p in players}

        groups = create_groups(players, seeds=seeds, rng=rng)

        assert [len(g.participants) for g in groups] == [4, 4]
        assert all(p.seed == 0 for g in groups for p in g.participants)

    def test_single_elimination_one_group(self, make_players, rng):
        groups = create_groups(
            make_players(6), fmt=TournamentFormat.SINGLE_ELIMINATION, rng=rng
        )

        assert len(groups) == 1
        assert len(groups[0].participants) == 6

    def test_too_few_players_raises(self, make_players):
        with pytest.raises(InvalidPlayerCount):
            create_groups(make_players(1))
        with pytest.raises(InvalidPlayerCount):
            create_groups([])

    def test_duplicate_player_raises(self):
        """Identity is the id, not the display name."""
        players = [Player("p1", "Alice"), Player("p2", "Bob"), Player("p1", "Alias")]

        with pytest.raises(DuplicatePlayer):
            create_groups(players)
