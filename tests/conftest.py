"""
Shared fixtures for the engine tests.
"""

import random

import pytest

from models.player import Player
from models.tournament import MatchResult


@pytest.fixture
def make_players():
    """Factory: make_players(n) -> [Player("p1", "Player 1"), ...]."""
    def _make(n: int) -> list[Player]:
        return [Player(f"p{i}", f"Player {i}") for i in range(1, n + 1)]
    return _make


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def finish_groups():
    """
    Factory: finish_groups(tournament) marks every group match as won 2-0
    by the player in slot 0, updating standings by hand (no tracker).
    """
    def _finish(tournament) -> None:
        for group in tournament.groups:
            for match in group.matches:
                first, second = match.participants
                first.score, second.score = 2, 0
                first.is_winner = True
                match.result = MatchResult(winner=first.player)

                winner = group.participant_for(first.player)
                loser = group.participant_for(second.player)
                winner.wins += 1
                winner.games_won += 2
                loser.losses += 1
                loser.games_lost += 2
    return _finish
