"""
Player value type for tournament participants.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Player:
    """
    A tournament participant.

    Identity is the opaque player_id only; two Player values with the
    same id are the same player even if their display names differ.
    """
    player_id: str
    display_name: str = field(default="", compare=False)

    @property
    def name(self) -> str:
        return self.display_name or self.player_id

    def __str__(self) -> str:
        return self.name
