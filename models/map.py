"""
Map catalog entries.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GameMap:
    """A map in the catalog, with the pools it is eligible for."""
    name: str
    map_id: Optional[str] = None
    thumbnail: Optional[str] = None
    size: Optional[str] = None  # "1v1" or "2v2"
    in_random_pool: bool = False
    in_tournament_pool: bool = False
