"""
Game configuration settings.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from machikoro.cards import STARTING_BUILDINGS, CardId


@dataclass
class GameConfig:
    """Configuration for a Machi Koro match."""

    starting_coins: int = 3
    starting_buildings: Dict[CardId, int] = field(
        default_factory=lambda: dict(STARTING_BUILDINGS)
    )

    min_players: int = 2
    max_players: Optional[int] = None

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.starting_coins < 0:
            raise ValueError("starting_coins must be non-negative")
        if self.min_players < 2:
            raise ValueError("a match needs at least two players")
        if self.max_players is not None and self.max_players < self.min_players:
            raise ValueError("max_players must be >= min_players")
