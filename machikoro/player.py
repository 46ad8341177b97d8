"""
Player state and management.
"""

from typing import Dict, Mapping, Optional

from machikoro.cards import CardId, LandmarkId, all_landmark_ids


class PlayerState:
    """Represents the complete state of a player in a match."""

    def __init__(
        self,
        player_id: str,
        name: str,
        starting_coins: int,
        starting_buildings: Optional[Mapping[CardId, int]] = None,
    ):
        self.player_id = player_id
        self.name = name
        self.coins = starting_coins
        self.buildings: Dict[CardId, int] = dict(starting_buildings or {})
        self.landmarks: Dict[LandmarkId, bool] = {
            landmark_id: False for landmark_id in all_landmark_ids()
        }

    def count(self, card_id: CardId) -> int:
        """Number of copies of an establishment owned."""
        return self.buildings.get(card_id, 0)

    def owns_landmark(self, landmark_id: LandmarkId) -> bool:
        return self.landmarks.get(landmark_id, False)

    def has_all_landmarks(self) -> bool:
        return all(self.landmarks.values())

    def __repr__(self) -> str:
        built = sum(1 for owned in self.landmarks.values() if owned)
        return (
            f"PlayerState(id='{self.player_id}', name='{self.name}', "
            f"coins={self.coins}, landmarks={built}/{len(self.landmarks)})"
        )
