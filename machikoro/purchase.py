"""
Purchase validation.

``validate_purchase`` only reads; on success it returns the change to
commit, on failure it raises before anything is touched.
"""

from dataclasses import dataclass
from typing import Union

from machikoro.cards import CardId, LandmarkDefinition, LandmarkId, lookup
from machikoro.exceptions import (
    AlreadyOwnedError,
    IllegalStateError,
    InsufficientFundsError,
    InvalidReferenceError,
)
from machikoro.player import PlayerState
from machikoro.turns import Phase, require_phase


@dataclass(frozen=True)
class PurchaseResult:
    """A validated purchase, ready to commit."""

    player_id: str
    asset_id: Union[CardId, LandmarkId]
    name: str
    cost: int
    new_balance: int

    @property
    def is_landmark(self) -> bool:
        return isinstance(self.asset_id, LandmarkId)


def validate_purchase(
    phase: Phase,
    player: PlayerState,
    current_player_id: str,
    asset_id: Union[str, CardId, LandmarkId],
) -> PurchaseResult:
    """
    Validate that ``player`` may buy ``asset_id`` now.

    Checks run in order and the first failure is raised:
    buying phase, player's turn, known id, enough coins, landmark not built.

    Raises:
        IllegalStateError: wrong phase or not the player's turn
        InvalidReferenceError: unknown establishment or landmark
        InsufficientFundsError: cost exceeds the player's coins
        AlreadyOwnedError: landmark already built
    """
    require_phase(phase, Phase.BUYING, "buy")
    if player.player_id != current_player_id:
        raise IllegalStateError(f"it is not {player.name}'s turn")

    definition = lookup(asset_id)
    if definition is None:
        raise InvalidReferenceError(f"unknown card: {asset_id!r}")

    if player.coins < definition.cost:
        raise InsufficientFundsError(
            f"{definition.name} costs {definition.cost}, {player.name} has {player.coins}"
        )

    if isinstance(definition, LandmarkDefinition):
        if player.owns_landmark(definition.landmark_id):
            raise AlreadyOwnedError(f"{player.name} already built {definition.name}")
        key: Union[CardId, LandmarkId] = definition.landmark_id
    else:
        key = definition.card_id

    return PurchaseResult(
        player_id=player.player_id,
        asset_id=key,
        name=definition.name,
        cost=definition.cost,
        new_balance=player.coins - definition.cost,
    )
