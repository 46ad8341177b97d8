"""
Income resolution for a dice roll.

Resolution is a pure computation: it reads the players, accumulates every
balance change in a scratch map and returns the result. Nothing is applied
here; the match commits the deltas in one step.

Passes run in a fixed order, which is also the order of the effect log:

1. primary establishments pay every owner from the bank,
2. service establishments pay the acting player from the bank,
3. restaurants take coins from the acting player, never more than the
   acting player holds at that point of the resolution.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from machikoro.cards import CARD_DEFINITIONS, CardCategory, CardDefinition
from machikoro.player import PlayerState


@dataclass(frozen=True)
class IncomeEffect:
    """A single income payment produced by a roll."""

    category: CardCategory
    source_player_id: str
    card_name: str
    amount: int
    target_player_id: Optional[str] = None


@dataclass(frozen=True)
class IncomeResult:
    """Balance deltas per player and the ordered effect log."""

    deltas: Mapping[str, int]
    effects: Tuple[IncomeEffect, ...]

    def delta_for(self, player_id: str) -> int:
        return self.deltas.get(player_id, 0)

    @property
    def is_empty(self) -> bool:
        return not self.effects


def _triggered(player: PlayerState, category: CardCategory, total: int) -> Iterator[Tuple[CardDefinition, int]]:
    """Yield the player's establishments of ``category`` triggered by ``total``, in catalog order."""
    for card_id, card in CARD_DEFINITIONS.items():
        if card.category is not category or not card.activates_on(total):
            continue
        count = player.count(card_id)
        if count > 0:
            yield card, count


def _primary_pass(total: int, players: Sequence[PlayerState], deltas: Dict[str, int], effects: List[IncomeEffect]) -> None:
    for player in players:
        for card, count in _triggered(player, CardCategory.PRIMARY, total):
            income = card.income_for(count, player.buildings)
            deltas[player.player_id] += income
            effects.append(IncomeEffect(CardCategory.PRIMARY, player.player_id, card.name, income))


def _service_pass(total: int, current: PlayerState, deltas: Dict[str, int], effects: List[IncomeEffect]) -> None:
    for card, count in _triggered(current, CardCategory.SERVICE, total):
        income = card.income_for(count, current.buildings)
        deltas[current.player_id] += income
        effects.append(IncomeEffect(CardCategory.SERVICE, current.player_id, card.name, income))


def _restaurant_pass(
    total: int,
    players: Sequence[PlayerState],
    current: PlayerState,
    deltas: Dict[str, int],
    effects: List[IncomeEffect],
) -> None:
    for player in players:
        if player.player_id == current.player_id:
            continue
        for card, count in _triggered(player, CardCategory.RESTAURANT, total):
            requested = card.income_for(count, player.buildings)
            available = current.coins + deltas[current.player_id]
            taken = min(requested, max(available, 0))
            if taken <= 0:
                continue
            deltas[current.player_id] -= taken
            deltas[player.player_id] += taken
            effects.append(
                IncomeEffect(
                    CardCategory.RESTAURANT,
                    player.player_id,
                    card.name,
                    taken,
                    target_player_id=current.player_id,
                )
            )


def resolve_income(total: int, players: Sequence[PlayerState], current_player_id: str) -> IncomeResult:
    """
    Compute the balance changes caused by a dice total.

    Args:
        total: Dice total
        players: Players in turn order
        current_player_id: Player who rolled

    Returns:
        IncomeResult with a delta for every player (0 when untouched)

    Raises:
        KeyError: if ``current_player_id`` is not among ``players``
    """
    by_id = {p.player_id: p for p in players}
    current = by_id[current_player_id]

    deltas: Dict[str, int] = {p.player_id: 0 for p in players}
    effects: List[IncomeEffect] = []

    _primary_pass(total, players, deltas, effects)
    _service_pass(total, current, deltas, effects)
    _restaurant_pass(total, players, current, deltas, effects)

    return IncomeResult(deltas=MappingProxyType(deltas), effects=tuple(effects))
