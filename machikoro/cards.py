"""
Establishment and landmark catalog.

The catalog is fixed: every match shares the same read-only tables, keyed
by the enum ids below so that an unknown id is a checked case rather than a
silent dictionary miss.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union


class CardCategory(str, Enum):
    """Income-trigger class of an establishment."""

    PRIMARY = "primary"
    SERVICE = "service"
    RESTAURANT = "restaurant"

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS[self]


_CATEGORY_COLORS = {
    CardCategory.PRIMARY: "blue",
    CardCategory.SERVICE: "green",
    CardCategory.RESTAURANT: "red",
}


class LandmarkEffect(str, Enum):
    """Unique rule tag carried by each landmark."""

    EXTRA_DIE_CHOICE = "extra-die-choice"
    SHOP_BONUS = "shop-bonus"
    BONUS_TURN_ON_DOUBLE = "bonus-turn-on-double"
    REROLL_ONCE = "reroll-once"


class CardId(str, Enum):
    WHEAT_FIELD = "wheat-field"
    RANCH = "ranch"
    FOREST = "forest"
    MINE = "mine"
    BAKERY = "bakery"
    CONVENIENCE_STORE = "convenience-store"
    CHEESE_FACTORY = "cheese-factory"
    FURNITURE_FACTORY = "furniture-factory"
    CAFE = "cafe"
    FAMILY_RESTAURANT = "family-restaurant"


class LandmarkId(str, Enum):
    TRAIN_STATION = "train-station"
    SHOPPING_MALL = "shopping-mall"
    AMUSEMENT_PARK = "amusement-park"
    RADIO_TOWER = "radio-tower"


@dataclass(frozen=True)
class MultiplierRule:
    """Income equals ``amount`` times the owner's count of ``per_card``."""

    per_card: CardId
    amount: int


@dataclass(frozen=True)
class CardDefinition:
    """Data for an establishment."""

    card_id: CardId
    name: str
    cost: int
    category: CardCategory
    activation: Tuple[int, ...]
    income: int
    multiplier: Optional[MultiplierRule] = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.cost <= 0:
            raise ValueError(f"{self.name}: cost must be positive")
        if not self.activation:
            raise ValueError(f"{self.name}: activation numbers must not be empty")
        if any(n < 1 or n > 12 for n in self.activation):
            raise ValueError(f"{self.name}: activation numbers must be within 1..12")
        if self.income < 0:
            raise ValueError(f"{self.name}: income must be non-negative")

    def activates_on(self, total: int) -> bool:
        """Check whether a dice total triggers this establishment."""
        return total in self.activation

    def income_for(self, count: int, buildings: Mapping[CardId, int]) -> int:
        """
        Calculate the income of ``count`` copies for an owner holding ``buildings``.

        A multiplier rule replaces the base calculation entirely.
        """
        if self.multiplier is not None:
            return self.multiplier.amount * buildings.get(self.multiplier.per_card, 0)
        return self.income * count


@dataclass(frozen=True)
class LandmarkDefinition:
    """Data for a landmark."""

    landmark_id: LandmarkId
    name: str
    cost: int
    effect: LandmarkEffect
    description: str = ""


Definition = Union[CardDefinition, LandmarkDefinition]


CARD_DEFINITIONS: Mapping[CardId, CardDefinition] = MappingProxyType(
    {
        card.card_id: card
        for card in (
            CardDefinition(
                CardId.WHEAT_FIELD, "Wheat Field", 1, CardCategory.PRIMARY, (1,), 1,
                description="Get 1 coin from the bank on anyone's turn",
            ),
            CardDefinition(
                CardId.RANCH, "Ranch", 1, CardCategory.PRIMARY, (2,), 1,
                description="Get 1 coin from the bank on anyone's turn",
            ),
            CardDefinition(
                CardId.FOREST, "Forest", 3, CardCategory.PRIMARY, (5,), 1,
                description="Get 1 coin from the bank on anyone's turn",
            ),
            CardDefinition(
                CardId.MINE, "Mine", 6, CardCategory.PRIMARY, (9,), 5,
                description="Get 5 coins from the bank on anyone's turn",
            ),
            CardDefinition(
                CardId.BAKERY, "Bakery", 1, CardCategory.SERVICE, (2, 3), 1,
                description="Get 1 coin from the bank on your turn",
            ),
            CardDefinition(
                CardId.CONVENIENCE_STORE, "Convenience Store", 2, CardCategory.SERVICE, (4,), 3,
                description="Get 3 coins from the bank on your turn",
            ),
            CardDefinition(
                CardId.CHEESE_FACTORY, "Cheese Factory", 5, CardCategory.SERVICE, (7,), 3,
                multiplier=MultiplierRule(CardId.RANCH, 3),
                description="Get 3 coins per Ranch from the bank on your turn",
            ),
            CardDefinition(
                CardId.FURNITURE_FACTORY, "Furniture Factory", 3, CardCategory.SERVICE, (8,), 3,
                multiplier=MultiplierRule(CardId.FOREST, 3),
                description="Get 3 coins per Forest from the bank on your turn",
            ),
            CardDefinition(
                CardId.CAFE, "Cafe", 2, CardCategory.RESTAURANT, (3,), 1,
                description="Get 1 coin from the active player on their turn",
            ),
            CardDefinition(
                CardId.FAMILY_RESTAURANT, "Family Restaurant", 3, CardCategory.RESTAURANT, (9, 10), 2,
                description="Get 2 coins from the active player on their turn",
            ),
        )
    }
)

LANDMARK_DEFINITIONS: Mapping[LandmarkId, LandmarkDefinition] = MappingProxyType(
    {
        landmark.landmark_id: landmark
        for landmark in (
            LandmarkDefinition(
                LandmarkId.TRAIN_STATION, "Train Station", 4, LandmarkEffect.EXTRA_DIE_CHOICE,
                "Choose to roll 1 or 2 dice",
            ),
            LandmarkDefinition(
                LandmarkId.SHOPPING_MALL, "Shopping Mall", 10, LandmarkEffect.SHOP_BONUS,
                "Restaurants and shops earn +1 coin",
            ),
            LandmarkDefinition(
                LandmarkId.AMUSEMENT_PARK, "Amusement Park", 16, LandmarkEffect.BONUS_TURN_ON_DOUBLE,
                "Take another turn on doubles",
            ),
            LandmarkDefinition(
                LandmarkId.RADIO_TOWER, "Radio Tower", 22, LandmarkEffect.REROLL_ONCE,
                "Reroll dice once per turn",
            ),
        )
    }
)

STARTING_BUILDINGS: Mapping[CardId, int] = MappingProxyType(
    {CardId.WHEAT_FIELD: 1, CardId.BAKERY: 1}
)


def _parse(enum_cls, asset_id):
    if isinstance(asset_id, enum_cls):
        return asset_id
    try:
        return enum_cls(asset_id)
    except ValueError:
        return None


def parse_card_id(asset_id: Union[str, CardId]) -> Optional[CardId]:
    return _parse(CardId, asset_id)


def parse_landmark_id(asset_id: Union[str, LandmarkId]) -> Optional[LandmarkId]:
    return _parse(LandmarkId, asset_id)


def lookup(asset_id: Union[str, CardId, LandmarkId]) -> Optional[Definition]:
    """
    Resolve an establishment or landmark id.

    Returns:
        The definition, or None when the id is not in the catalog.
    """
    card_id = parse_card_id(asset_id)
    if card_id is not None:
        return CARD_DEFINITIONS[card_id]
    landmark_id = parse_landmark_id(asset_id)
    if landmark_id is not None:
        return LANDMARK_DEFINITIONS[landmark_id]
    return None


def get_card(card_id: CardId) -> CardDefinition:
    return CARD_DEFINITIONS[card_id]


def get_landmark(landmark_id: LandmarkId) -> LandmarkDefinition:
    return LANDMARK_DEFINITIONS[landmark_id]


def landmark_with_effect(effect: LandmarkEffect) -> LandmarkDefinition:
    """Find the landmark carrying a given rule tag."""
    for landmark in LANDMARK_DEFINITIONS.values():
        if landmark.effect is effect:
            return landmark
    raise KeyError(effect)


def all_card_ids() -> Tuple[CardId, ...]:
    return tuple(CARD_DEFINITIONS)


def all_landmark_ids() -> Tuple[LandmarkId, ...]:
    return tuple(LANDMARK_DEFINITIONS)
