"""
Dice rolls.
"""

import random
from dataclasses import dataclass
from typing import Sequence, Tuple

from machikoro.exceptions import InvalidRollError

MIN_DICE = 1
MAX_DICE = 2
DIE_FACES = 6


@dataclass(frozen=True)
class DiceRoll:
    """One or two die values as rolled by the acting player."""

    dice: Tuple[int, ...]

    def __post_init__(self) -> None:
        if not MIN_DICE <= len(self.dice) <= MAX_DICE:
            raise InvalidRollError(f"expected 1 or 2 dice, got {len(self.dice)}")
        for value in self.dice:
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidRollError(f"die value must be an integer, got {value!r}")
            if not 1 <= value <= DIE_FACES:
                raise InvalidRollError(f"die value {value} is outside 1..{DIE_FACES}")

    @classmethod
    def from_values(cls, values: Sequence[int]) -> "DiceRoll":
        if not isinstance(values, (list, tuple)):
            raise InvalidRollError(f"dice must be a list of values, got {values!r}")
        return cls(tuple(values))

    @property
    def total(self) -> int:
        return sum(self.dice)

    @property
    def is_double(self) -> bool:
        return len(self.dice) == 2 and self.dice[0] == self.dice[1]

    def __str__(self) -> str:
        faces = "+".join(str(d) for d in self.dice)
        suffix = " (double)" if self.is_double else ""
        return f"{faces}={self.total}{suffix}"


def check_dice_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidRollError(f"dice count must be an integer, got {count!r}")
    if not MIN_DICE <= count <= MAX_DICE:
        raise InvalidRollError(f"can only roll 1 or 2 dice, not {count}")


def roll_dice(rng: random.Random, count: int = 1) -> DiceRoll:
    """Roll ``count`` dice using the given RNG."""
    check_dice_count(count)
    return DiceRoll(tuple(rng.randint(1, DIE_FACES) for _ in range(count)))
