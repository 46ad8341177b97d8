"""
Turn state machine.

Phases:
    waiting -> rolling        host starts a match with enough players
    rolling -> buying         a roll has been resolved and applied
    buying  -> rolling        same player on a bonus turn, otherwise the next one

Transitions are computed as values; the match applies them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from machikoro.cards import LandmarkEffect, landmark_with_effect
from machikoro.dice import DiceRoll
from machikoro.exceptions import IllegalStateError
from machikoro.player import PlayerState


class Phase(str, Enum):
    """Match phase."""

    WAITING = "waiting"
    ROLLING = "rolling"
    BUYING = "buying"


@dataclass(frozen=True)
class TurnTransition:
    """Result of a phase transition."""

    phase: Phase
    current_player_index: int
    turn: int
    bonus_turn: bool = False
    clears_roll: bool = True


def require_phase(phase: Phase, expected: Phase, action: str) -> None:
    """Reject ``action`` unless the match is in ``expected``."""
    if phase is not expected:
        raise IllegalStateError(f"cannot {action} during the {phase.value} phase")


def start_transition(phase: Phase, player_count: int, min_players: int = 2) -> TurnTransition:
    """waiting -> rolling, first player to act, turn 1."""
    if phase is not Phase.WAITING:
        raise IllegalStateError("match has already started")
    if player_count < min_players:
        raise IllegalStateError(
            f"need at least {min_players} players to start, have {player_count}"
        )
    return TurnTransition(Phase.ROLLING, current_player_index=0, turn=1)


def roll_transition(phase: Phase, current_player_index: int, turn: int) -> TurnTransition:
    """rolling -> buying. The roll itself is kept."""
    require_phase(phase, Phase.ROLLING, "roll")
    return TurnTransition(Phase.BUYING, current_player_index, turn, clears_roll=False)


def bonus_turn_eligible(player: PlayerState, last_roll: Optional[DiceRoll]) -> bool:
    """Doubles with the bonus-turn landmark built grant another turn."""
    landmark = landmark_with_effect(LandmarkEffect.BONUS_TURN_ON_DOUBLE)
    return player.owns_landmark(landmark.landmark_id) and last_roll is not None and last_roll.is_double


def end_turn_transition(
    phase: Phase,
    current_player_index: int,
    turn: int,
    player_count: int,
    bonus_eligible: bool,
) -> TurnTransition:
    """
    buying -> rolling.

    On a bonus turn the index and turn counter stay put. Otherwise the index
    advances by one and the turn counter increments when it wraps to 0.
    """
    require_phase(phase, Phase.BUYING, "end the turn")
    if bonus_eligible:
        return TurnTransition(Phase.ROLLING, current_player_index, turn, bonus_turn=True)

    next_index = (current_player_index + 1) % player_count
    next_turn = turn + 1 if next_index == 0 else turn
    return TurnTransition(Phase.ROLLING, next_index, next_turn)
