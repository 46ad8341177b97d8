"""
High-level rules API for controlling match flow.
This module provides the public interface for actions and legal move detection.
"""

from enum import Enum
from typing import Any, List, Union

from machikoro.cards import (
    CARD_DEFINITIONS,
    LANDMARK_DEFINITIONS,
    LandmarkEffect,
    landmark_with_effect,
)
from machikoro.dice import DiceRoll
from machikoro.exceptions import IllegalStateError
from machikoro.game import MatchState, RollOutcome, TurnOutcome
from machikoro.purchase import PurchaseResult
from machikoro.turns import Phase, TurnTransition


class ActionType(Enum):
    """Types of actions a player can take."""

    START_GAME = "start_game"
    ROLL_DICE = "roll_dice"
    BUY = "buy"
    END_TURN = "end_turn"


class Action:
    """Represents a match action that can be taken."""

    def __init__(self, action_type: ActionType, **params: Any):
        self.action_type = action_type
        self.params = params

    def to_dict(self) -> dict:
        return {"action_type": self.action_type.value, "params": dict(self.params)}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Action):
            return NotImplemented
        return self.action_type == other.action_type and self.params == other.params

    def __repr__(self) -> str:
        return f"Action({self.action_type.value}, {self.params})"


def get_legal_actions(match: MatchState, player_id: str) -> List[Action]:
    """
    Get all legal actions available to a player.

    Args:
        match: Current match
        player_id: Player to get actions for

    Returns:
        List of legal Action objects
    """
    if match.game_over or not match.has_player(player_id):
        return []

    if not match.started:
        host = match.host
        if host is not None and host.player_id == player_id and len(match.players) >= match.config.min_players:
            return [Action(ActionType.START_GAME)]
        return []

    # Must be this player's turn
    player = match.get_current_player()
    if player.player_id != player_id:
        return []

    if match.phase is Phase.ROLLING:
        station = landmark_with_effect(LandmarkEffect.EXTRA_DIE_CHOICE)
        actions = [Action(ActionType.ROLL_DICE, dice_count=1)]
        if player.owns_landmark(station.landmark_id):
            actions.append(Action(ActionType.ROLL_DICE, dice_count=2))
        return actions

    actions: List[Action] = []
    for card_id, card in CARD_DEFINITIONS.items():
        if player.coins >= card.cost:
            actions.append(Action(ActionType.BUY, card=card_id.value))
    for landmark_id, landmark in LANDMARK_DEFINITIONS.items():
        if not player.owns_landmark(landmark_id) and player.coins >= landmark.cost:
            actions.append(Action(ActionType.BUY, card=landmark_id.value))
    actions.append(Action(ActionType.END_TURN))
    return actions


def apply_action(
    match: MatchState, action: Action, player_id: str
) -> Union[TurnTransition, RollOutcome, PurchaseResult, TurnOutcome]:
    """
    Apply an action to the match.

    Args:
        match: Current match
        action: Action to apply
        player_id: Player executing the action

    Returns:
        The outcome of the matching MatchState operation

    Raises:
        MachiKoroError: if the action is not legal; the match is unchanged
    """
    if action.action_type == ActionType.START_GAME:
        return match.start(player_id)

    elif action.action_type == ActionType.ROLL_DICE:
        dice = action.params.get("dice")
        if dice is not None:
            return match.apply_roll(player_id, DiceRoll.from_values(dice))
        return match.roll_dice(player_id, action.params.get("dice_count", 1))

    elif action.action_type == ActionType.BUY:
        return match.apply_purchase(player_id, action.params.get("card"))

    elif action.action_type == ActionType.END_TURN:
        return match.end_turn(player_id)

    raise IllegalStateError(f"unsupported action: {action.action_type}")
