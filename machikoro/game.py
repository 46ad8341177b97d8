"""
Match state.

MatchState is the only mutable aggregate of the engine. Every action is
validated by the pure helpers in ``income``, ``purchase`` and ``turns``
first; only then is the result committed in a single step, so a rejected
action never leaves a trace.
"""

import logging
import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple, Union

from machikoro.cards import (
    CardId,
    LandmarkEffect,
    LandmarkId,
    landmark_with_effect,
)
from machikoro.config import GameConfig
from machikoro.dice import DiceRoll, check_dice_count, roll_dice
from machikoro.events import EventLog, EventType
from machikoro.exceptions import IllegalStateError, PlayerNotFoundError
from machikoro.income import IncomeResult, resolve_income
from machikoro.player import PlayerState
from machikoro.purchase import PurchaseResult, validate_purchase
from machikoro.turns import (
    Phase,
    TurnTransition,
    bonus_turn_eligible,
    end_turn_transition,
    roll_transition,
    start_transition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerSnapshot:
    player_id: str
    name: str
    coins: int
    buildings: Mapping[CardId, int]
    landmarks: Mapping[LandmarkId, bool]


@dataclass(frozen=True)
class MatchSnapshot:
    """Immutable copy of a match, safe to hand to observers."""

    code: str
    players: Tuple[PlayerSnapshot, ...]
    current_player_index: int
    turn: int
    phase: Phase
    last_roll: Optional[DiceRoll]
    started: bool
    winner_id: Optional[str] = None

    @property
    def current_player_id(self) -> Optional[str]:
        if not self.started or not self.players:
            return None
        return self.players[self.current_player_index].player_id


@dataclass(frozen=True)
class RollOutcome:
    """A committed roll: the dice and the income they produced."""

    player_id: str
    roll: DiceRoll
    income: IncomeResult
    balances: Mapping[str, int]


@dataclass(frozen=True)
class TurnOutcome:
    """A committed end of turn."""

    bonus_turn: bool
    current_player_id: str
    current_player_index: int
    turn: int


class MatchState:
    """
    Represents the complete state of one match.

    Players are kept in join order, which is also the turn order.
    """

    def __init__(self, code: str, config: Optional[GameConfig] = None):
        self.code = code
        self.config = config or GameConfig()
        self.event_log = EventLog()
        self.rng = random.Random(self.config.seed)

        self.players: List[PlayerState] = []
        self.current_player_index = 0
        self.turn = 1
        self.phase = Phase.WAITING
        self.last_roll: Optional[DiceRoll] = None
        self.started = False
        self.winner_id: Optional[str] = None

        self.event_log.log(EventType.MATCH_CREATED, code=code)

    # === Queries ===

    @property
    def host(self) -> Optional[PlayerState]:
        return self.players[0] if self.players else None

    @property
    def is_empty(self) -> bool:
        return not self.players

    @property
    def game_over(self) -> bool:
        return self.winner_id is not None

    def get_current_player(self) -> PlayerState:
        """Get the player whose turn it is."""
        if not self.players:
            raise IllegalStateError("match has no players")
        return self.players[self.current_player_index]

    def get_player(self, player_id: str) -> PlayerState:
        for player in self.players:
            if player.player_id == player_id:
                return player
        raise PlayerNotFoundError(f"player {player_id} is not in match {self.code}")

    def has_player(self, player_id: str) -> bool:
        return any(p.player_id == player_id for p in self.players)

    def check_win(self, player_id: str) -> bool:
        """True iff the player has built every landmark."""
        return self.get_player(player_id).has_all_landmarks()

    def snapshot(self) -> MatchSnapshot:
        """Take an immutable copy of the match."""
        return MatchSnapshot(
            code=self.code,
            players=tuple(
                PlayerSnapshot(
                    player_id=p.player_id,
                    name=p.name,
                    coins=p.coins,
                    buildings=MappingProxyType(dict(p.buildings)),
                    landmarks=MappingProxyType(dict(p.landmarks)),
                )
                for p in self.players
            ),
            current_player_index=self.current_player_index,
            turn=self.turn,
            phase=self.phase,
            last_roll=self.last_roll,
            started=self.started,
            winner_id=self.winner_id,
        )

    # === Lobby ===

    def add_player(self, player_id: str, name: str) -> PlayerState:
        """Add a player to a match that has not started yet."""
        if self.started:
            raise IllegalStateError("cannot join a match that has already started")
        if self.has_player(player_id):
            raise IllegalStateError(f"player {player_id} is already in match {self.code}")
        if self.config.max_players is not None and len(self.players) >= self.config.max_players:
            raise IllegalStateError(f"match {self.code} is full")

        player = PlayerState(
            player_id, name, self.config.starting_coins, self.config.starting_buildings
        )
        self.players.append(player)
        self.event_log.log(EventType.PLAYER_JOINED, player_id=player_id, name=name)
        logger.info(f"{name} joined match {self.code}")
        return player

    def remove_player(self, player_id: str) -> bool:
        """
        Remove a player.

        Players seated before the acting one shift the index down with them.
        If the index falls out of range it is reset to 0. When the removed
        player was acting, whoever now holds the index starts a fresh roll.

        Returns:
            True if the match is now empty
        """
        index = next(
            (i for i, p in enumerate(self.players) if p.player_id == player_id), None
        )
        if index is None:
            raise PlayerNotFoundError(f"player {player_id} is not in match {self.code}")

        was_acting = self.started and index == self.current_player_index
        player = self.players.pop(index)
        if index < self.current_player_index:
            self.current_player_index -= 1
        elif self.current_player_index >= len(self.players):
            self.current_player_index = 0

        self.event_log.log(EventType.PLAYER_LEFT, player_id=player_id, name=player.name)
        logger.info(f"{player.name} left match {self.code}")

        if was_acting and self.players and not self.game_over:
            self.phase = Phase.ROLLING
            self.last_roll = None
            self.event_log.log(
                EventType.TURN_START,
                player_id=self.get_current_player().player_id,
                turn=self.turn,
            )

        return self.is_empty

    def start(self, requester_id: str) -> TurnTransition:
        """Start the match. Only the host may do this."""
        host = self.host
        if host is None or host.player_id != requester_id:
            raise IllegalStateError("only the host can start the match")

        transition = start_transition(self.phase, len(self.players), self.config.min_players)
        self.started = True
        self._apply_transition(transition)

        self.event_log.log(
            EventType.GAME_START,
            players=[p.name for p in self.players],
            starting_coins=self.config.starting_coins,
        )
        self.event_log.log(
            EventType.TURN_START,
            player_id=self.get_current_player().player_id,
            turn=self.turn,
        )
        logger.info(f"Match {self.code} started with {len(self.players)} players")
        return transition

    # === Turn actions ===

    def apply_roll(self, requester_id: str, roll: DiceRoll) -> RollOutcome:
        """Resolve a roll for the acting player and move to the buying phase."""
        current, transition = self._validate_roll(requester_id, len(roll.dice))

        income = resolve_income(roll.total, self.players, current.player_id)

        # Commit
        for player in self.players:
            player.coins += income.delta_for(player.player_id)
        self.last_roll = roll
        self._apply_transition(transition)

        self.event_log.log(
            EventType.DICE_ROLL,
            player_id=current.player_id,
            dice=list(roll.dice),
            total=roll.total,
            is_double=roll.is_double,
        )
        for effect in income.effects:
            self.event_log.log(
                EventType.INCOME,
                player_id=effect.source_player_id,
                category=effect.category.value,
                target_player_id=effect.target_player_id,
                card=effect.card_name,
                amount=effect.amount,
            )
        logger.debug(f"Match {self.code}: {current.name} rolled {roll}")

        return RollOutcome(
            player_id=current.player_id,
            roll=roll,
            income=income,
            balances=MappingProxyType({p.player_id: p.coins for p in self.players}),
        )

    def roll_dice(self, requester_id: str, count: int = 1) -> RollOutcome:
        """Roll ``count`` dice with the match RNG and apply the result."""
        self._validate_roll(requester_id, count)
        return self.apply_roll(requester_id, roll_dice(self.rng, count))

    def apply_purchase(self, requester_id: str, asset_id: Union[str, CardId, LandmarkId]) -> PurchaseResult:
        """Buy an establishment or build a landmark for the acting player."""
        if self.game_over:
            raise IllegalStateError("match is over")
        player = self.get_player(requester_id)
        result = validate_purchase(
            self.phase, player, self.get_current_player().player_id, asset_id
        )

        # Commit
        player.coins -= result.cost
        if result.is_landmark:
            player.landmarks[result.asset_id] = True
        else:
            player.buildings[result.asset_id] = player.count(result.asset_id) + 1

        self.event_log.log(
            EventType.PURCHASE,
            player_id=player.player_id,
            card=result.asset_id.value,
            name=result.name,
            price=result.cost,
            new_balance=player.coins,
            is_landmark=result.is_landmark,
        )
        logger.info(f"Match {self.code}: {player.name} bought {result.name} for {result.cost}")

        if self.check_win(player.player_id):
            self.winner_id = player.player_id
            self.event_log.log(EventType.GAME_END, player_id=player.player_id, turn=self.turn)
            logger.info(f"Match {self.code}: {player.name} wins on turn {self.turn}")

        return result

    def end_turn(self, requester_id: str) -> TurnOutcome:
        """Finish the buying phase, granting a bonus turn when eligible."""
        current = self._require_turn(requester_id, "end the turn")
        transition = end_turn_transition(
            self.phase,
            self.current_player_index,
            self.turn,
            len(self.players),
            bonus_turn_eligible(current, self.last_roll),
        )
        self._apply_transition(transition)

        next_player = self.get_current_player()
        if transition.bonus_turn:
            self.event_log.log(EventType.BONUS_TURN, player_id=next_player.player_id, turn=self.turn)
        self.event_log.log(EventType.TURN_START, player_id=next_player.player_id, turn=self.turn)

        return TurnOutcome(
            bonus_turn=transition.bonus_turn,
            current_player_id=next_player.player_id,
            current_player_index=self.current_player_index,
            turn=self.turn,
        )

    # === Internals ===

    def _validate_roll(self, requester_id: str, dice_count: int) -> Tuple[PlayerState, TurnTransition]:
        current = self._require_turn(requester_id, "roll")
        check_dice_count(dice_count)
        transition = roll_transition(self.phase, self.current_player_index, self.turn)
        if dice_count > 1:
            station = landmark_with_effect(LandmarkEffect.EXTRA_DIE_CHOICE)
            if not current.owns_landmark(station.landmark_id):
                raise IllegalStateError(f"rolling two dice requires the {station.name}")
        return current, transition

    def _require_turn(self, requester_id: str, action: str) -> PlayerState:
        if not self.started:
            raise IllegalStateError("match has not started")
        if self.game_over:
            raise IllegalStateError("match is over")
        player = self.get_player(requester_id)
        if player.player_id != self.get_current_player().player_id:
            raise IllegalStateError(f"cannot {action}: it is not {player.name}'s turn")
        return player

    def _apply_transition(self, transition: TurnTransition) -> None:
        self.phase = transition.phase
        self.current_player_index = transition.current_player_index
        self.turn = transition.turn
        if transition.clears_roll:
            self.last_roll = None


def create_match(code: str, config: Optional[GameConfig] = None, host: Optional[Tuple[str, str]] = None) -> MatchState:
    """
    Create a new match, optionally seating the host.

    Args:
        code: Match code
        config: Match configuration
        host: (player_id, name) of the hosting player

    Returns:
        Initialized MatchState
    """
    match = MatchState(code, config)
    if host is not None:
        match.add_player(*host)
    return match

