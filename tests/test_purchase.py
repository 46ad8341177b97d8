"""
Tests for purchase validation and commit.
"""

import pytest

from machikoro.cards import CardId, LandmarkId
from machikoro.dice import DiceRoll
from machikoro.exceptions import (
    AlreadyOwnedError,
    IllegalStateError,
    InsufficientFundsError,
    InvalidReferenceError,
)
from machikoro.player import PlayerState
from machikoro.purchase import validate_purchase
from machikoro.turns import Phase


@pytest.fixture
def buyer():
    return PlayerState("p1", "Alice", 5)


def test_validate_establishment(buyer):
    result = validate_purchase(Phase.BUYING, buyer, "p1", "ranch")

    assert result.asset_id is CardId.RANCH
    assert result.name == "Ranch"
    assert result.cost == 1
    assert result.new_balance == 4
    assert not result.is_landmark
    # Validation alone never touches the player
    assert buyer.coins == 5
    assert buyer.count(CardId.RANCH) == 0


def test_validate_landmark(buyer):
    result = validate_purchase(Phase.BUYING, buyer, "p1", "train-station")
    assert result.asset_id is LandmarkId.TRAIN_STATION
    assert result.is_landmark
    assert result.new_balance == 1


@pytest.mark.parametrize("phase", [Phase.WAITING, Phase.ROLLING])
def test_wrong_phase(buyer, phase):
    with pytest.raises(IllegalStateError):
        validate_purchase(phase, buyer, "p1", "ranch")


def test_not_players_turn(buyer):
    with pytest.raises(IllegalStateError):
        validate_purchase(Phase.BUYING, buyer, "p2", "ranch")


def test_unknown_card(buyer):
    with pytest.raises(InvalidReferenceError):
        validate_purchase(Phase.BUYING, buyer, "p1", "stadium")


def test_insufficient_funds(buyer):
    with pytest.raises(InsufficientFundsError):
        validate_purchase(Phase.BUYING, buyer, "p1", "shopping-mall")


def test_landmark_already_owned(buyer):
    buyer.landmarks[LandmarkId.TRAIN_STATION] = True
    with pytest.raises(AlreadyOwnedError):
        validate_purchase(Phase.BUYING, buyer, "p1", "train-station")


def test_funds_checked_before_ownership(buyer):
    buyer.coins = 0
    buyer.landmarks[LandmarkId.TRAIN_STATION] = True
    with pytest.raises(InsufficientFundsError):
        validate_purchase(Phase.BUYING, buyer, "p1", "train-station")


def test_phase_checked_before_reference(buyer):
    with pytest.raises(IllegalStateError):
        validate_purchase(Phase.ROLLING, buyer, "p1", "stadium")


class TestMatchPurchase:
    """Purchases committed through the match."""

    def _to_buying(self, match):
        match.apply_roll("p1", DiceRoll((6,)))
        assert match.phase is Phase.BUYING

    def test_purchase_debits_cost_and_adds_one_copy(self, basic_game):
        self._to_buying(basic_game)
        bob_before = basic_game.snapshot().players[1]

        result = basic_game.apply_purchase("p1", "wheat-field")

        alice = basic_game.get_player("p1")
        assert result.new_balance == 2
        assert alice.coins == 2
        assert alice.count(CardId.WHEAT_FIELD) == 2
        assert basic_game.snapshot().players[1] == bob_before

    def test_landmark_purchase_sets_flag(self, basic_game):
        basic_game.get_player("p1").coins = 4
        self._to_buying(basic_game)

        basic_game.apply_purchase("p1", "train-station")

        alice = basic_game.get_player("p1")
        assert alice.owns_landmark(LandmarkId.TRAIN_STATION)
        assert alice.coins == 0
        assert not basic_game.check_win("p1")

    def test_insufficient_funds_leaves_match_untouched(self, basic_game):
        """Balance 1 against cost 3: rejected, phase stays buying."""
        basic_game.get_player("p1").coins = 1
        self._to_buying(basic_game)
        before = basic_game.snapshot()

        with pytest.raises(InsufficientFundsError):
            basic_game.apply_purchase("p1", "forest")

        assert basic_game.snapshot() == before
        assert basic_game.phase is Phase.BUYING

    def test_other_player_cannot_buy(self, basic_game):
        self._to_buying(basic_game)
        before = basic_game.snapshot()
        with pytest.raises(IllegalStateError):
            basic_game.apply_purchase("p2", "ranch")
        assert basic_game.snapshot() == before

    def test_cannot_buy_while_rolling(self, basic_game):
        with pytest.raises(IllegalStateError):
            basic_game.apply_purchase("p1", "ranch")

    def test_cannot_buy_before_start(self, lobby):
        with pytest.raises(IllegalStateError):
            lobby.apply_purchase("p1", "ranch")

    def test_completing_landmarks_wins(self, basic_game):
        alice = basic_game.get_player("p1")
        for landmark_id in (LandmarkId.TRAIN_STATION, LandmarkId.SHOPPING_MALL, LandmarkId.AMUSEMENT_PARK):
            alice.landmarks[landmark_id] = True
        alice.coins = 22
        self._to_buying(basic_game)

        basic_game.apply_purchase("p1", "radio-tower")

        assert basic_game.check_win("p1")
        assert basic_game.winner_id == "p1"
        assert basic_game.game_over
        with pytest.raises(IllegalStateError):
            basic_game.end_turn("p1")
