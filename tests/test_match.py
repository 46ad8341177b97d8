"""
Tests for match membership, win checks and snapshots.
"""

import pytest

from machikoro import GameConfig, MatchState, Phase, create_match
from machikoro.cards import CardId, LandmarkId
from machikoro.dice import DiceRoll
from machikoro.events import EventType
from machikoro.exceptions import IllegalStateError, PlayerNotFoundError


def _advance_to(match, player_id):
    while match.get_current_player().player_id != player_id:
        current = match.get_current_player().player_id
        match.apply_roll(current, DiceRoll((6,)))
        match.end_turn(current)


class TestMembership:
    def test_new_player_gets_starting_assets(self, lobby):
        bob = lobby.get_player("p2")
        assert bob.coins == 3
        assert bob.buildings == {CardId.WHEAT_FIELD: 1, CardId.BAKERY: 1}
        assert bob.landmarks == {landmark_id: False for landmark_id in LandmarkId}

    def test_players_keep_join_order(self, lobby):
        lobby.add_player("p3", "Charlie")
        assert [p.player_id for p in lobby.players] == ["p1", "p2", "p3"]

    def test_join_after_start_rejected(self, basic_game):
        with pytest.raises(IllegalStateError):
            basic_game.add_player("p3", "Charlie")
        assert len(basic_game.players) == 2

    def test_duplicate_player_rejected(self, lobby):
        with pytest.raises(IllegalStateError):
            lobby.add_player("p2", "Bob again")

    def test_seat_limit(self):
        match = create_match("FULL01", GameConfig(max_players=2), host=("p1", "Alice"))
        match.add_player("p2", "Bob")
        with pytest.raises(IllegalStateError):
            match.add_player("p3", "Charlie")

    def test_remove_unknown_player(self, lobby):
        with pytest.raises(PlayerNotFoundError):
            lobby.remove_player("ghost")

    def test_removing_everyone_empties_match(self, lobby):
        assert lobby.remove_player("p1") is False
        assert lobby.host.player_id == "p2"
        assert lobby.remove_player("p2") is True
        assert lobby.is_empty


class TestDisconnect:
    def test_last_player_leaves_on_own_turn(self, three_player_game):
        match = three_player_game
        _advance_to(match, "p3")
        match.apply_roll("p3", DiceRoll((6,)))
        turn = match.turn

        empty = match.remove_player("p3")

        assert not empty
        assert match.current_player_index == 0
        assert match.get_current_player().player_id == "p1"
        assert match.phase is Phase.ROLLING
        assert match.last_roll is None
        assert match.turn == turn

    def test_non_acting_player_leaves(self, three_player_game):
        match = three_player_game
        match.apply_roll("p1", DiceRoll((6,)))

        match.remove_player("p3")

        assert match.current_player_index == 0
        assert match.phase is Phase.BUYING
        assert match.last_roll == DiceRoll((6,))

    def test_earlier_seat_leaves_mid_turn(self, three_player_game):
        match = three_player_game
        _advance_to(match, "p2")
        match.apply_roll("p2", DiceRoll((6,)))

        match.remove_player("p1")

        assert match.current_player_index == 0
        assert match.get_current_player().player_id == "p2"
        assert match.phase is Phase.BUYING
        assert match.last_roll == DiceRoll((6,))
        match.end_turn("p2")
        assert match.get_current_player().player_id == "p3"

    def test_index_stays_in_range(self, three_player_game):
        match = three_player_game
        _advance_to(match, "p2")
        match.remove_player("p2")
        assert 0 <= match.current_player_index < len(match.players)
        assert match.get_current_player().player_id == "p3"

    def test_match_can_empty_mid_game(self, basic_game):
        basic_game.remove_player("p1")
        assert basic_game.remove_player("p2") is True


class TestWinCheck:
    @pytest.mark.parametrize("built", range(4))
    def test_proper_subset_does_not_win(self, lobby, built):
        alice = lobby.get_player("p1")
        for landmark_id in list(LandmarkId)[:built]:
            alice.landmarks[landmark_id] = True
        assert not lobby.check_win("p1")

    def test_all_four_wins(self, lobby):
        alice = lobby.get_player("p1")
        for landmark_id in LandmarkId:
            alice.landmarks[landmark_id] = True
        assert lobby.check_win("p1")
        assert not lobby.check_win("p2")

    def test_unknown_player(self, lobby):
        with pytest.raises(PlayerNotFoundError):
            lobby.check_win("ghost")


class TestSnapshot:
    def test_snapshot_is_a_copy(self, basic_game):
        snap = basic_game.snapshot()
        basic_game.get_player("p1").coins = 99
        basic_game.get_player("p1").buildings[CardId.MINE] = 1

        assert snap.players[0].coins == 3
        assert CardId.MINE not in snap.players[0].buildings

    def test_snapshot_is_immutable(self, basic_game):
        snap = basic_game.snapshot()
        with pytest.raises(AttributeError):
            snap.turn = 5
        with pytest.raises(TypeError):
            snap.players[0].buildings[CardId.MINE] = 1

    def test_snapshot_fields(self, basic_game):
        basic_game.apply_roll("p1", DiceRoll((2,)))
        snap = basic_game.snapshot()

        assert snap.code == "ABC123"
        assert snap.started
        assert snap.phase is Phase.BUYING
        assert snap.current_player_id == "p1"
        assert snap.last_roll.total == 2
        assert [p.name for p in snap.players] == ["Alice", "Bob"]

    def test_waiting_snapshot_has_no_current_player(self, lobby):
        assert lobby.snapshot().current_player_id is None


class TestEventLog:
    def test_roll_logs_dice_and_income(self, basic_game):
        start = len(basic_game.event_log)
        basic_game.apply_roll("p1", DiceRoll((1,)))

        events = basic_game.event_log.get_events_since(start)
        assert [e.event_type for e in events] == [EventType.DICE_ROLL, EventType.INCOME, EventType.INCOME]
        assert events[0].details["total"] == 1

    def test_rejected_action_logs_nothing(self, basic_game):
        start = len(basic_game.event_log)
        with pytest.raises(IllegalStateError):
            basic_game.end_turn("p1")
        assert len(basic_game.event_log) == start

    def test_lifecycle_events(self, game_config):
        match = MatchState("LOG001", game_config)
        match.add_player("p1", "Alice")
        match.add_player("p2", "Bob")
        match.start("p1")
        types = [e.event_type for e in match.event_log.get_events()]
        assert types == [
            EventType.MATCH_CREATED,
            EventType.PLAYER_JOINED,
            EventType.PLAYER_JOINED,
            EventType.GAME_START,
            EventType.TURN_START,
        ]
