"""Shared test fixtures for Machi Koro engine tests."""

import pytest
from machikoro import GameConfig, create_match
from machikoro.cards import CardId


@pytest.fixture
def game_config():
    """Default match configuration with fixed seed for reproducibility."""
    return GameConfig(seed=42)


@pytest.fixture
def lobby(game_config):
    """Unstarted match with two seated players."""
    match = create_match("ABC123", game_config, host=("p1", "Alice"))
    match.add_player("p2", "Bob")
    return match


@pytest.fixture
def basic_game(lobby):
    """Started two-player match, Alice to roll."""
    lobby.start("p1")
    return lobby


@pytest.fixture
def three_player_game(game_config):
    """Started three-player match, Alice to roll."""
    match = create_match("XYZ789", game_config, host=("p1", "Alice"))
    match.add_player("p2", "Bob")
    match.add_player("p3", "Charlie")
    match.start("p1")
    return match


@pytest.fixture
def give():
    """Set establishment counts, using underscores for dashes in card ids."""

    def _give(match, player_id, **buildings):
        player = match.get_player(player_id)
        for key, count in buildings.items():
            player.buildings[CardId(key.replace("_", "-"))] = count

    return _give
