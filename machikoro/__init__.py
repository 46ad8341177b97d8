"""
Machi Koro Rules Engine

Authoritative, deterministic match engine: card catalog, income resolution,
purchase validation, turn flow and the registry of live matches.
"""

from .cards import CardCategory, CardId, LandmarkEffect, LandmarkId
from .config import GameConfig
from .dice import DiceRoll
from .game import MatchSnapshot, MatchState, create_match
from .player import PlayerState
from .registry import MatchRegistry
from .turns import Phase

__all__ = [
    "CardCategory",
    "CardId",
    "LandmarkEffect",
    "LandmarkId",
    "GameConfig",
    "DiceRoll",
    "MatchSnapshot",
    "MatchState",
    "create_match",
    "PlayerState",
    "MatchRegistry",
    "Phase",
]
