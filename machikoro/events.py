"""
Match event logging.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(Enum):
    """Types of match events."""

    MATCH_CREATED = "match_created"
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"
    GAME_START = "game_start"

    TURN_START = "turn_start"
    DICE_ROLL = "dice_roll"
    INCOME = "income"
    PURCHASE = "purchase"
    BONUS_TURN = "bonus_turn"

    GAME_END = "game_end"


@dataclass
class GameEvent:
    """A logged event in the match."""

    event_type: EventType
    player_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        player_str = self.player_id if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.details}"


class EventLog:
    """Manages the match event log."""

    def __init__(self):
        self.events: List[GameEvent] = []

    def log(self, event_type: EventType, player_id: Optional[str] = None, **details: Any) -> None:
        """Log a match event."""
        self.events.append(GameEvent(event_type, player_id, details))

    def get_events(self) -> List[GameEvent]:
        """Get all logged events."""
        return self.events.copy()

    def get_events_since(self, index: int) -> List[GameEvent]:
        """Get the events logged after the first ``index`` entries."""
        return self.events[max(0, index):]

    def get_recent_events(self, count: int = 10) -> List[GameEvent]:
        """Get the most recent N events."""
        return self.events[-count:]

    def __len__(self) -> int:
        return len(self.events)
