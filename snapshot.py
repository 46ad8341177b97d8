"""
Public snapshot serialization of a match.

This is the only representation of match state the engine hands to
observers: every connected client receives it verbatim.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

from machikoro.game import MatchSnapshot, MatchState


def serialize_snapshot(match: Union[MatchState, MatchSnapshot]) -> Dict[str, Any]:
    """Serialize a match (or a snapshot of one) into a public, stable JSON dict.

    The snapshot includes:
    - match_code, started, phase, turn
    - current_player_index and current_player_id
    - players in turn order with coins, establishment counts and landmarks
    - last_roll (or None)
    - winner_id (or None)
    """
    snap = match.snapshot() if isinstance(match, MatchState) else match

    players: List[Dict[str, Any]] = []
    for p in snap.players:
        players.append(
            {
                "player_id": p.player_id,
                "name": p.name,
                "coins": p.coins,
                "buildings": {card_id.value: count for card_id, count in p.buildings.items()},
                "landmarks": {landmark_id.value: built for landmark_id, built in p.landmarks.items()},
            }
        )

    last_roll = None
    if snap.last_roll is not None:
        last_roll = {
            "dice": list(snap.last_roll.dice),
            "total": snap.last_roll.total,
            "is_double": snap.last_roll.is_double,
        }

    return {
        "match_code": snap.code,
        "players": players,
        "current_player_index": snap.current_player_index,
        "current_player_id": snap.current_player_id,
        "turn": snap.turn,
        "phase": snap.phase.value,
        "last_roll": last_roll,
        "started": snap.started,
        "winner_id": snap.winner_id,
    }
