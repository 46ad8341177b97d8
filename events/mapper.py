"""
Mapping from internal EventLog objects to canonical public JSON events.

The engine emits GameEvent objects where:
- event_type is machikoro.events.EventType
- player_id is optional
- details are keyword fields passed to EventLog.log

This module produces stable, broadcast-friendly dicts with consistent
event_type strings and payload keys.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from machikoro.events import EventType, GameEvent
from machikoro.income import IncomeEffect


def _player_name(names: Optional[Mapping[str, str]], player_id: Optional[str]) -> Optional[str]:
    if names is None or player_id is None:
        return None
    return names.get(player_id)


def map_income_effect(effect: IncomeEffect) -> Dict[str, Any]:
    """Map one income effect to the public effect-log shape."""
    return {
        "category": effect.category.value,
        "color": effect.category.color,
        "source_player_id": effect.source_player_id,
        "target_player_id": effect.target_player_id,
        "card_name": effect.card_name,
        "amount": effect.amount,
    }


def map_event(event: GameEvent, *, player_names: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Map a single GameEvent to a canonical JSON dict.

    Args:
        event: internal event object
        player_names: optional mapping player_id->name for enrichment

    Returns:
        dict with keys: event_type (str), player_id (optional), and event-specific fields
    """
    d = event.details
    base: Dict[str, Any] = {"event_type": event.event_type.value}
    if event.player_id is not None:
        base["player_id"] = event.player_id
        name = _player_name(player_names, event.player_id)
        if name is not None:
            base["player_name"] = name

    if event.event_type == EventType.DICE_ROLL:
        base.update(dice=d.get("dice", []), total=d.get("total"), is_double=d.get("is_double", False))
        return base

    if event.event_type == EventType.INCOME:
        target = d.get("target_player_id")
        base.update(
            category=d.get("category"),
            card_name=d.get("card"),
            amount=d.get("amount"),
            target_player_id=target,
        )
        target_name = _player_name(player_names, target)
        if target_name is not None:
            base["target_player_name"] = target_name
        return base

    if event.event_type == EventType.PURCHASE:
        base.update(
            card=d.get("card"),
            card_name=d.get("name"),
            price=d.get("price"),
            coins_after=d.get("new_balance"),
            is_landmark=d.get("is_landmark", False),
        )
        return base

    if event.event_type in (EventType.TURN_START, EventType.BONUS_TURN):
        base.update(turn=d.get("turn"))
        return base

    if event.event_type == EventType.GAME_START:
        players = d.get("players") or []
        base.update(
            player_names=players,
            num_players=len(players),
            starting_coins=d.get("starting_coins"),
        )
        return base

    if event.event_type == EventType.GAME_END:
        base.update(winner_id=event.player_id, turn=d.get("turn"))
        return base

    if event.event_type in (EventType.PLAYER_JOINED, EventType.PLAYER_LEFT):
        base.update(name=d.get("name"))
        return base

    # Default: echo raw fields
    base.update(d)
    return base


def map_events(
    events: Iterable[GameEvent],
    *,
    start: int = 0,
    player_names: Optional[Mapping[str, str]] = None,
) -> List[Dict[str, Any]]:
    """Map a sequence of GameEvent objects.

    Args:
        events: iterable of GameEvent
        start: sequence number of the first event
        player_names: optional mapping of player ids to display names
    """
    mapped: List[Dict[str, Any]] = []
    for idx, ev in enumerate(events, start=start):
        mev = map_event(ev, player_names=player_names)
        mev["seq"] = idx
        mapped.append(mev)
    return mapped
