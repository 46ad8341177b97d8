from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Dict, Optional, Set, Tuple

from events.mapper import map_events
from machikoro.exceptions import PlayerNotFoundError
from machikoro.game import MatchState
from machikoro.registry import MatchRegistry
from machikoro.rules import Action, apply_action
from snapshot import serialize_snapshot

logger = logging.getLogger(__name__)


def new_player_id() -> str:
    return uuid.uuid4().hex[:12]


class MatchHub:
    """Serializes actions per match and broadcasts their results.

    Responsibilities:
    - Run at most one action per match at a time (one lock per match code)
    - Route actions to the engine through the core registry
    - Broadcast mapped events and a fresh snapshot to subscribed clients

    Failed actions raise before anything is broadcast, so errors only ever
    reach the requester.
    """

    def __init__(self, registry: MatchRegistry):
        self.registry = registry
        self._lock = asyncio.Lock()
        self._match_locks: Dict[str, asyncio.Lock] = {}
        self._clients: Dict[str, Set[asyncio.Queue]] = {}
        self._flushed: Dict[str, int] = {}

    def lock_for(self, code: str) -> asyncio.Lock:
        self.registry.get(code)
        lock = self._match_locks.get(code)
        if lock is None:
            lock = self._match_locks[code] = asyncio.Lock()
        return lock

    # ---- Lifecycle ----
    async def create_match(self, player_name: str) -> Tuple[MatchState, str]:
        player_id = new_player_id()
        async with self._lock:
            match = self.registry.create_match(player_id, player_name)
        self._flushed[match.code] = len(match.event_log)
        return match, player_id

    async def join(self, code: str, player_name: str) -> Tuple[MatchState, str]:
        player_id = new_player_id()
        async with self.lock_for(code):
            self.registry.join(code, player_id, player_name)
            match = self.registry.get(code)
            await self._flush(match)
        return match, player_id

    async def leave(self, player_id: str, code: Optional[str] = None) -> Tuple[str, bool]:
        """Remove a player; returns (match code, whether the match was torn down)."""
        seated = self.registry.match_code_for(player_id)
        if seated is None or (code is not None and seated != code):
            raise PlayerNotFoundError(f"player {player_id} is not in match {code or '?'}")

        async with self.lock_for(seated):
            self.registry.leave(player_id)
            if seated in self.registry:
                await self._flush(self.registry.get(seated))
                return seated, False

        await self._close(seated)
        return seated, True

    # ---- Actions ----
    async def dispatch(self, code: str, player_id: str, action: Action) -> Tuple[MatchState, Any]:
        async with self.lock_for(code):
            match = self.registry.get(code)
            if not match.has_player(player_id):
                raise PlayerNotFoundError(f"player {player_id} is not in match {code}")
            result = apply_action(match, action, player_id)
            await self._flush(match)
        return match, result

    # ---- Subscription management for WS ----
    async def subscribe(self, code: str) -> asyncio.Queue:
        match = self.registry.get(code)
        q: asyncio.Queue = asyncio.Queue()
        self._clients.setdefault(code, set()).add(q)
        await q.put({
            "type": "snapshot",
            "match_code": code,
            "snapshot": serialize_snapshot(match),
        })
        return q

    async def unsubscribe(self, code: str, q: asyncio.Queue) -> None:
        clients = self._clients.get(code)
        if clients is not None:
            clients.discard(q)

    async def _broadcast(self, code: str, payload: Dict[str, Any]) -> None:
        for q in list(self._clients.get(code, ())):
            try:
                q.put_nowait(payload)
            except asyncio.QueueFull:
                self._clients[code].discard(q)

    async def _flush(self, match: MatchState) -> None:
        start = self._flushed.get(match.code, 0)
        events = match.event_log.get_events_since(start)
        self._flushed[match.code] = len(match.event_log)
        if events:
            names = {p.player_id: p.name for p in match.players}
            await self._broadcast(match.code, {
                "type": "events",
                "match_code": match.code,
                "events": map_events(events, start=start, player_names=names),
            })
        await self._broadcast(match.code, {
            "type": "snapshot",
            "match_code": match.code,
            "snapshot": serialize_snapshot(match),
        })

    async def _close(self, code: str) -> None:
        await self._broadcast(code, {"type": "match_closed", "match_code": code})
        self._clients.pop(code, None)
        self._match_locks.pop(code, None)
        self._flushed.pop(code, None)
        logger.info(f"Match {code} closed")
