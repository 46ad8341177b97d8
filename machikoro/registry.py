"""
Registry of live matches.

The registry owns every MatchState of the process and is the only place
match codes are minted. It also remembers which match each connected
player sits in so a disconnect can be routed without a match code.
"""

import logging
import random
import string
from typing import Dict, Iterator, Optional, Tuple

from machikoro.config import GameConfig
from machikoro.exceptions import IllegalStateError, MatchNotFoundError
from machikoro.game import MatchState
from machikoro.player import PlayerState

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class MatchRegistry:
    """In-memory registry of live matches."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        code_length: int = 6,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or GameConfig()
        self.code_length = code_length
        self._rng = rng or random.SystemRandom()
        self._matches: Dict[str, MatchState] = {}
        self._player_matches: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._matches)

    def __contains__(self, code: str) -> bool:
        return code in self._matches

    def __iter__(self) -> Iterator[MatchState]:
        return iter(list(self._matches.values()))

    def mint_code(self) -> str:
        """Generate a code not used by any live match."""
        while True:
            code = "".join(self._rng.choice(CODE_ALPHABET) for _ in range(self.code_length))
            if code not in self._matches:
                return code

    def create_match(self, host_id: str, host_name: str) -> MatchState:
        """Create a match under a fresh code with the host as its only player."""
        self._require_unseated(host_id)
        code = self.mint_code()
        match = MatchState(code, self.config)
        match.add_player(host_id, host_name)
        self._matches[code] = match
        self._player_matches[host_id] = code
        logger.info(f"Match {code} hosted by {host_name}")
        return match

    def get_or_create(self, code: str, host: Optional[Tuple[str, str]] = None) -> MatchState:
        """
        Fetch the match under ``code``, creating it if none is live.

        A created match is empty unless ``host`` (player_id, name) is given.
        An empty match is never torn down by ``leave``; callers that seat
        nobody must release it with ``delete_if_empty``.
        """
        match = self._matches.get(code)
        if match is None:
            if host is not None:
                self._require_unseated(host[0])
            match = MatchState(code, self.config)
            self._matches[code] = match
            logger.info(f"Match {code} created")
            if host is not None:
                match.add_player(*host)
                self._player_matches[host[0]] = code
        return match

    def get(self, code: str) -> MatchState:
        match = self._matches.get(code)
        if match is None:
            raise MatchNotFoundError(f"match {code} not found")
        return match

    def join(self, code: str, player_id: str, name: str) -> PlayerState:
        """Seat a player in an existing, not yet started match."""
        match = self.get(code)
        self._require_unseated(player_id)
        player = match.add_player(player_id, name)
        self._player_matches[player_id] = code
        return player

    def match_code_for(self, player_id: str) -> Optional[str]:
        return self._player_matches.get(player_id)

    def leave(self, player_id: str) -> Optional[str]:
        """
        Remove a player from whichever match they sit in.

        The match is torn down when its last player leaves.

        Returns:
            The code of the match the player left, or None if they were not seated
        """
        code = self._player_matches.pop(player_id, None)
        if code is None:
            return None
        match = self._matches.get(code)
        if match is not None and match.has_player(player_id):
            match.remove_player(player_id)
            self.delete_if_empty(code)
        return code

    def delete_if_empty(self, code: str) -> bool:
        """Drop the match if no players remain. Returns True if it was deleted."""
        match = self._matches.get(code)
        if match is None or not match.is_empty:
            return False
        del self._matches[code]
        logger.info(f"Match {code} removed (no players)")
        return True

    def _require_unseated(self, player_id: str) -> None:
        code = self._player_matches.get(player_id)
        if code is not None:
            raise IllegalStateError(f"player {player_id} is already in match {code}")
