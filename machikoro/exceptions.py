"""
Custom exception hierarchy for the Machi Koro engine and server.

Every error carries a stable ``code`` so the transport layer can report it
to the requesting player without inspecting the message text.
"""


class MachiKoroError(Exception):
    """Base exception for all game-related errors."""

    code = "error"


class NotFoundError(MachiKoroError):
    """Referenced entity does not exist."""

    code = "not_found"


class MatchNotFoundError(NotFoundError):
    """Match code is not live in the registry."""


class PlayerNotFoundError(NotFoundError):
    """Player is not part of the match."""


class IllegalStateError(MachiKoroError):
    """Action is not legal in the current phase or turn."""

    code = "illegal_state"


class InvalidReferenceError(MachiKoroError):
    """Unknown establishment or landmark id."""

    code = "invalid_reference"


class InsufficientFundsError(MachiKoroError):
    """Purchase cost exceeds the player's coins."""

    code = "insufficient_funds"


class AlreadyOwnedError(MachiKoroError):
    """Landmark is already built by the player."""

    code = "already_owned"


class InvalidRollError(MachiKoroError):
    """Dice values are malformed."""

    code = "invalid_roll"
