"""Error taxonomy for the Block Shock engine.

None of these escape a session: they are raised by the lower layers and
absorbed by :class:`~block_shock.game.core.BlockShockGame` or the
persistence codec, which log them and return a neutral value instead.
"""

from __future__ import annotations


class GameError(Exception):
    """Base class for recoverable engine errors."""


class InvalidPlacement(GameError):
    """A piece does not fit at the requested anchor."""


class CorruptSnapshot(GameError):
    """A saved session could not be decoded."""


class ReviveLimitExceeded(GameError):
    """Revive requested after all revives were used."""


class IllegalSlotIndex(GameError):
    """Pick on an empty or nonexistent pool slot."""
