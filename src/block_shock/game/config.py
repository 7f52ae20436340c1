from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


# Slot centres as fractions of the board width, below the board.
DEFAULT_SLOT_POSITIONS: Tuple[Tuple[float, float], ...] = (
    (1.0 / 6.0, -0.5),
    (3.0 / 6.0, -0.5),
    (5.0 / 6.0, -0.5),
)


@dataclass
class GameConfig:
    """Configuration for a Block Shock session"""
    rows: int = 8
    cols: int = 8
    pieces_per_set: int = 3
    exception_threshold_range: Tuple[int, int] = (5, 7)
    bomb_threshold_range: Tuple[int, int] = (8, 10)
    max_revives: int = 3
    piece_display_scale: float = 0.4
    bomb_display_scale: float = 1.0
    slot_positions: Tuple[Tuple[float, float], ...] = DEFAULT_SLOT_POSITIONS
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError("Board dimensions must be positive")
        if self.pieces_per_set <= 0:
            raise ValueError("pieces_per_set must be positive")
        if len(self.slot_positions) != self.pieces_per_set:
            raise ValueError("Need exactly one slot position per pool slot")
        for name in ("exception_threshold_range", "bomb_threshold_range"):
            low, high = getattr(self, name)
            if low < 1 or high < low:
                raise ValueError(f"{name} must be an increasing range of positive ints")
        if self.max_revives < 0:
            raise ValueError("max_revives must be non-negative")

    def slot_position(self, slot: int) -> Tuple[float, float]:
        return self.slot_positions[slot]
