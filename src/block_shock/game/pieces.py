from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Tuple

from .shapes import Offset, Shape, rotation_count, shape_for


class PieceKind(IntEnum):
    NORMAL = 0
    BOMB = 1


# 24-bit RGB values; black is reserved for bombs.
PALETTE: Tuple[int, ...] = (
    0x4CBB17,  # green
    0x9B59B6,  # purple
    0xE74C3C,  # red
    0xF39C12,  # orange
    0x3498DB,  # light blue
    0xF1C40F,  # yellow
    0x00509D,  # dark blue
)
BOMB_COLOR = 0x000000

BOMB_SHAPE = Shape.of([(0, 0)])


def color_to_hex(color: int) -> str:
    return f"#{int(color) & 0xFFFFFF:06X}"


def hex_to_color(text: str) -> int:
    """Parse ``#RRGGBB`` or ``RRGGBB``; raises ValueError otherwise."""
    value = text[1:] if text.startswith("#") else text
    if len(value) != 6:
        raise ValueError(f"Not a 6-digit hex color: {text!r}")
    return int(value, 16)


@dataclass(frozen=True)
class Piece:
    """A pool piece: a catalog shape at some rotation, or a bomb.

    Pieces are immutable. Rotating an exception piece goes through
    :meth:`with_rotation`, which returns a new value.
    """

    kind: PieceKind
    base_index: int = 0
    rotation_index: int = 0
    color: int = BOMB_COLOR
    is_exception: bool = False
    slot: int = 0
    origin: Tuple[float, float] = (0.0, 0.0)
    display_scale: float = 1.0

    def __post_init__(self) -> None:
        if self.kind == PieceKind.NORMAL:
            # Raises ValueError for indices outside the catalog
            shape_for(self.base_index, self.rotation_index)
        elif self.is_exception:
            raise ValueError("A bomb cannot be an exception piece")

    @classmethod
    def normal(cls, base_index: int, rotation_index: int, color: int, *, is_exception: bool = False,
               slot: int = 0, origin: Tuple[float, float] = (0.0, 0.0),
               display_scale: float = 0.4) -> "Piece":
        return cls(PieceKind.NORMAL, base_index, rotation_index, color, is_exception, slot, origin,
                   display_scale)

    @classmethod
    def bomb(cls, *, slot: int = 0, origin: Tuple[float, float] = (0.0, 0.0),
             display_scale: float = 1.0) -> "Piece":
        return cls(PieceKind.BOMB, slot=slot, origin=origin, display_scale=display_scale)

    @property
    def is_bomb(self) -> bool:
        return self.kind == PieceKind.BOMB

    @property
    def shape(self) -> Shape:
        if self.is_bomb:
            return BOMB_SHAPE
        return shape_for(self.base_index, self.rotation_index)

    @property
    def offsets(self) -> Tuple[Offset, ...]:
        return self.shape.offsets

    @property
    def cell_count(self) -> int:
        return len(self.shape)

    @property
    def rotation_count(self) -> int:
        if self.is_bomb:
            return 1
        return rotation_count(self.base_index)

    def candidate_shapes(self) -> Tuple[Shape, ...]:
        """Shapes the player may still choose between before placing."""
        if self.is_exception:
            return tuple(shape_for(self.base_index, r) for r in range(self.rotation_count))
        return (self.shape,)

    def with_rotation(self, rotation_index: int) -> "Piece":
        if self.is_bomb:
            raise ValueError("Bombs cannot be rotated")
        return replace(self, rotation_index=rotation_index % self.rotation_count)

    def rotated(self) -> "Piece":
        return self.with_rotation(self.rotation_index + 1)

    def at_slot(self, slot: int, origin: Tuple[float, float]) -> "Piece":
        return replace(self, slot=slot, origin=origin)
