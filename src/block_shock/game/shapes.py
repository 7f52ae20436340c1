from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Tuple

import numpy as np


Offset = Tuple[int, int]  # (dx, dy); dx is the column step, dy the row step


def normalize(offsets: Iterable[Offset]) -> Tuple[Offset, ...]:
    """Translate offsets so that min x = min y = 0, keeping their order."""
    offsets = tuple((int(x), int(y)) for x, y in offsets)
    if not offsets:
        return ()
    min_x = min(x for x, _ in offsets)
    min_y = min(y for _, y in offsets)
    return tuple((x - min_x, y - min_y) for x, y in offsets)


@dataclass(frozen=True)
class Shape:
    """Canonical polyomino footprint.

    Offsets keep their insertion order and equality compares them in that
    order, so a shape whose cells land in a different order after a quarter
    turn counts as a new rotation. Use :attr:`cells` to compare footprints.
    """

    offsets: Tuple[Offset, ...]

    @classmethod
    def of(cls, offsets: Iterable[Offset]) -> "Shape":
        return cls(normalize(offsets))

    @property
    def cells(self) -> FrozenSet[Offset]:
        return frozenset(self.offsets)

    def __len__(self) -> int:
        return len(self.offsets)

    @property
    def width(self) -> int:
        return max(x for x, _ in self.offsets) + 1

    @property
    def height(self) -> int:
        return max(y for _, y in self.offsets) + 1

    def is_canonical(self) -> bool:
        return min(x for x, _ in self.offsets) == 0 and min(y for _, y in self.offsets) == 0

    def as_array(self) -> np.ndarray:
        """Occupancy mask of shape (height, width)."""
        mask = np.zeros((self.height, self.width), dtype=np.int8)
        for x, y in self.offsets:
            mask[y, x] = 1
        return mask


def rotate(shape: Shape) -> Shape:
    """Quarter turn: (x, y) -> (y, -x), renormalized."""
    return Shape.of((y, -x) for x, y in shape.offsets)


def rotations(shape: Shape) -> Tuple[Shape, ...]:
    """Distinct canonical rotations in first-seen order (1 to 4 of them)."""
    result: List[Shape] = []
    current = Shape.of(shape.offsets)
    for _ in range(4):
        if current not in result:
            result.append(current)
        current = rotate(current)
    return tuple(result)


def is_square_like(shape: Shape) -> bool:
    """True for a full k x k block, including the single cell.

    Rotating such a shape never changes the occupied cells, so it is never
    offered as an exception piece.
    """
    shape = Shape.of(shape.offsets)
    count = len(shape.cells)
    side = int(round(count ** 0.5))
    if side * side != count:
        return False
    xs = {x for x, _ in shape.offsets}
    ys = {y for _, y in shape.offsets}
    return len(xs) == side and len(ys) == side and shape.width == side and shape.height == side


def shape_key(shape: Shape) -> str:
    """Content hash of the canonical cells, stable across catalog edits."""
    cells = sorted(Shape.of(shape.offsets).cells)
    text = ";".join(f"{x},{y}" for x, y in cells)
    return hashlib.sha1(text.encode("ascii")).hexdigest()[:12]


# Append-only: saved games refer to shapes by (catalog index, rotation index).
BASE_SHAPES: Tuple[Shape, ...] = (
    Shape.of([(0, 0), (1, 0), (2, 0), (3, 0)]),
    Shape.of([(0, 0), (1, 0), (0, 1), (1, 1)]),
    Shape.of([(0, 0), (1, 0), (2, 0), (1, 1)]),
    Shape.of([(1, 0), (2, 0), (0, 1), (1, 1)]),
    Shape.of([(0, 0), (1, 0), (1, 1), (2, 1)]),
    Shape.of([(0, 0), (0, 1), (0, 2), (1, 2)]),
    Shape.of([(1, 0), (1, 1), (1, 2), (0, 2)]),
    Shape.of([(0, 0), (1, 0)]),
    Shape.of([(0, 0), (0, 1)]),
    Shape.of([(x, y) for y in range(3) for x in range(3)]),
    Shape.of([(0, 0)]),
    Shape.of([(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)]),
    Shape.of([(0, 0), (0, 1), (1, 1)]),
    Shape.of([(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)]),
    Shape.of([(0, 0), (1, 0), (0, 1), (1, 1), (0, 2), (1, 2)]),
)

ROTATIONS: Tuple[Tuple[Shape, ...], ...] = tuple(rotations(shape) for shape in BASE_SHAPES)


def catalog_size() -> int:
    return len(BASE_SHAPES)


def rotation_count(base_index: int) -> int:
    if not 0 <= base_index < len(ROTATIONS):
        raise ValueError(f"Unknown base shape index {base_index}")
    return len(ROTATIONS[base_index])


def shape_for(base_index: int, rotation_index: int) -> Shape:
    """Look up a catalog shape at one of its distinct rotations."""
    count = rotation_count(base_index)
    if not 0 <= rotation_index < count:
        raise ValueError(
            f"Rotation {rotation_index} out of range for shape {base_index} ({count} rotations)"
        )
    return ROTATIONS[base_index][rotation_index]
