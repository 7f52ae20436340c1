from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .errors import InvalidPlacement
from .shapes import Offset


Cell = Tuple[int, int]  # (row, col)

EMPTY = -1


def translate(offsets: Iterable[Offset], anchor: Cell) -> List[Cell]:
    """Board cells covered by ``offsets`` placed with their origin at ``anchor``."""
    row, col = anchor
    return [(row + dy, col + dx) for dx, dy in offsets]


class GameGrid:
    """Fixed-size occupancy matrix.

    Empty cells hold ``EMPTY``; occupied cells hold the 24-bit RGB color of
    the block sitting there. Rows are indexed first.
    """

    def __init__(self, rows: int = 8, cols: int = 8) -> None:
        self.rows = int(rows)
        self.cols = int(cols)
        self.grid = np.full((self.rows, self.cols), EMPTY, dtype=np.int32)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def reset(self) -> None:
        self.grid.fill(EMPTY)

    def is_inside(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def is_empty(self, row: int, col: int) -> bool:
        return bool(self.grid[row, col] == EMPTY)

    def color_at(self, row: int, col: int) -> int:
        return int(self.grid[row, col])

    def can_place(self, offsets: Iterable[Offset], anchor: Cell) -> bool:
        for row, col in translate(offsets, anchor):
            if not self.is_inside(row, col):
                return False
            if self.grid[row, col] != EMPTY:
                return False
        return True

    def commit(self, offsets: Sequence[Offset], anchor: Cell, color: int) -> int:
        """Occupy the cells under ``offsets`` at ``anchor``; returns cells placed."""
        if not self.can_place(offsets, anchor):
            raise InvalidPlacement(f"Cannot place {list(offsets)} at {anchor}")
        cells = translate(offsets, anchor)
        for row, col in cells:
            self.grid[row, col] = int(color)
        return len(cells)

    def set_cell(self, row: int, col: int, color: int) -> None:
        if not self.is_inside(row, col):
            raise InvalidPlacement(f"Cell {(row, col)} outside {self.rows}x{self.cols} board")
        self.grid[row, col] = int(color)

    def occupancy(self) -> np.ndarray:
        """Boolean matrix, True where a block sits."""
        return self.grid != EMPTY

    def detect_full_lines(self) -> Tuple[List[int], List[int]]:
        occupied = self.occupancy()
        full_rows = [int(r) for r in np.flatnonzero(np.all(occupied, axis=1))]
        full_cols = [int(c) for c in np.flatnonzero(np.all(occupied, axis=0))]
        return full_rows, full_cols

    def clear_lines(self, rows: Iterable[int], cols: Iterable[int]) -> int:
        """Empty every occupied cell in the given rows or columns.

        Cells on a crossing are counted once. Returns the number of cells
        that were occupied before clearing.
        """
        mask = np.zeros((self.rows, self.cols), dtype=np.bool_)
        rows = list(rows)
        cols = list(cols)
        if rows:
            mask[rows, :] = True
        if cols:
            mask[:, cols] = True
        mask &= self.occupancy()
        cleared = int(mask.sum())
        self.grid[mask] = EMPTY
        return cleared

    def occupied_cells(self) -> List[Tuple[int, int, int]]:
        """(row, col, color) for every occupied cell, row-major."""
        rows, cols = np.nonzero(self.occupancy())
        return [(int(r), int(c), int(self.grid[r, c])) for r, c in zip(rows, cols)]

    def empty_count(self) -> int:
        return int(np.sum(self.grid == EMPTY))

    def filled_count(self) -> int:
        return self.rows * self.cols - self.empty_count()

    def get_filled_ratio(self) -> float:
        return float(self.filled_count()) / float(self.rows * self.cols)

    def copy(self) -> "GameGrid":
        new_grid = GameGrid(self.rows, self.cols)
        new_grid.grid = self.grid.copy()
        return new_grid

    def clone_state(self) -> np.ndarray:
        return self.grid.copy()
