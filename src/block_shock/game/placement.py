"""Placement validation: which pieces fit where."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .grid import Cell, GameGrid, translate
from .pieces import Piece
from .shapes import Offset, Shape


def can_place(board: GameGrid, offsets: Iterable[Offset], anchor: Cell) -> bool:
    return board.can_place(offsets, anchor)


def get_valid_anchors(board: GameGrid, shape: Shape) -> List[Cell]:
    """All (row, col) anchors where ``shape`` fits, row-major."""
    anchors: List[Cell] = []
    for row in range(board.rows - shape.height + 1):
        for col in range(board.cols - shape.width + 1):
            if board.can_place(shape.offsets, (row, col)):
                anchors.append((row, col))
    return anchors


def _has_anchor(board: GameGrid, shape: Shape) -> bool:
    for row in range(board.rows - shape.height + 1):
        for col in range(board.cols - shape.width + 1):
            if board.can_place(shape.offsets, (row, col)):
                return True
    return False


def exists_any_placement(board: GameGrid, piece: Piece) -> bool:
    """Whether ``piece`` fits anywhere on ``board``.

    A bomb only needs one empty cell. An exception piece fits if any of its
    rotations does, since the player may still turn it.
    """
    if piece.is_bomb:
        return board.empty_count() > 0
    seen = set()
    for shape in piece.candidate_shapes():
        # rotations two quarter turns apart often cover the same cells
        if shape.cells in seen:
            continue
        seen.add(shape.cells)
        if _has_anchor(board, shape):
            return True
    return False


def placement_cells(board: GameGrid, piece: Piece, anchor: Cell) -> Optional[List[Cell]]:
    """Cells ``piece`` would cover at ``anchor``, or None if it does not fit."""
    if not board.can_place(piece.offsets, anchor):
        return None
    return translate(piece.offsets, anchor)
