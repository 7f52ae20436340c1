"""Scoring rules and the match/clear engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from .grid import GameGrid


@dataclass
class ScoringRules:
    placement_points: int = 1
    clear_points: int = 1
    bomb_points: int = 1
    # Presentation hint only: combos at or above this level get announced.
    combo_display_threshold: int = 2

    def __post_init__(self) -> None:
        if min(self.placement_points, self.clear_points, self.bomb_points) < 0:
            raise ValueError("Scoring points must be non-negative")

    def score_for_placement(self, cells_placed: int) -> int:
        return cells_placed * self.placement_points

    def score_for_clear(self, cells_cleared: int) -> int:
        return cells_cleared * self.clear_points

    def score_for_blast(self, cells_cleared: int) -> int:
        return cells_cleared * self.bomb_points

    def is_combo_worth_showing(self, combo: int) -> bool:
        return combo >= self.combo_display_threshold


@dataclass
class LineClear:
    rows: List[int] = field(default_factory=list)
    cols: List[int] = field(default_factory=list)
    cells_cleared: int = 0
    points: int = 0

    @property
    def found(self) -> bool:
        return bool(self.rows or self.cols)


@dataclass
class BombBlast:
    row: int
    col: int
    cells_cleared: int = 0
    points: int = 0


def detect_full_lines(board: GameGrid) -> Tuple[List[int], List[int]]:
    return board.detect_full_lines()


def clear(board: GameGrid, full_rows: Iterable[int], full_cols: Iterable[int]) -> int:
    return board.clear_lines(full_rows, full_cols)


def resolve_lines(board: GameGrid, rules: ScoringRules) -> LineClear:
    """Clear every full row and column, scoring each distinct cell once."""
    rows, cols = detect_full_lines(board)
    if not rows and not cols:
        return LineClear()
    cleared = clear(board, rows, cols)
    return LineClear(rows=rows, cols=cols, cells_cleared=cleared,
                     points=rules.score_for_clear(cleared))


def detonate(board: GameGrid, row: int, col: int, rules: ScoringRules) -> BombBlast:
    """Clear the whole of ``row`` and ``col`` around a committed bomb.

    The bomb's own cell counts as a cleared cell like any other.
    """
    cleared = board.clear_lines([row], [col])
    return BombBlast(row=row, col=col, cells_cleared=cleared,
                     points=rules.score_for_blast(cleared))
