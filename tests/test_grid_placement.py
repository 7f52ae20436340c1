import random

import pytest

from block_shock.game import InvalidPlacement
from block_shock.game.grid import EMPTY, GameGrid, translate
from block_shock.game.placement import (
    can_place, exists_any_placement, get_valid_anchors, placement_cells,
)
from block_shock.game.shapes import BASE_SHAPES, ROTATIONS

from helpers import bomb, normal


def _checkerboard(grid):
    for row in range(grid.rows):
        for col in range(grid.cols):
            if (row + col) % 2 == 0:
                grid.set_cell(row, col, 0x123456)


def test_translate_maps_dx_to_columns():
    assert translate([(0, 0), (1, 0), (0, 1)], (2, 5)) == [(2, 5), (2, 6), (3, 5)]


def test_can_place_bounds_and_occupancy():
    grid = GameGrid(8, 8)
    bar = BASE_SHAPES[0].offsets
    assert can_place(grid, bar, (0, 4))
    assert not can_place(grid, bar, (0, 5))
    assert not can_place(grid, bar, (-1, 0))
    assert not can_place(grid, bar, (8, 0))
    grid.set_cell(0, 6, 0xFF0000)
    assert not can_place(grid, bar, (0, 4))


def test_commit_then_can_place_is_false():
    rng = random.Random(3)
    for rots in ROTATIONS:
        for shape in rots:
            grid = GameGrid(8, 8)
            anchors = get_valid_anchors(grid, shape)
            anchor = rng.choice(anchors)
            placed = grid.commit(shape.offsets, anchor, 0x4CBB17)
            assert placed == len(shape)
            assert not grid.can_place(shape.offsets, anchor)


def test_commit_rejects_illegal_placement_without_mutation():
    grid = GameGrid(8, 8)
    grid.set_cell(3, 3, 0xABCDEF)
    before = grid.clone_state()
    with pytest.raises(InvalidPlacement):
        grid.commit(BASE_SHAPES[1].offsets, (2, 2), 0x4CBB17)
    assert (grid.grid == before).all()


def test_commit_stores_color():
    grid = GameGrid(8, 8)
    grid.commit([(0, 0), (1, 0)], (4, 4), 0xE74C3C)
    assert grid.color_at(4, 4) == 0xE74C3C
    assert grid.color_at(4, 5) == 0xE74C3C
    assert grid.color_at(5, 4) == EMPTY
    assert grid.occupied_cells() == [(4, 4, 0xE74C3C), (4, 5, 0xE74C3C)]


def test_bomb_needs_one_empty_cell():
    grid = GameGrid(8, 8)
    for row in range(8):
        for col in range(8):
            grid.set_cell(row, col, 1)
    assert not exists_any_placement(grid, bomb())
    grid.grid[7, 7] = EMPTY
    assert exists_any_placement(grid, bomb())


def test_exception_piece_may_use_any_rotation():
    grid = GameGrid(8, 8)
    # Only a vertical 4-cell gap in column 0 is left open
    for row in range(8):
        for col in range(8):
            if not (col == 0 and row < 4):
                grid.set_cell(row, col, 1)
    horizontal = normal(0, rotation=0)
    assert not exists_any_placement(grid, horizontal)
    assert exists_any_placement(grid, normal(0, rotation=0, exception=True))
    assert exists_any_placement(grid, normal(0, rotation=1))


def test_checkerboard_only_fits_single_cells():
    grid = GameGrid(8, 8)
    _checkerboard(grid)
    assert exists_any_placement(grid, normal(10))
    for base in range(len(BASE_SHAPES)):
        if base == 10:
            continue
        assert not exists_any_placement(grid, normal(base, exception=len(ROTATIONS[base]) > 1))


def test_placement_cells_is_a_pure_query():
    grid = GameGrid(8, 8)
    piece = normal(2)  # T
    assert placement_cells(grid, piece, (0, 0)) == [(0, 0), (0, 1), (0, 2), (1, 1)]
    assert placement_cells(grid, piece, (7, 0)) is None
    assert grid.empty_count() == 64


def test_valid_anchor_count_on_empty_board():
    grid = GameGrid(8, 8)
    assert len(get_valid_anchors(grid, BASE_SHAPES[9])) == 36  # 3x3 square
    assert len(get_valid_anchors(grid, BASE_SHAPES[0])) == 40  # 4-long bar
