import numpy as np
import pytest

from tetris3d.game.grid import (
    column_heights,
    drop_cleared_lines,
    empty_grid,
    full_layers,
    is_valid_move,
    layer_fill,
    merge_piece,
)


SIZE = (4, 6, 3)


@pytest.mark.parametrize(
    "cube",
    [(-1, 0, 0), (4, 0, 0), (0, 0, -1), (0, 0, 3), (0, 6, 0), (-1, -2, 0), (0, -3, 5)],
)
def test_out_of_bounds_cube_is_rejected(cube):
    grid = empty_grid(SIZE)
    assert not is_valid_move([(1, 1, 1), cube], grid, SIZE)


def test_cubes_above_the_top_skip_occupancy():
    grid = empty_grid(SIZE)
    grid[:, 0, :] = 1
    assert is_valid_move([(0, -1, 0), (1, -2, 2)], grid, SIZE)
    assert not is_valid_move([(0, -1, 0), (0, 0, 0)], grid, SIZE)


def test_occupied_cell_is_rejected():
    grid = empty_grid(SIZE)
    grid[2, 3, 1] = 5
    assert not is_valid_move([(2, 3, 1)], grid, SIZE)
    assert is_valid_move([(2, 2, 1), (2, 4, 1)], grid, SIZE)


def test_merge_copies_and_drops_cubes_above_top():
    grid = empty_grid(SIZE)
    merged = merge_piece(grid, [(0, -1, 0), (0, 0, 0), (1, 0, 0)], value=3)
    assert grid.sum() == 0
    assert merged[0, 0, 0] == 3 and merged[1, 0, 0] == 3
    assert int((merged != 0).sum()) == 2


def test_full_layers_ascending():
    grid = empty_grid(SIZE)
    grid[:, 4, :] = 1
    grid[:, 1, :] = 2
    grid[:, 2, :] = 1
    grid[0, 2, 0] = 0
    assert full_layers(grid) == [1, 4]


def test_drop_with_no_layers_returns_equal_copy():
    grid = empty_grid(SIZE)
    grid[1, 3, 2] = 4
    result = drop_cleared_lines(grid, [])
    assert np.array_equal(result, grid)
    assert result is not grid


def test_drop_non_contiguous_layers():
    size = (3, 10, 3)
    grid = empty_grid(size)
    grid[:, 2, :] = 1
    grid[:, 5, :] = 1
    grid[1, 1, 1] = 7
    grid[2, 3, 2] = 8
    grid[0, 4, 0] = 6
    grid[1, 6, 1] = 9
    original = grid.copy()

    result = drop_cleared_lines(grid, [5, 2])

    assert np.array_equal(grid, original)
    assert result.shape == grid.shape
    assert not result[:, 0:3, :].any()
    # shifted by the number of removed layers beneath
    assert result[1, 3, 1] == 7
    assert result[2, 4, 2] == 8
    assert result[0, 5, 0] == 6
    assert result[1, 6, 1] == 9
    assert full_layers(result) == []
    assert int((result != 0).sum()) == 4


def test_drop_contiguous_bottom_layers():
    size = (2, 5, 2)
    grid = empty_grid(size)
    grid[:, 3:5, :] = 1
    grid[0, 2, 1] = 3
    result = drop_cleared_lines(grid, [3, 4])
    assert result[0, 4, 1] == 3
    assert int((result != 0).sum()) == 1


def test_column_heights_and_layer_fill():
    grid = empty_grid(SIZE)
    grid[0, 5, 0] = 1
    grid[1, 2, 1] = 1
    grid[1, 5, 1] = 1
    heights = column_heights(grid)
    assert heights[0, 0] == 1
    assert heights[1, 1] == 4
    assert heights[3, 2] == 0
    fill = layer_fill(grid)
    assert fill[5] == pytest.approx(2 / 12)
    assert fill[0] == 0
