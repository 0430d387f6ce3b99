from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np


Coordinate = Tuple[int, int, int]
GridSize = Tuple[int, int, int]


def empty_grid(grid_size: GridSize) -> np.ndarray:
    """Zero-filled occupancy array indexed ``grid[x, y, z]``.

    ``y`` grows downward: layer 0 is the top of the well.
    """
    width, height, depth = (int(v) for v in grid_size)
    return np.zeros((width, height, depth), dtype=np.int8)


def is_valid_move(piece: Iterable[Coordinate], grid: np.ndarray, grid_size: GridSize) -> bool:
    """Return True if every cube is inside the well and on an empty cell.

    Cubes above the top (``y < 0``) are only checked against the side walls.
    """
    width, height, depth = grid_size
    for x, y, z in piece:
        if x < 0 or x >= width or z < 0 or z >= depth or y >= height:
            return False
        if y >= 0 and grid[x, y, z] != 0:
            return False
    return True


def merge_piece(grid: np.ndarray, piece: Iterable[Coordinate], value: int = 1) -> np.ndarray:
    """Copy of `grid` with the piece written in; cubes above the top are dropped."""
    merged = grid.copy()
    for x, y, z in piece:
        if y >= 0:
            merged[x, y, z] = value
    return merged


def full_layers(grid: np.ndarray) -> List[int]:
    full = np.where(np.all(grid != 0, axis=(0, 2)))[0]
    return [int(y) for y in full]


def layer_cells(grid_size: GridSize, layers: Sequence[int]) -> List[Coordinate]:
    width, _, depth = grid_size
    return [(x, y, z) for y in layers for x in range(width) for z in range(depth)]


def drop_cleared_lines(grid: np.ndarray, layer_indices: Sequence[int]) -> np.ndarray:
    """Remove the given layers and let everything above fall into place.

    All layers are removed in a single pass, so each surviving layer moves
    down by the number of removed layers beneath it and the top is
    zero-filled. The input is not modified.
    """
    layers = sorted({int(y) for y in layer_indices})
    if not layers:
        return grid.copy()
    kept = np.delete(grid, layers, axis=1)
    width, _, depth = grid.shape
    new_rows = np.zeros((width, len(layers), depth), dtype=grid.dtype)
    return np.concatenate((new_rows, kept), axis=1)


def column_heights(grid: np.ndarray) -> np.ndarray:
    """Stack height per (x, z) column, measured from the floor."""
    height = grid.shape[1]
    occupied = grid != 0
    any_filled = occupied.any(axis=1)
    top_index = np.argmax(occupied, axis=1)
    return np.where(any_filled, height - top_index, 0)


def layer_fill(grid: np.ndarray) -> np.ndarray:
    """Fraction of occupied cells per layer, top to bottom."""
    cells = grid.shape[0] * grid.shape[2]
    return (grid != 0).sum(axis=(0, 2)) / float(cells)
