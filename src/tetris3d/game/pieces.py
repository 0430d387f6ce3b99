from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np


Cube = Tuple[int, int, int]
Cubes = Tuple[Cube, ...]


class Axis(str, Enum):
    X = "x"
    Y = "y"
    Z = "z"


# 90 degree turns about each axis, applied as column vectors
ROTATION_MATRICES: Dict[Axis, np.ndarray] = {
    Axis.X: np.array([[1, 0, 0], [0, 0, -1], [0, 1, 0]], dtype=np.int64),  # (x, -z, y)
    Axis.Y: np.array([[0, 0, 1], [0, 1, 0], [-1, 0, 0]], dtype=np.int64),  # (z, y, -x)
    Axis.Z: np.array([[0, -1, 0], [1, 0, 0], [0, 0, 1]], dtype=np.int64),  # (-y, x, z)
}


@dataclass(frozen=True)
class ShapeDefinition:
    """Local-coordinate template for a piece.

    The first cell is the pivot of every piece built from this template.
    """

    name: str
    cells: Cubes
    tier: int

    def __len__(self) -> int:
        return len(self.cells)


def _shapes(tier: int, templates: Dict[str, Sequence[Cube]]) -> Tuple[ShapeDefinition, ...]:
    return tuple(ShapeDefinition(name, tuple(tuple(c) for c in cells), tier) for name, cells in templates.items())


TIER_1_SHAPES = _shapes(1, {
    "I": [(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0)],
    "L": [(0, 0, 0), (1, 0, 0), (2, 0, 0), (2, 0, 1)],
    "T": [(0, 0, 0), (1, 0, 0), (2, 0, 0), (1, 0, 1)],
    "S": [(0, 0, 0), (1, 0, 0), (1, 0, 1), (2, 0, 1)],
    "O": [(0, 0, 0), (1, 0, 0), (0, 0, 1), (1, 0, 1)],
})

TIER_2_SHAPES = _shapes(2, {
    "CUBE": [(0, 0, 0), (1, 0, 0), (0, 0, 1), (1, 0, 1), (0, 1, 0), (1, 1, 0), (0, 1, 1), (1, 1, 1)],
    "TRIPOD": [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)],
    "STEP": [(0, 0, 0), (1, 0, 0), (0, 0, 1), (1, 0, 1), (0, 1, 0)],
    "LONG_L": [(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0), (0, 1, 0)],
    "LONG_Y": [(0, 0, 0), (1, 0, 0), (2, 0, 0), (3, 0, 0), (1, 1, 0)],
    "U": [(0, 0, 0), (0, 0, 1), (1, 0, 1), (2, 0, 1), (2, 0, 0)],
})

TIER_3_SHAPES = _shapes(3, {
    "STAR": [(0, 0, 0), (1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1)],
    "STAIR": [(0, 0, 0), (1, 0, 0), (1, 1, 0), (1, 1, 1), (2, 1, 1)],
    "SCREW": [(0, 0, 0), (1, 0, 0), (1, 1, 0), (1, 1, 1)],
})

SHAPES_BY_TIER: Dict[int, Tuple[ShapeDefinition, ...]] = {
    1: TIER_1_SHAPES,
    2: TIER_2_SHAPES,
    3: TIER_3_SHAPES,
}


def shapes_for_tiers(tiers: Iterable[int]) -> List[ShapeDefinition]:
    """Shape pool for the given tiers, in tier order."""
    pool: List[ShapeDefinition] = []
    for tier in sorted(set(tiers)):
        pool.extend(SHAPES_BY_TIER[tier])
    return pool


@dataclass(frozen=True)
class Piece:
    shape: ShapeDefinition
    cubes: Cubes

    @property
    def tier(self) -> int:
        return self.shape.tier

    @property
    def pivot(self) -> Cube:
        return self.cubes[0]

    def __len__(self) -> int:
        return len(self.cubes)

    def translated(self, dx: int, dy: int, dz: int) -> "Piece":
        return replace(self, cubes=translate(self.cubes, (dx, dy, dz)))

    def rotated(self, axis: Axis | str) -> "Piece":
        return replace(self, cubes=rotate(self.cubes, axis))


def translate(cubes: Sequence[Cube], delta: Cube) -> Cubes:
    dx, dy, dz = delta
    return tuple((x + dx, y + dy, z + dz) for x, y, z in cubes)


def rotate(cubes: Sequence[Cube], axis: Axis | str) -> Cubes:
    """Rotate cubes 90 degrees about `axis` through the first cube.

    Integer matrices keep the result exact, so four turns about the same
    axis return every cube to where it started.
    """
    matrix = ROTATION_MATRICES[Axis(axis)]
    points = np.asarray(cubes, dtype=np.int64)
    pivot = points[0]
    turned = np.rint((points - pivot) @ matrix.T) + pivot
    return tuple((int(x), int(y), int(z)) for x, y, z in turned.astype(np.int64))


def spawn_offset(grid_size: Tuple[int, int, int]) -> Cube:
    width, _, depth = grid_size
    return (width // 2 - 1, 0, depth // 2 - 1)


def spawn_piece(shape: ShapeDefinition, grid_size: Tuple[int, int, int]) -> Piece:
    """Place `shape` horizontally centered at the top of the grid."""
    return Piece(shape=shape, cubes=translate(shape.cells, spawn_offset(grid_size)))
