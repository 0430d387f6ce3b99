from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .grid import Coordinate, GridSize, full_layers, layer_cells, merge_piece
from .rules import ScoringRules


@dataclass(frozen=True)
class DropInfo:
    is_hard_drop: bool = False
    distance: int = 0


@dataclass(frozen=True)
class TurnResult:
    grid: np.ndarray  # landed piece merged in, layers not yet collapsed
    full_layers: Tuple[int, ...]
    blocks_to_clear: Tuple[Coordinate, ...]
    points: int
    xp: float
    is_streak_active: bool
    streak_history: Tuple[int, ...]

    @property
    def layers_cleared(self) -> int:
        return len(self.full_layers)


def process_turn(
    landed_piece: Sequence[Coordinate],
    grid: np.ndarray,
    grid_size: GridSize,
    level: int,
    is_streak_active: bool,
    streak_history: Sequence[int],
    piece_tier: int,
    rotation_count: int,
    translation_count: int,
    drop_info: DropInfo,
    rules: Optional[ScoringRules] = None,
    marker: int = 1,
) -> TurnResult:
    """Work out everything that follows from a piece landing.

    Nothing is mutated: the caller gets the merged grid, the full layers
    (ascending), the points and XP earned and the new streak state, and
    decides when to collapse the layers.
    """
    rules = rules or ScoringRules()

    merged = merge_piece(grid, landed_piece, marker)
    layers = full_layers(merged)
    cleared = len(layers)
    difficult = rules.is_difficult(cleared)

    points = 0.0
    if drop_info.is_hard_drop:
        points += rules.hard_drop_per_cell * drop_info.distance

    efficiency = rules.efficiency_score(rotation_count, translation_count)
    if cleared > 0:
        points += efficiency
        if drop_info.is_hard_drop:
            points += rules.hard_drop_clear_bonus
        clear_points = rules.clear_points(cleared, level)
        if is_streak_active and difficult:
            clear_points *= rules.back_to_back_multiplier
            recent = list(streak_history)[-2:]
            if len(recent) == 2 and all(rules.is_difficult(n) for n in recent):
                clear_points *= rules.streak_chain_multiplier
        points += clear_points
    else:
        points += efficiency // 2

    # Halves round up
    total = int(math.floor(points * rules.tier_multiplier(piece_tier) + 0.5))

    xp = rules.xp_per_cube * len(landed_piece)
    if cleared > 0:
        xp += rules.xp_per_layer * cleared
        if difficult:
            xp += rules.xp_difficult_bonus

    history: List[int] = list(streak_history) + [cleared]
    history = history[-rules.streak_history_length:]

    return TurnResult(
        grid=merged,
        full_layers=tuple(layers),
        blocks_to_clear=tuple(layer_cells(grid_size, layers)),
        points=total,
        xp=xp,
        is_streak_active=difficult,
        streak_history=tuple(history),
    )
