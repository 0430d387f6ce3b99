"""Game module for tetris3d.

Exports the rules engine and the session that drives it:
- grid helpers: validity checks, merging and layer collapse
- Piece / ShapeDefinition: tiered shape catalog with pivot rotation
- ScoringRules: scoring and progression constants
- process_turn / TurnResult: outcome of a piece landing
- Tetris3DGame: session state, commands and progression
"""

from .grid import drop_cleared_lines, empty_grid, full_layers, is_valid_move
from .pieces import Axis, Piece, ShapeDefinition, SHAPES_BY_TIER, rotate, spawn_piece, translate
from .rules import ScoringRules, drop_interval_ms, required_xp
from .turn import DropInfo, TurnResult, process_turn
from .core import Difficulty, GameConfig, GameSize, GameState, Tetris3DGame

__all__ = [
    "drop_cleared_lines",
    "empty_grid",
    "full_layers",
    "is_valid_move",
    "Axis",
    "Piece",
    "ShapeDefinition",
    "SHAPES_BY_TIER",
    "rotate",
    "spawn_piece",
    "translate",
    "ScoringRules",
    "drop_interval_ms",
    "required_xp",
    "DropInfo",
    "TurnResult",
    "process_turn",
    "Difficulty",
    "GameConfig",
    "GameSize",
    "GameState",
    "Tetris3DGame",
]
