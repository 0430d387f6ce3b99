from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from .grid import Coordinate, GridSize, drop_cleared_lines, empty_grid, is_valid_move
from .pieces import Axis, Piece, ShapeDefinition, shapes_for_tiers, spawn_piece
from .rules import ScoringRules, apply_xp, drop_interval_ms, required_xp, unlocked_tiers
from .turn import DropInfo, TurnResult, process_turn

logger = logging.getLogger(__name__)


class GameSize(str, Enum):
    S = "S"
    M = "M"
    L = "L"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class GameState(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    GAME_OVER = "gameOver"


GRID_SIZES: Dict[GameSize, GridSize] = {
    GameSize.S: (8, 12, 8),
    GameSize.M: (10, 15, 10),
    GameSize.L: (13, 20, 13),
}

DROP_INTERVALS_MS: Dict[Difficulty, int] = {
    Difficulty.EASY: 1200,
    Difficulty.MEDIUM: 1000,
    Difficulty.HARD: 800,
}

STARTING_TIERS: Dict[Difficulty, Set[int]] = {
    Difficulty.EASY: {1},
    Difficulty.MEDIUM: {1, 2},
    Difficulty.HARD: {1, 2, 3},
}

MAXIMAL_CLEAR_LAYERS = 4


@dataclass
class GameConfig:
    size: GameSize = GameSize.M
    difficulty: Difficulty = Difficulty.MEDIUM
    random_seed: Optional[int] = None
    clear_animation_ms: int = 300
    max_clear_animation_ms: int = 500
    min_drop_interval_ms: int = 100
    drop_interval_step_ms: int = 50

    def __post_init__(self) -> None:
        self.size = GameSize(self.size)
        self.difficulty = Difficulty(self.difficulty)

    @property
    def grid_size(self) -> GridSize:
        return GRID_SIZES[self.size]

    @property
    def initial_drop_interval_ms(self) -> int:
        return DROP_INTERVALS_MS[self.difficulty]


@dataclass
class PendingClear:
    result: TurnResult
    ready_at_ms: float


class Tetris3DGame:
    """A single game session: the grid, the pieces in play and progression.

    All commands are synchronous. Gravity and the layer-clear animation are
    driven by `advance`, which takes elapsed milliseconds from whatever
    clock the caller runs on.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        leaderboard: Optional[Any] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.leaderboard = leaderboard
        self.rng = random.Random(self.config.random_seed)

        self.state = GameState.MENU
        self.grid_size: GridSize = self.config.grid_size
        self.grid = empty_grid(self.grid_size)
        self.current_piece: Optional[Piece] = None
        self.next_piece: Optional[ShapeDefinition] = None
        self.hold_piece: Optional[ShapeDefinition] = None
        self.is_hold_used = False
        self.is_animating = False
        self.pending_clear: Optional[PendingClear] = None
        self.clearing_blocks: List[Coordinate] = []
        self.exploding_blocks: List[Coordinate] = []

        self.score = 0
        self.level = 1
        self.xp = 0.0
        self.cubes_played = 0
        self.pieces_played = 0
        self.layers_cleared_total = 0
        self.rotations = 0
        self.translations = 0
        self.is_streak_active = False
        self.streak_history: Tuple[int, ...] = ()
        self.unlocked_tiers: Set[int] = set()
        self.drop_interval = self.config.initial_drop_interval_ms

        self.clock_ms = 0.0
        self.start_ms = 0.0
        self.elapsed_ms = 0.0
        self._gravity_ms = 0.0

    # ---------- Lifecycle ----------
    def init_game(self, size: GameSize | str, difficulty: Difficulty | str) -> None:
        self.config.size = GameSize(size)
        self.config.difficulty = Difficulty(difficulty)
        self.reset_game()

    def reset_game(self, seed: Optional[int] = None) -> None:
        """Start a fresh game with the configured size and difficulty.

        The piece generator is reseeded only when `seed` is given, so
        consecutive unseeded resets keep drawing new sequences. Any clear
        animation still pending from the previous game is dropped.
        """
        if seed is not None:
            self.rng.seed(seed)
        self.grid_size = self.config.grid_size
        self.grid = empty_grid(self.grid_size)
        self.pending_clear = None
        self.is_animating = False
        self.clearing_blocks = []
        self.exploding_blocks = []

        self.score = 0
        self.level = 1
        self.xp = 0.0
        self.cubes_played = 0
        self.pieces_played = 0
        self.layers_cleared_total = 0
        self.is_streak_active = False
        self.streak_history = ()
        self.unlocked_tiers = set(STARTING_TIERS[self.config.difficulty])
        self.drop_interval = self.config.initial_drop_interval_ms
        self._gravity_ms = 0.0
        self.start_ms = self.clock_ms
        self.elapsed_ms = 0.0

        self.hold_piece = None
        self.is_hold_used = False
        self.current_piece = None
        first = self._random_shape()
        self.next_piece = self._random_shape()
        self.state = GameState.PLAYING
        self._spawn_piece(first)

    @property
    def available_shapes(self) -> List[ShapeDefinition]:
        return shapes_for_tiers(self.unlocked_tiers)

    @property
    def is_playing(self) -> bool:
        return self.state == GameState.PLAYING

    def _accepts_commands(self) -> bool:
        return self.is_playing and not self.is_animating and self.current_piece is not None

    # ---------- Spawning ----------
    def _random_shape(self) -> ShapeDefinition:
        return self.rng.choice(self.available_shapes)

    def _spawn_piece(self, shape: ShapeDefinition) -> bool:
        piece = spawn_piece(shape, self.grid_size)
        if not is_valid_move(piece.cubes, self.grid, self.grid_size):
            self._end_game()
            return False
        self.current_piece = piece
        self.rotations = 0
        self.translations = 0
        return True

    def create_new_piece(self) -> None:
        """Promote the next piece and draw a new one from the unlocked pool."""
        shape = self.next_piece if self.next_piece is not None else self._random_shape()
        if self._spawn_piece(shape):
            self.next_piece = self._random_shape()
            self.is_hold_used = False

    def _end_game(self) -> None:
        self.state = GameState.GAME_OVER
        self.current_piece = None
        logger.info("Game over: score=%d level=%d cubes=%d", self.score, self.level, self.cubes_played)
        if self.leaderboard is not None:
            self.leaderboard.refresh_async()

    # ---------- Commands ----------
    def move_piece(self, dx: int, dy: int, dz: int) -> bool:
        """Shift the falling piece; a blocked downward step lands it.

        Returns True if the piece moved.
        """
        if not self._accepts_commands():
            return False
        assert self.current_piece is not None
        moved = self.current_piece.translated(dx, dy, dz)
        if is_valid_move(moved.cubes, self.grid, self.grid_size):
            self.current_piece = moved
            if dx != 0 or dz != 0:
                self.translations += 1
            if dy > 0:
                self.score += 1
            return True
        if dy > 0:
            self.process_landed_piece(self.current_piece, DropInfo(is_hard_drop=False, distance=0))
        return False

    def rotate_piece(self, axis: Axis | str) -> bool:
        if not self._accepts_commands():
            return False
        assert self.current_piece is not None
        rotated = self.current_piece.rotated(axis)
        if not is_valid_move(rotated.cubes, self.grid, self.grid_size):
            return False
        self.current_piece = rotated
        self.rotations += 1
        return True

    def drop_distance(self) -> int:
        """How far the current piece can fall from where it is."""
        if self.current_piece is None:
            return 0
        distance = 0
        for dy in range(1, self.grid_size[1]):
            if not is_valid_move(self.current_piece.translated(0, dy, 0).cubes, self.grid, self.grid_size):
                break
            distance = dy
        return distance

    def hard_drop(self) -> None:
        if not self._accepts_commands():
            return
        assert self.current_piece is not None
        distance = self.drop_distance()
        landed = self.current_piece.translated(0, distance, 0)
        self.process_landed_piece(landed, DropInfo(is_hard_drop=True, distance=distance))

    def trigger_hold(self) -> bool:
        """Stash the current piece, or swap it with the held one.

        Allowed once per spawned piece. Returns True if anything changed.
        """
        if not self._accepts_commands() or self.is_hold_used:
            return False
        assert self.current_piece is not None
        stashed = self.current_piece.shape
        if self.hold_piece is None:
            self.hold_piece = stashed
            self.current_piece = None
            self.create_new_piece()
        else:
            swapped_in = self.hold_piece
            self.hold_piece = stashed
            self._spawn_piece(swapped_in)
        self.is_hold_used = True
        return True

    def tick(self) -> None:
        """One gravity step."""
        if not self._accepts_commands():
            return
        self.move_piece(0, 1, 0)

    def advance(self, dt_ms: float) -> None:
        """Move the session clock forward, firing gravity and finishing clears."""
        self.clock_ms += dt_ms
        if self.is_playing:
            self.elapsed_ms = self.clock_ms - self.start_ms
        gravity_dt = dt_ms
        if self.pending_clear is not None and self.clock_ms >= self.pending_clear.ready_at_ms:
            # only time after the clear finished counts towards gravity
            gravity_dt = min(dt_ms, self.clock_ms - self.pending_clear.ready_at_ms)
            self.finish_clear()
        if not self._accepts_commands():
            self._gravity_ms = 0.0
            return
        self._gravity_ms += gravity_dt
        while self._gravity_ms >= self.drop_interval and self._accepts_commands():
            self._gravity_ms -= self.drop_interval
            self.tick()

    # ---------- Landing ----------
    def process_landed_piece(self, landed: Piece, drop_info: DropInfo) -> TurnResult:
        self.is_animating = True
        self.current_piece = None

        result = process_turn(
            landed.cubes,
            self.grid,
            self.grid_size,
            self.level,
            self.is_streak_active,
            self.streak_history,
            landed.tier,
            self.rotations,
            self.translations,
            drop_info,
            rules=self.rules,
            marker=landed.tier,
        )
        logger.debug(
            "Landed %s: layers=%s points=%d xp=%.2f",
            landed.shape.name, list(result.full_layers), result.points, result.xp,
        )

        previous_level = self.level
        self.xp, self.level = apply_xp(self.xp + result.xp, self.level)
        if self.level != previous_level:
            logger.info("Level up: %d -> %d", previous_level, self.level)
            self._set_drop_interval(drop_interval_ms(
                self.config.initial_drop_interval_ms,
                self.level,
                step_ms=self.config.drop_interval_step_ms,
                minimum_ms=self.config.min_drop_interval_ms,
            ))
        hard = self.config.difficulty == Difficulty.HARD
        self.unlocked_tiers |= unlocked_tiers(self.level, hard)

        self.score += result.points
        self.cubes_played += len(landed)
        self.pieces_played += 1
        self.layers_cleared_total += result.layers_cleared
        self.is_streak_active = result.is_streak_active
        self.streak_history = result.streak_history
        self.grid = result.grid

        if result.blocks_to_clear:
            self.clearing_blocks, self.exploding_blocks = self._split_cleared(result.blocks_to_clear)
            delay = (
                self.config.max_clear_animation_ms
                if result.layers_cleared >= MAXIMAL_CLEAR_LAYERS
                else self.config.clear_animation_ms
            )
            self.pending_clear = PendingClear(result=result, ready_at_ms=self.clock_ms + delay)
        else:
            self.create_new_piece()
            self.is_animating = False
        return result

    def finish_clear(self) -> None:
        """Collapse the cleared layers and bring in the next piece."""
        pending = self.pending_clear
        if pending is None:
            return
        self.pending_clear = None
        self.grid = drop_cleared_lines(self.grid, pending.result.full_layers)
        self.clearing_blocks = []
        self.exploding_blocks = []
        self.create_new_piece()
        self.is_animating = False

    def _split_cleared(self, blocks: Sequence[Coordinate]) -> Tuple[List[Coordinate], List[Coordinate]]:
        width, _, depth = self.grid_size
        inner: List[Coordinate] = []
        edge: List[Coordinate] = []
        for x, y, z in blocks:
            if x in (0, width - 1) or z in (0, depth - 1):
                edge.append((x, y, z))
            else:
                inner.append((x, y, z))
        return inner, edge

    def _set_drop_interval(self, interval: int) -> None:
        if interval != self.drop_interval:
            self.drop_interval = interval
            self._gravity_ms = 0.0

    # ---------- Leaderboard ----------
    def submit_highscore(self, player_name: str) -> bool:
        if self.leaderboard is None:
            return False
        return self.leaderboard.submit(player_name, self.score)

    # ---------- Snapshot ----------
    def get_state(self) -> Dict[str, Any]:
        needed = required_xp(self.level)
        state: Dict[str, Any] = {
            "game_state": self.state.value,
            "grid": self.grid.copy(),
            "grid_size": self.grid_size,
            "current_piece": list(self.current_piece.cubes) if self.current_piece else None,
            "current_tier": self.current_piece.tier if self.current_piece else None,
            "next_piece": _describe(self.next_piece),
            "hold_piece": _describe(self.hold_piece),
            "is_hold_used": self.is_hold_used,
            "score": self.score,
            "level": self.level,
            "xp": self.xp,
            "xp_required": needed,
            "xp_progress": self.xp / needed,
            "elapsed_ms": self.elapsed_ms,
            "cubes_played": self.cubes_played,
            "pieces_played": self.pieces_played,
            "layers_cleared_total": self.layers_cleared_total,
            "clearing_blocks": list(self.clearing_blocks),
            "exploding_blocks": list(self.exploding_blocks),
            "is_animating": self.is_animating,
            "drop_interval": self.drop_interval,
            "unlocked_tiers": sorted(self.unlocked_tiers),
        }
        if self.leaderboard is not None:
            state["highscores"] = list(self.leaderboard.highscores)
            state["highscore_state"] = self.leaderboard.state.value
        return state

    def board_with_piece(self) -> np.ndarray:
        """Grid copy with the falling piece written in as negative values."""
        board = self.grid.astype(np.int8).copy()
        if self.current_piece is not None:
            for x, y, z in self.current_piece.cubes:
                if y >= 0:
                    board[x, y, z] = -self.current_piece.tier
        return board


def _describe(shape: Optional[ShapeDefinition]) -> Optional[Dict[str, Any]]:
    if shape is None:
        return None
    return {"name": shape.name, "tier": shape.tier, "cells": list(shape.cells)}
