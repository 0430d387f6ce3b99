from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris3d.game import Axis, GameConfig, GameState, Tetris3DGame
from tetris3d.game.grid import column_heights


class Action(IntEnum):
    NONE = 0
    LEFT = 1
    RIGHT = 2
    FORWARD = 3
    BACK = 4
    SOFT_DROP = 5
    ROTATE_X = 6
    ROTATE_Y = 7
    ROTATE_Z = 8
    HARD_DROP = 9
    HOLD = 10


MOVES: Dict[Action, Tuple[int, int, int]] = {
    Action.LEFT: (-1, 0, 0),
    Action.RIGHT: (1, 0, 0),
    Action.FORWARD: (0, 0, -1),
    Action.BACK: (0, 0, 1),
    Action.SOFT_DROP: (0, 1, 0),
}

ROTATIONS: Dict[Action, Axis] = {
    Action.ROTATE_X: Axis.X,
    Action.ROTATE_Y: Axis.Y,
    Action.ROTATE_Z: Axis.Z,
}


def apply_action(game: Tetris3DGame, action: Action) -> None:
    if action in MOVES:
        game.move_piece(*MOVES[action])
    elif action in ROTATIONS:
        game.rotate_piece(ROTATIONS[action])
    elif action == Action.HARD_DROP:
        game.hard_drop()
    elif action == Action.HOLD:
        game.trigger_hold()


class Tetris3DEnv(gym.Env):
    """Single-agent wrapper around a game session.

    The clear animation is skipped: once a landing clears layers the grid is
    collapsed before the observation is returned. Gravity fires every
    `gravity_every` steps.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
        gravity_every: int = 4,
        max_episode_steps: int = 10000,
        terminal_penalty: float = 0.0,
        **config_kwargs: Any,
    ) -> None:
        super().__init__()
        self.game = Tetris3DGame(config or GameConfig(**config_kwargs))
        self.render_mode = render_mode
        self.gravity_every = int(gravity_every)
        self.max_episode_steps = int(max_episode_steps)
        self.terminal_penalty = float(terminal_penalty)

        width, height, depth = self.game.config.grid_size
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(width, height, depth), dtype=np.int8),
                "piece": spaces.Box(low=0, high=1, shape=(width, height, depth), dtype=np.int8),
                # tier of the next/held shape, 0 when there is none
                "next_tier": spaces.Discrete(4),
                "hold_tier": spaces.Discrete(4),
                "hold_available": spaces.Discrete(2),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        game = self.game
        grid = (game.grid != 0).astype(np.int8)
        piece = np.zeros_like(grid)
        if game.current_piece is not None:
            for x, y, z in game.current_piece.cubes:
                if y >= 0:
                    piece[x, y, z] = 1
        return {
            "grid": grid,
            "piece": piece,
            "next_tier": int(game.next_piece.tier) if game.next_piece is not None else 0,
            "hold_tier": int(game.hold_piece.tier) if game.hold_piece is not None else 0,
            "hold_available": int(not game.is_hold_used),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "level": self.game.level,
            "layers_cleared_total": self.game.layers_cleared_total,
            "cubes_played": self.game.cubes_played,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        self.game.reset_game(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        action = Action(int(action))
        score_before = self.game.score

        apply_action(self.game, action)
        self._steps += 1
        if self.gravity_every > 0 and self._steps % self.gravity_every == 0:
            self.game.tick()
        if self.game.pending_clear is not None:
            self.game.finish_clear()

        terminated = self.game.state == GameState.GAME_OVER
        truncated = not terminated and self._steps >= self.max_episode_steps

        reward_components: Dict[str, float] = {"score": float(self.game.score - score_before)}
        if terminated:
            reward_components["terminal"] = self.terminal_penalty
        reward = float(sum(reward_components.values()))

        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        # Top-down height map, brighter means taller
        heights = column_heights(self.game.grid)
        width, height, depth = self.game.grid.shape
        cell = 12
        img = np.zeros((depth * cell, width * cell, 3), dtype=np.uint8)
        for x in range(width):
            for z in range(depth):
                shade = int(30 + 200 * heights[x, z] / max(1, height))
                img[z * cell : (z + 1) * cell, x * cell : (x + 1) * cell, :] = (shade // 3, shade, shade // 2)
        if self.game.current_piece is not None:
            for x, _, z in self.game.current_piece.cubes:
                img[z * cell : (z + 1) * cell, x * cell : (x + 1) * cell, :] = (240, 200, 60)
        return img

    def close(self) -> None:
        pass
