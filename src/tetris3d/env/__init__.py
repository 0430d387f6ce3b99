"""Gymnasium environments for tetris3d."""

from __future__ import annotations

from gymnasium.envs.registration import register

# One environment per grid size preset
for _size in ("S", "M", "L"):
    register(
        id=f"Tetris3D-{_size}-v0",
        entry_point="tetris3d.env.tetris3d_env:Tetris3DEnv",
        kwargs={"size": _size},
    )

__all__ = ["Tetris3D-S-v0", "Tetris3D-M-v0", "Tetris3D-L-v0"]
