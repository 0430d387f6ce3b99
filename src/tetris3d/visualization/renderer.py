from __future__ import annotations

from typing import Tuple

import numpy as np
import pygame

from tetris3d.game import Tetris3DGame
from tetris3d.game.grid import column_heights, layer_fill


TIER_COLORS = {
    1: (38, 139, 210),
    2: (133, 153, 0),
    3: (211, 54, 130),
}


def _height_color(height: int, max_height: int) -> Tuple[int, int, int]:
    if height == 0:
        return (20, 20, 26)
    t = height / max(1, max_height)
    return (int(40 + 180 * t), int(80 + 100 * (1 - t)), 120)


class Renderer:
    """Top-down view of the well plus a per-layer fill strip.

    Each (x, z) column is shaded by stack height; the falling piece is drawn
    in its tier color on top.
    """

    def __init__(self, cell_size: int = 30, margin: int = 20, strip_width: int = 60) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.strip_width = strip_width

    def window_size(self, game: Tetris3DGame) -> Tuple[int, int]:
        width, height, depth = game.grid_size
        board_h = max(depth * self.cell_size, height * 12)
        return (
            self.margin * 3 + width * self.cell_size + self.strip_width,
            self.margin * 2 + board_h + 60,
        )

    def _board_surface(self, game: Tetris3DGame) -> pygame.Surface:
        width, height, depth = game.grid_size
        surf = pygame.Surface((width * self.cell_size, depth * self.cell_size))
        surf.fill((30, 30, 36))
        heights = column_heights(game.grid)
        for x in range(width):
            for z in range(depth):
                rect = pygame.Rect(x * self.cell_size, z * self.cell_size, self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(surf, _height_color(int(heights[x, z]), height), rect)
        if game.current_piece is not None:
            color = TIER_COLORS.get(game.current_piece.tier, (200, 200, 200))
            for x, _, z in game.current_piece.cubes:
                rect = pygame.Rect(x * self.cell_size + 4, z * self.cell_size + 4, self.cell_size - 9, self.cell_size - 9)
                pygame.draw.rect(surf, color, rect)
        return surf

    def _strip_surface(self, game: Tetris3DGame) -> pygame.Surface:
        fill: np.ndarray = layer_fill(game.grid)
        row_h = 12
        surf = pygame.Surface((self.strip_width, len(fill) * row_h))
        surf.fill((15, 15, 20))
        clearing = {y for _, y, _ in game.clearing_blocks + game.exploding_blocks}
        for y, ratio in enumerate(fill):
            color = (255, 215, 0) if y in clearing else (70, 200, 120)
            pygame.draw.rect(surf, color, pygame.Rect(0, y * row_h, int(self.strip_width * ratio), row_h - 2))
        return surf

    def draw(self, screen: pygame.Surface, game: Tetris3DGame, font: pygame.font.Font) -> None:
        screen.fill((10, 10, 14))
        board = self._board_surface(game)
        screen.blit(board, (self.margin, self.margin))
        screen.blit(self._strip_surface(game), (self.margin * 2 + board.get_width(), self.margin))

        state = game.get_state()
        hold = state["hold_piece"]["name"] if state["hold_piece"] else "-"
        nxt = state["next_piece"]["name"] if state["next_piece"] else "-"
        lines = [
            f"Score {state['score']}  Level {state['level']}  XP {state['xp']:.1f}/{state['xp_required']}",
            f"Next {nxt}  Hold {hold}  Time {state['elapsed_ms'] / 1000:.0f}s  Cubes {state['cubes_played']}",
        ]
        y = screen.get_height() - 50
        for text in lines:
            screen.blit(font.render(text, True, (230, 230, 230)), (self.margin, y))
            y += 22
