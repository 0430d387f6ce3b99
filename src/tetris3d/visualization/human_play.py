from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict

import pygame

from tetris3d.game import Axis, GameConfig, Tetris3DGame
from tetris3d.leaderboard import LeaderboardClient
from .renderer import Renderer


Command = Callable[[Tetris3DGame], object]

KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: lambda g: g.move_piece(-1, 0, 0),
    pygame.K_RIGHT: lambda g: g.move_piece(1, 0, 0),
    pygame.K_UP: lambda g: g.move_piece(0, 0, -1),
    pygame.K_DOWN: lambda g: g.move_piece(0, 0, 1),
    pygame.K_s: lambda g: g.move_piece(0, 1, 0),
    pygame.K_q: lambda g: g.rotate_piece(Axis.X),
    pygame.K_w: lambda g: g.rotate_piece(Axis.Y),
    pygame.K_e: lambda g: g.rotate_piece(Axis.Z),
    pygame.K_SPACE: lambda g: g.hard_drop(),
    pygame.K_c: lambda g: g.trigger_hold(),
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--size", choices=["S", "M", "L"], default="M")
    p.add_argument("--difficulty", choices=["Easy", "Medium", "Hard"], default="Medium")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--leaderboard", action="store_true", help="fetch highscores on game over")
    return p


def run() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    leaderboard = LeaderboardClient() if args.leaderboard else None
    game = Tetris3DGame(GameConfig(random_seed=args.seed), leaderboard=leaderboard)
    game.init_game(args.size, args.difficulty)

    pygame.init()
    try:
        clock = pygame.time.Clock()
        renderer = Renderer(cell_size=28)
        screen = pygame.display.set_mode(renderer.window_size(game))
        pygame.display.set_caption("tetris3d - Human Play")
        font = pygame.font.SysFont(None, 22)

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        game.reset_game()
                    else:
                        command = KEY_TO_COMMAND.get(event.key)
                        if command is not None:
                            command(game)

            # Gravity and clear animations run off the frame clock
            game.advance(clock.tick(60))

            renderer.draw(screen, game, font)
            if not game.is_playing:
                text = font.render("Game Over - Press R to restart, ESC to quit", True, (255, 100, 100))
                screen.blit(text, text.get_rect(center=(screen.get_width() // 2, 10)))
            pygame.display.flip()
    finally:
        pygame.quit()
        if leaderboard is not None:
            leaderboard.close()


if __name__ == "__main__":  # pragma: no cover
    run()
