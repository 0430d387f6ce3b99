from __future__ import annotations

import argparse

import gymnasium as gym

import tetris3d.env  # noqa: F401  ensure registration


def run_random(env_id: str = "Tetris3D-S-v0", steps: int = 500, seed: int | None = None) -> float:
    env = gym.make(env_id)
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    games = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            games += 1
            print(f"game {games}: score={info['score']} level={info['level']} layers={info['layers_cleared_total']}")
            obs, info = env.reset()
    env.close()
    print(f"Random agent total reward: {total_reward:.2f}")
    return total_reward


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--env", type=str, default="Tetris3D-S-v0")
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--seed", type=int, default=None)
    args = p.parse_args()
    run_random(args.env, args.steps, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
