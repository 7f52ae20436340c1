from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict, List, Optional

import gymnasium as gym
import numpy as np

import block_shock.env  # noqa: F401
from block_shock.utils.logging_setup import setup_logging


logger = logging.getLogger(__name__)


def run_random(episodes: int = 5, seed: Optional[int] = None, auto_revive: bool = True,
               max_steps: int = 2000) -> List[Dict[str, float]]:
    """Play whole games choosing uniformly among the legal placements."""
    env = gym.make("BlockShock-8x8-v0", auto_revive=auto_revive, max_episode_steps=max_steps)
    rng = np.random.default_rng(seed)
    results: List[Dict[str, float]] = []
    try:
        for episode in range(episodes):
            obs, info = env.reset(seed=None if seed is None else seed + episode)
            total_reward = 0.0
            steps = 0
            done = False
            while not done:
                valid = np.argwhere(info["action_mask"])
                if len(valid) == 0:
                    break
                action = valid[rng.integers(len(valid))]
                obs, reward, terminated, truncated, info = env.step(action)
                total_reward += float(reward)
                steps += 1
                done = terminated or truncated
            logger.info("Episode %d: score=%d steps=%d revives=%d",
                        episode, info["score"], steps, info["revive_count"])
            results.append({"score": float(info["score"]), "reward": total_reward, "steps": float(steps)})
    finally:
        env.close()
    return results


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Block Shock with a random agent")
    p.add_argument("--episodes", type=int, default=5)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--max-steps", type=int, default=2000)
    p.add_argument("--no-revive", action="store_true", help="Stop at the first game over")
    p.add_argument("--log-file", type=Path, default=None)
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)
    results = run_random(args.episodes, args.seed, auto_revive=not args.no_revive, max_steps=args.max_steps)
    scores = [r["score"] for r in results]
    if scores:
        logger.info("Mean score over %d episodes: %.1f (best %d)", len(scores), float(np.mean(scores)), max(scores))


if __name__ == "__main__":  # pragma: no cover
    main()
