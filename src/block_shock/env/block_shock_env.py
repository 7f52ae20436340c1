from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_shock.game import BlockShockGame, GameConfig, ScoringRules
from block_shock.game.shapes import BASE_SHAPES


MAX_ROTATIONS = 4
BOMB_CODE = len(BASE_SHAPES)  # piece code for a bomb; -1 marks an empty slot


def _compute_action_mask(game: BlockShockGame) -> np.ndarray:
    """Boolean mask of shape (slots, rows, cols, rotations).

    Only an exception piece may be placed at a rotation other than its
    current one; a bomb is always played at rotation 0.
    """
    k = game.config.pieces_per_set
    rows, cols = game.config.rows, game.config.cols
    mask = np.zeros((k, rows, cols, MAX_ROTATIONS), dtype=np.bool_)
    if game.is_game_over:
        return mask
    for slot, piece in enumerate(game.pool):
        if piece is None:
            continue
        if piece.is_exception:
            choices = [(r, piece.with_rotation(r)) for r in range(piece.rotation_count)]
        else:
            choices = [(0 if piece.is_bomb else piece.rotation_index, piece)]
        for r, candidate in choices:
            for row in range(rows):
                for col in range(cols):
                    if game.grid.can_place(candidate.offsets, (row, col)):
                        mask[slot, row, col, r] = True
    return mask


class BlockShockEnv(gym.Env):
    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 render_mode: Optional[str] = None,
                 invalid_action_penalty: float = -1.0,
                 terminal_penalty: float = 0.0,
                 auto_revive: bool = False,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.game = BlockShockGame(config, rules)
        self.render_mode = render_mode

        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)
        self.auto_revive = bool(auto_revive)
        self.max_episode_steps = int(max_episode_steps)

        rows, cols = self.game.config.rows, self.game.config.cols
        k = self.game.config.pieces_per_set

        # Observation: occupancy grid plus per-slot piece code, rotation and exception flag
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(rows, cols), dtype=np.int8),
                "pieces": spaces.Box(low=-1, high=BOMB_CODE, shape=(k,), dtype=np.int8),
                "rotations": spaces.Box(low=0, high=MAX_ROTATIONS - 1, shape=(k,), dtype=np.int8),
                "exception": spaces.MultiBinary(k),
                "pieces_remaining": spaces.Discrete(k + 1),
            }
        )

        # Action: (slot, row, col, rotation)
        self.action_space = spaces.MultiDiscrete((k, rows, cols, MAX_ROTATIONS))

        self._last_obs: Optional[Dict[str, Any]] = None
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        k = self.game.config.pieces_per_set
        pieces = np.full((k,), -1, dtype=np.int8)
        rotations = np.zeros((k,), dtype=np.int8)
        exception = np.zeros((k,), dtype=np.int8)
        for slot, piece in enumerate(self.game.pool):
            if piece is None:
                continue
            pieces[slot] = BOMB_CODE if piece.is_bomb else piece.base_index
            rotations[slot] = 0 if piece.is_bomb else piece.rotation_index
            exception[slot] = int(piece.is_exception)
        return {
            "grid": self.game.grid.occupancy().astype(np.int8),
            "pieces": pieces,
            "rotations": rotations,
            "exception": exception,
            "pieces_remaining": len(self.game.pool_pieces()),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": _compute_action_mask(self.game),
            "score": self.game.score,
            "revive_count": self.game.revive_count,
            "combo": self.game.combo_counter,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.rng.seed(seed)
        self.game.start()
        self._steps = 0
        obs = self._get_obs()
        self._last_obs = obs
        return obs, self._get_info()

    def _is_valid(self, slot: int, row: int, col: int, r: int) -> bool:
        if not 0 <= slot < len(self.game.pool):
            return False
        piece = self.game.pool[slot]
        if piece is None:
            return False
        if piece.is_exception:
            if r >= piece.rotation_count:
                return False
            piece = piece.with_rotation(r)
        elif r != (0 if piece.is_bomb else piece.rotation_index):
            return False
        return self.game.grid.can_place(piece.offsets, (row, col))

    def step(self, action: np.ndarray | Tuple[int, int, int, int]):
        slot, row, col, r = map(int, action)

        reward_components: Dict[str, float] = {}
        if self._is_valid(slot, row, col, r):
            piece = self.game.pool[slot]
            while piece.is_exception and piece.rotation_index != r:
                self.game.rotate_exception_piece(slot)
                piece = self.game.pool[slot]
            self.game.pick(slot)
            result = self.game.release((row, col))
            reward_components["score"] = float(result.score_delta)
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        if self.game.is_game_over and self.auto_revive and self.game.can_revive:
            self.game.revive()

        terminated = bool(self.game.is_game_over)
        self._steps += 1
        truncated = self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        reward = float(sum(reward_components.values()))
        obs = self._get_obs()
        info = self._get_info()
        info["reward_components"] = reward_components
        self._last_obs = obs
        return obs, reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        # Flat color image of the board, one 12px square per cell
        cell = 12
        rows, cols = self.game.grid.shape
        img = np.zeros((rows * cell, cols * cell, 3), dtype=np.uint8)
        img[:, :] = (12, 45, 72)
        for row, col, color in self.game.grid.occupied_cells():
            rgb = ((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)
            img[row * cell : (row + 1) * cell, col * cell : (col + 1) * cell, :] = rgb
        return img

    def close(self) -> None:
        pass
