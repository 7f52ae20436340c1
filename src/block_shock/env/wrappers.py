from __future__ import annotations

from typing import Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .block_shock_env import _compute_action_mask


class FlattenDiscreteActionWrapper(gym.ActionWrapper):
    """Exposes the (slot, row, col, rotation) action space as Discrete(N).

    Flat indices follow C order over the MultiDiscrete dims, the same order
    as ``info["action_mask"].reshape(-1)``.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        if not isinstance(env.action_space, spaces.MultiDiscrete):
            raise TypeError("FlattenDiscreteActionWrapper needs a MultiDiscrete action space")
        self.dims: Tuple[int, ...] = tuple(int(n) for n in env.action_space.nvec)
        self.action_space = spaces.Discrete(int(np.prod(self.dims)))

    def encode(self, slot: int, row: int, col: int, rotation: int) -> int:
        return int(np.ravel_multi_index((slot, row, col, rotation), self.dims))

    def decode(self, index: int) -> Tuple[int, int, int, int]:
        slot, row, col, rotation = np.unravel_index(int(index), self.dims)
        return int(slot), int(row), int(col), int(rotation)

    def action(self, action: int):  # type: ignore[override]
        return np.array(self.decode(action), dtype=np.int64)

    def get_action_mask(self) -> np.ndarray:
        return _compute_action_mask(self.env.unwrapped.game).reshape(-1)
