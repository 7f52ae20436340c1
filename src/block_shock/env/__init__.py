"""Gymnasium environments for Block Shock."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register the placement environment: (slot, row, col, rotation) actions
register(
    id="BlockShock-8x8-v0",
    entry_point="block_shock.env.block_shock_env:BlockShockEnv",
)

__all__ = ["BlockShock-8x8-v0"]
