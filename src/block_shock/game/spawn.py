from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import List, Optional

from .config import GameConfig
from .pieces import PALETTE, Piece
from .shapes import ROTATIONS, is_square_like


logger = logging.getLogger(__name__)


@dataclass
class SpawnCounters:
    """Counters that decide when exception and bomb pieces show up."""
    spawn_counter: int = 0
    spawn_threshold: int = 5
    black_spawn_counter: int = 0
    black_spawn_threshold: int = 8

    @classmethod
    def fresh(cls, rng: random.Random, config: GameConfig) -> "SpawnCounters":
        return cls(
            spawn_counter=0,
            spawn_threshold=rng.randint(*config.exception_threshold_range),
            black_spawn_counter=0,
            black_spawn_threshold=rng.randint(*config.bomb_threshold_range),
        )


class SpawnGenerator:
    """Produces one pool batch at a time."""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.random_seed)

    def new_counters(self) -> SpawnCounters:
        return SpawnCounters.fresh(self.rng, self.config)

    def _random_piece(self, slot: int) -> Piece:
        base_index = self.rng.randrange(len(ROTATIONS))
        rotation_index = self.rng.randrange(len(ROTATIONS[base_index]))
        color = self.rng.choice(PALETTE)
        return Piece.normal(
            base_index,
            rotation_index,
            color,
            slot=slot,
            origin=self.config.slot_position(slot),
            display_scale=self.config.piece_display_scale,
        )

    def _bomb(self, slot: int) -> Piece:
        return Piece.bomb(
            slot=slot,
            origin=self.config.slot_position(slot),
            display_scale=self.config.bomb_display_scale,
        )

    def refill(self, counters: SpawnCounters) -> List[Piece]:
        """Generate a full batch, advancing ``counters`` in place."""
        batch: List[Piece] = []
        exception_assigned = False
        for slot in range(self.config.pieces_per_set):
            if counters.black_spawn_counter >= counters.black_spawn_threshold:
                piece = self._bomb(slot)
                counters.black_spawn_counter = 0
                counters.black_spawn_threshold = self.rng.randint(*self.config.bomb_threshold_range)
            else:
                piece = self._random_piece(slot)
                counters.spawn_counter += 1
                counters.black_spawn_counter += 1
                if (
                    not exception_assigned
                    and counters.spawn_counter >= counters.spawn_threshold
                    and not is_square_like(piece.shape)
                ):
                    piece = replace(piece, is_exception=True)
                    exception_assigned = True
                    counters.spawn_counter = 0
                    counters.spawn_threshold = self.rng.randint(*self.config.exception_threshold_range)
            batch.append(piece)
        logger.debug(
            "Spawned batch %s",
            ["bomb" if p.is_bomb else f"{p.base_index}/{p.rotation_index}{'*' if p.is_exception else ''}"
             for p in batch],
        )
        return batch
