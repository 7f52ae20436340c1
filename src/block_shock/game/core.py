from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config import GameConfig
from .errors import IllegalSlotIndex, InvalidPlacement, ReviveLimitExceeded
from .events import GameEvents
from .grid import Cell, GameGrid
from .pieces import Piece
from .placement import exists_any_placement, placement_cells
from .rules import ScoringRules, detonate, resolve_lines
from .spawn import SpawnCounters, SpawnGenerator


logger = logging.getLogger(__name__)


class Phase(Enum):
    NOT_STARTED = "not_started"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class PlacementResult:
    accepted: bool
    score: int
    score_delta: int = 0
    cells_placed: int = 0
    cleared_cells: int = 0
    bomb_cleared_cells: int = 0
    cleared_rows: List[int] = field(default_factory=list)
    cleared_cols: List[int] = field(default_factory=list)
    combo: int = 0
    game_over: bool = False


class BlockShockGame:
    """One game session: board, three-slot pool, held piece and counters.

    Every operation runs to completion synchronously. Rejected requests
    (bad slot, bad anchor, revive past the cap) leave the state untouched
    instead of raising.

    ``store`` is any object with ``save(game)`` and ``delete()``, normally a
    :class:`block_shock.persistence.SnapshotStore`.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        events: Optional[GameEvents] = None,
        store: Any = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.events = events or GameEvents()
        self.store = store
        self.rng = rng or random.Random(self.config.random_seed)
        self.spawner = SpawnGenerator(self.config, self.rng)

        self.grid = GameGrid(self.config.rows, self.config.cols)
        self.pool: List[Optional[Piece]] = [None] * self.config.pieces_per_set
        self.held: Optional[Piece] = None
        self.counters = SpawnCounters()
        self.score = 0
        self.combo_counter = 0
        self.revive_count = 0
        self.phase = Phase.NOT_STARTED

        self.total_pieces_placed = 0
        self.total_lines_cleared = 0
        self.bombs_detonated = 0

    # ---------- Lifecycle ----------
    def start(self) -> None:
        """Begin a fresh game, discarding anything in progress."""
        self._delete_snapshot()
        self.grid.reset()
        self.pool = [None] * self.config.pieces_per_set
        self.held = None
        self.counters = self.spawner.new_counters()
        self.score = 0
        self.combo_counter = 0
        self.revive_count = 0
        self.total_pieces_placed = 0
        self.total_lines_cleared = 0
        self.bombs_detonated = 0
        self.phase = Phase.PLAYING
        self._refill()
        logger.info(
            "Session started (spawn threshold %d, bomb threshold %d)",
            self.counters.spawn_threshold,
            self.counters.black_spawn_threshold,
        )
        self._check_game_over()

    def restart(self) -> None:
        logger.info("Restarting session at score %d", self.score)
        self.start()

    def home(self) -> None:
        """Abandon the session without any scoring consequence."""
        logger.info("Leaving session at score %d", self.score)
        self._delete_snapshot()
        self.grid.reset()
        self.pool = [None] * self.config.pieces_per_set
        self.held = None
        self.score = 0
        self.combo_counter = 0
        self.revive_count = 0
        self.phase = Phase.NOT_STARTED

    def resume(
        self,
        blocks: Iterable[Tuple[int, int, int]],
        pool: List[Optional[Piece]],
        held: Optional[Piece],
        score: int,
        counters: SpawnCounters,
        combo_counter: int,
        revive_count: int,
    ) -> None:
        """Load a previously saved state and continue playing it."""
        if len(pool) != self.config.pieces_per_set:
            raise ValueError(f"Pool must have {self.config.pieces_per_set} slots")
        if not 0 <= revive_count <= self.config.max_revives:
            raise ValueError(f"revive_count {revive_count} outside 0..{self.config.max_revives}")
        self.grid.reset()
        for row, col, color in blocks:
            self.grid.set_cell(row, col, color)
        self.pool = list(pool)
        self.held = held
        self.score = int(score)
        self.counters = counters
        self.combo_counter = int(combo_counter)
        self.revive_count = int(revive_count)
        self.phase = Phase.PLAYING

    def suspend(self) -> bool:
        """Persist the session if it can be resumed; otherwise drop the save."""
        if self.store is None:
            return False
        if self.phase is Phase.PLAYING:
            self.store.save(self)
            logger.info("Snapshot saved at score %d", self.score)
            return True
        self._delete_snapshot()
        return False

    # ---------- Player operations ----------
    def pick(self, slot: int) -> Optional[Piece]:
        """Take the piece in ``slot`` into hand."""
        if self.phase is not Phase.PLAYING or self.held is not None:
            logger.debug("Pick of slot %s ignored in phase %s", slot, self.phase.value)
            return None
        try:
            piece = self._take_slot(slot)
        except IllegalSlotIndex as exc:
            logger.debug("Pick rejected: %s", exc)
            return None
        self.held = piece
        return piece

    def preview(self, anchor: Cell, piece: Optional[Piece] = None) -> Optional[List[Cell]]:
        """Cells the held piece (or ``piece``) would cover at ``anchor``."""
        piece = piece or self.held
        if piece is None:
            return None
        return placement_cells(self.grid, piece, anchor)

    def release(self, anchor: Cell) -> PlacementResult:
        """Drop the held piece at ``anchor``.

        An illegal anchor sends the piece back to its slot and changes
        nothing else.
        """
        if self.phase is not Phase.PLAYING or self.held is None:
            return PlacementResult(accepted=False, score=self.score)
        piece = self.held
        try:
            placed = self.grid.commit(piece.offsets, anchor, piece.color)
        except InvalidPlacement as exc:
            logger.debug("Placement rejected: %s", exc)
            self._return_to_slot(piece)
            return PlacementResult(accepted=False, score=self.score)

        self.held = None
        self.total_pieces_placed += 1
        result = PlacementResult(accepted=True, score=self.score, cells_placed=placed)
        if piece.is_bomb:
            blast = detonate(self.grid, anchor[0], anchor[1], self.rules)
            self.bombs_detonated += 1
            result.bomb_cleared_cells = blast.cells_cleared
            result.score_delta += blast.points
        else:
            result.score_delta += self.rules.score_for_placement(placed)

        lines = resolve_lines(self.grid, self.rules)
        if lines.found:
            self.combo_counter += 1
            self.total_lines_cleared += len(lines.rows) + len(lines.cols)
        else:
            self.combo_counter = 0
        result.cleared_cells = lines.cells_cleared
        result.cleared_rows = lines.rows
        result.cleared_cols = lines.cols
        result.score_delta += lines.points
        result.combo = self.combo_counter

        self.score += result.score_delta
        result.score = self.score
        if result.score_delta:
            self.events.on_scored(result.score_delta, self.score)

        if self.pool_is_empty():
            self._refill()
        self._check_game_over()
        result.game_over = self.phase is Phase.GAME_OVER
        return result

    def rotate_exception_piece(self, slot: Optional[int] = None) -> Optional[int]:
        """Turn the exception piece a quarter; returns its new rotation index.

        With no ``slot`` the held piece is rotated. Anything other than an
        exception piece is left alone and None is returned.
        """
        if self.phase is not Phase.PLAYING:
            return None
        if slot is None:
            piece = self.held
        elif 0 <= slot < len(self.pool):
            piece = self.pool[slot]
        else:
            return None
        if piece is None or not piece.is_exception:
            return None
        turned = piece.rotated()
        if slot is None:
            self.held = turned
        else:
            self.pool[slot] = turned
        return turned.rotation_index

    def revive(self) -> bool:
        """Continue a finished game with a fresh pool, at most ``max_revives`` times."""
        if self.phase is not Phase.GAME_OVER:
            logger.debug("Revive ignored in phase %s", self.phase.value)
            return False
        try:
            self._consume_revive()
        except ReviveLimitExceeded as exc:
            logger.debug("Revive rejected: %s", exc)
            return False
        self.phase = Phase.PLAYING
        self.held = None
        self._refill()
        logger.info("Revived (%d/%d) at score %d", self.revive_count, self.config.max_revives, self.score)
        self.events.on_revive(self.revive_count)
        self._check_game_over()
        return True

    # ---------- Queries ----------
    @property
    def is_game_over(self) -> bool:
        return self.phase is Phase.GAME_OVER

    @property
    def can_revive(self) -> bool:
        return self.phase is Phase.GAME_OVER and self.revive_count < self.config.max_revives

    def pool_is_empty(self) -> bool:
        return all(piece is None for piece in self.pool)

    def pool_pieces(self) -> List[Piece]:
        return [piece for piece in self.pool if piece is not None]

    def can_place_any_piece(self) -> bool:
        return any(exists_any_placement(self.grid, piece) for piece in self.pool_pieces())

    def serialize(self) -> bytes:
        from block_shock.persistence import serialize

        return serialize(self)

    def get_state(self) -> Dict[str, Any]:
        return {
            "grid": self.grid.occupancy().astype("int8"),
            "pool": list(self.pool),
            "held": self.held,
            "score": self.score,
            "combo_counter": self.combo_counter,
            "revive_count": self.revive_count,
            "phase": self.phase.value,
            "game_over": self.is_game_over,
            "filled_ratio": self.grid.get_filled_ratio(),
        }

    def get_game_stats(self) -> Dict[str, Any]:
        return {
            "final_score": self.score,
            "pieces_placed": self.total_pieces_placed,
            "lines_cleared": self.total_lines_cleared,
            "bombs_detonated": self.bombs_detonated,
            "revives_used": self.revive_count,
            "final_fill_ratio": self.grid.get_filled_ratio(),
            "avg_score_per_piece": self.score / max(1, self.total_pieces_placed),
        }

    # ---------- Internals ----------
    def _take_slot(self, slot: int) -> Piece:
        if not 0 <= slot < len(self.pool):
            raise IllegalSlotIndex(f"Slot {slot} outside 0..{len(self.pool) - 1}")
        piece = self.pool[slot]
        if piece is None:
            raise IllegalSlotIndex(f"Slot {slot} is empty")
        self.pool[slot] = None
        return piece

    def _return_to_slot(self, piece: Piece) -> None:
        self.held = None
        slot = piece.slot
        if 0 <= slot < len(self.pool) and self.pool[slot] is None:
            self.pool[slot] = piece
            return
        # Slot taken (restored state without a slot index): use the first free one.
        free = self.pool.index(None)
        self.pool[free] = piece.at_slot(free, self.config.slot_position(free))

    def _consume_revive(self) -> None:
        if self.revive_count >= self.config.max_revives:
            raise ReviveLimitExceeded(f"All {self.config.max_revives} revives used")
        self.revive_count += 1

    def _refill(self) -> None:
        self.pool = list(self.spawner.refill(self.counters))

    def _check_game_over(self) -> None:
        if self.phase is Phase.PLAYING and self.held is None and not self.can_place_any_piece():
            self._enter_game_over()

    def _enter_game_over(self) -> None:
        self.phase = Phase.GAME_OVER
        self._delete_snapshot()
        logger.info(
            "Game over: score %d after %d pieces (%d revives used)",
            self.score,
            self.total_pieces_placed,
            self.revive_count,
        )
        self.events.on_game_over(self.score)

    def _delete_snapshot(self) -> None:
        if self.store is not None:
            self.store.delete()
