"""Snapshot codec for suspending and resuming a session.

Pieces are stored as (catalog index, rotation index) and re-derived from the
shape library on load, so the catalog order in
:mod:`block_shock.game.shapes` is part of the save format.
"""

from __future__ import annotations

import logging
import math
import os
import random
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from block_shock.game.config import GameConfig
from block_shock.game.core import BlockShockGame, Phase
from block_shock.game.errors import CorruptSnapshot, GameError
from block_shock.game.events import GameEvents
from block_shock.game.pieces import BOMB_COLOR, Piece, color_to_hex, hex_to_color
from block_shock.game.rules import ScoringRules
from block_shock.game.shapes import is_square_like
from block_shock.game.spawn import SpawnCounters


logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "savedGame.json"
HEX_COLOR = r"^#?[0-9A-Fa-f]{6}$"


class SpawnPoint(BaseModel):
    """Where a piece sat in the pool, in host coordinates."""
    x: float
    y: float


class SavedBlock(BaseModel):
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    color: str = Field(pattern=HEX_COLOR)


class SavedPiece(BaseModel):
    baseIndex: int = Field(default=0, ge=0)
    rotationIndex: int = Field(default=0, ge=0)
    color: str = Field(pattern=HEX_COLOR, validation_alias=AliasChoices("color", "blockColor"))
    originalSpawnPosition: SpawnPoint
    displayScale: float = Field(gt=0)
    exceptionSpawn: bool = False
    isBlackSpawn: bool = False
    slotIndex: Optional[int] = Field(default=None, ge=0)


class GameSnapshot(BaseModel):
    score: int = Field(ge=0)
    spawnCounter: int = Field(ge=0)
    spawnThreshold: int = Field(ge=0)
    blackSpawnCounter: int = Field(ge=0)
    blackSpawnThreshold: int = Field(ge=0)
    comboCounter: int = Field(default=0, ge=0)
    reviveCount: int = Field(default=0, ge=0)
    gridBlocks: List[SavedBlock] = Field(default_factory=list)
    currentPiece: Optional[SavedPiece] = None
    spawnOptions: List[SavedPiece] = Field(default_factory=list)


# ---------- Encoding ----------
def _save_piece(piece: Piece) -> SavedPiece:
    origin = SpawnPoint(x=piece.origin[0], y=piece.origin[1])
    if piece.is_bomb:
        return SavedPiece(
            baseIndex=0,
            rotationIndex=0,
            color=color_to_hex(BOMB_COLOR),
            originalSpawnPosition=origin,
            displayScale=piece.display_scale,
            exceptionSpawn=False,
            isBlackSpawn=True,
            slotIndex=piece.slot,
        )
    return SavedPiece(
        baseIndex=piece.base_index,
        rotationIndex=piece.rotation_index,
        color=color_to_hex(piece.color),
        originalSpawnPosition=origin,
        displayScale=piece.display_scale,
        exceptionSpawn=piece.is_exception,
        isBlackSpawn=False,
        slotIndex=piece.slot,
    )


def snapshot_of(game: BlockShockGame) -> GameSnapshot:
    counters = game.counters
    return GameSnapshot(
        score=game.score,
        spawnCounter=counters.spawn_counter,
        spawnThreshold=counters.spawn_threshold,
        blackSpawnCounter=counters.black_spawn_counter,
        blackSpawnThreshold=counters.black_spawn_threshold,
        comboCounter=game.combo_counter,
        reviveCount=game.revive_count,
        gridBlocks=[
            SavedBlock(row=row, col=col, color=color_to_hex(color))
            for row, col, color in game.grid.occupied_cells()
        ],
        currentPiece=_save_piece(game.held) if game.held is not None else None,
        spawnOptions=[_save_piece(piece) for piece in game.pool_pieces()],
    )


def serialize(game: BlockShockGame) -> bytes:
    return snapshot_of(game).model_dump_json().encode("utf-8")


# ---------- Decoding ----------
def _load_piece(saved: SavedPiece, slot: int, origin: Tuple[float, float]) -> Piece:
    if saved.isBlackSpawn:
        return Piece.bomb(slot=slot, origin=origin, display_scale=saved.displayScale)
    return Piece.normal(
        saved.baseIndex,
        saved.rotationIndex,
        hex_to_color(saved.color),
        is_exception=saved.exceptionSpawn,
        slot=slot,
        origin=origin,
        display_scale=saved.displayScale,
    )


def _match_slot(saved: SavedPiece, positions: Sequence[Tuple[float, float]], taken: Sequence[bool]) -> int:
    if saved.slotIndex is not None and saved.slotIndex < len(taken) and not taken[saved.slotIndex]:
        return saved.slotIndex
    point = saved.originalSpawnPosition
    for slot, (x, y) in enumerate(positions):
        if not taken[slot] and math.isclose(x, point.x, abs_tol=1e-6) and math.isclose(y, point.y, abs_tol=1e-6):
            return slot
    for slot, used in enumerate(taken):
        if not used:
            return slot
    raise CorruptSnapshot("More saved pieces than pool slots")


def _check_exceptions(pieces: Sequence[Optional[Piece]]) -> None:
    exceptions = [piece for piece in pieces if piece is not None and piece.is_exception]
    if len(exceptions) > 1:
        raise CorruptSnapshot(f"{len(exceptions)} exception pieces in one snapshot")
    if exceptions and is_square_like(exceptions[0].shape):
        raise CorruptSnapshot(f"Square-like shape {exceptions[0].base_index} marked as exception")


def restore_into(game: BlockShockGame, snapshot: GameSnapshot) -> BlockShockGame:
    """Load ``snapshot`` into ``game``; raises CorruptSnapshot on bad content."""
    config = game.config
    taken = [False] * config.pieces_per_set
    pool: List[Optional[Piece]] = [None] * config.pieces_per_set
    try:
        for saved in snapshot.spawnOptions:
            slot = _match_slot(saved, config.slot_positions, taken)
            taken[slot] = True
            origin = (saved.originalSpawnPosition.x, saved.originalSpawnPosition.y)
            pool[slot] = _load_piece(saved, slot, origin)
        held = None
        if snapshot.currentPiece is not None:
            saved = snapshot.currentPiece
            slot = _match_slot(saved, config.slot_positions, taken)
            origin = (saved.originalSpawnPosition.x, saved.originalSpawnPosition.y)
            held = _load_piece(saved, slot, origin)
        counters = SpawnCounters(
            spawn_counter=snapshot.spawnCounter,
            spawn_threshold=snapshot.spawnThreshold,
            black_spawn_counter=snapshot.blackSpawnCounter,
            black_spawn_threshold=snapshot.blackSpawnThreshold,
        )
        blocks = [(b.row, b.col, hex_to_color(b.color)) for b in snapshot.gridBlocks]
        if held is None and all(piece is None for piece in pool):
            raise CorruptSnapshot("Snapshot has neither a held piece nor pool pieces")
        _check_exceptions([held] + pool)
        game.resume(
            blocks,
            pool,
            held,
            score=snapshot.score,
            counters=counters,
            combo_counter=snapshot.comboCounter,
            revive_count=snapshot.reviveCount,
        )
    except CorruptSnapshot:
        raise
    except (ValueError, GameError) as exc:
        raise CorruptSnapshot(str(exc)) from exc
    return game


def deserialize(
    data: Union[bytes, str],
    config: Optional[GameConfig] = None,
    rules: Optional[ScoringRules] = None,
    events: Optional[GameEvents] = None,
    store: Any = None,
    rng: Optional[random.Random] = None,
) -> Optional[BlockShockGame]:
    """Rebuild a session from :func:`serialize` output.

    Returns None for anything that does not decode into a playable session;
    callers treat that as "no saved game".
    """
    game = BlockShockGame(config, rules, events=events, store=store, rng=rng)
    try:
        snapshot = GameSnapshot.model_validate_json(data)
        return restore_into(game, snapshot)
    except ValidationError as exc:
        logger.warning("Discarding malformed snapshot: %d validation errors", exc.error_count())
    except CorruptSnapshot as exc:
        logger.warning("Discarding corrupt snapshot: %s", exc)
    return None


class SnapshotStore:
    """Single-file save slot for the session in progress."""

    def __init__(self, path: Union[str, Path] = SNAPSHOT_FILENAME) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, game: BlockShockGame) -> None:
        if game.phase is not Phase.PLAYING:
            self.delete()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_bytes(serialize(game))
        os.replace(tmp_path, self.path)

    def load(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        events: Optional[GameEvents] = None,
        rng: Optional[random.Random] = None,
    ) -> Optional[BlockShockGame]:
        """Resume the saved session, or None if there is nothing usable.

        A snapshot that fails to decode is removed so it is not retried.
        """
        if not self.exists():
            return None
        game = deserialize(self.path.read_bytes(), config, rules, events=events, store=self, rng=rng)
        if game is None:
            self.delete()
        return game

    def delete(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Deleted snapshot %s", self.path)
