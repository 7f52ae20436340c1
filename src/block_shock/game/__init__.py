"""Game module for Block Shock.

Exports the core engine and its supporting pieces:
- Shape / rotations / BASE_SHAPES: the shape library
- GameGrid: fixed-size colored board
- Piece / PieceKind: pool piece values
- ScoringRules: scoring configuration and the match/clear engine
- SpawnGenerator / SpawnCounters: pool batch generation
- BlockShockGame: the session state machine
"""

from .config import GameConfig
from .core import BlockShockGame, Phase, PlacementResult
from .errors import CorruptSnapshot, GameError, IllegalSlotIndex, InvalidPlacement, ReviveLimitExceeded
from .events import EventFanout, GameEvents
from .grid import EMPTY, GameGrid
from .pieces import BOMB_COLOR, PALETTE, Piece, PieceKind, color_to_hex, hex_to_color
from .placement import can_place, exists_any_placement, get_valid_anchors, placement_cells
from .rules import ScoringRules, clear, detect_full_lines, detonate, resolve_lines
from .shapes import BASE_SHAPES, Shape, is_square_like, rotate, rotations, shape_for, shape_key
from .spawn import SpawnCounters, SpawnGenerator

__all__ = [
    "GameConfig",
    "BlockShockGame",
    "Phase",
    "PlacementResult",
    "GameError",
    "InvalidPlacement",
    "CorruptSnapshot",
    "ReviveLimitExceeded",
    "IllegalSlotIndex",
    "GameEvents",
    "EventFanout",
    "EMPTY",
    "GameGrid",
    "BOMB_COLOR",
    "PALETTE",
    "Piece",
    "PieceKind",
    "color_to_hex",
    "hex_to_color",
    "can_place",
    "exists_any_placement",
    "get_valid_anchors",
    "placement_cells",
    "ScoringRules",
    "clear",
    "detect_full_lines",
    "detonate",
    "resolve_lines",
    "BASE_SHAPES",
    "Shape",
    "is_square_like",
    "rotate",
    "rotations",
    "shape_for",
    "shape_key",
    "SpawnCounters",
    "SpawnGenerator",
]
