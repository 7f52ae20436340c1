import random
from typing import List, Optional

from block_shock.game import BlockShockGame, GameConfig, GameEvents, Piece
from block_shock.game.pieces import PALETTE


class FakeStore:
    """Records save/delete calls instead of touching the filesystem."""

    def __init__(self):
        self.saves = 0
        self.deletes = 0

    def save(self, game):
        self.saves += 1

    def delete(self):
        self.deletes += 1


class RecordingEvents(GameEvents):
    def __init__(self):
        self.scored = []
        self.game_overs = []
        self.revives = []

    def on_scored(self, delta, score):
        self.scored.append((delta, score))

    def on_game_over(self, final_score):
        self.game_overs.append(final_score)

    def on_revive(self, count):
        self.revives.append(count)


class ScriptedRandom(random.Random):
    """Random whose single-argument randrange calls follow a script.

    Range draws (``randint``) return their lower bound.
    """

    def __init__(self, script):
        super().__init__(0)
        self.script = list(script)

    def randrange(self, start, stop=None, step=1):
        if stop is None:
            return self.script.pop(0)
        return start


def normal(base, rotation=0, slot=0, exception=False, color=PALETTE[0]):
    config = GameConfig()
    return Piece.normal(base, rotation, color, is_exception=exception, slot=slot,
                        origin=config.slot_position(slot))


def bomb(slot=0):
    return Piece.bomb(slot=slot, origin=GameConfig().slot_position(slot))


def load_pool(game: BlockShockGame, pieces: List[Optional[Piece]]):
    pool = list(pieces) + [None] * (game.config.pieces_per_set - len(pieces))
    game.pool = [p.at_slot(i, game.config.slot_position(i)) if p is not None else None
                 for i, p in enumerate(pool)]


def fill(game: BlockShockGame, cells, color=PALETTE[1]):
    for row, col in cells:
        game.grid.set_cell(row, col, color)


