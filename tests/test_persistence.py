import copy
import json

import pytest

from block_shock.game import BlockShockGame, GameConfig, Phase
from block_shock.game.pieces import PALETTE
from block_shock.persistence import SnapshotStore, deserialize, serialize

from helpers import bomb, fill, load_pool, normal


VALID = {
    "score": 42,
    "spawnCounter": 2,
    "spawnThreshold": 6,
    "blackSpawnCounter": 5,
    "blackSpawnThreshold": 9,
    "comboCounter": 1,
    "reviveCount": 0,
    "gridBlocks": [{"row": 7, "col": 0, "color": "#E74C3C"}],
    "currentPiece": None,
    "spawnOptions": [
        {
            "baseIndex": 2,
            "rotationIndex": 1,
            "blockColor": "F39C12",
            "originalSpawnPosition": {"x": 5.0 / 6.0, "y": -0.5},
            "displayScale": 0.4,
            "exceptionSpawn": True,
            "isBlackSpawn": False,
        },
    ],
}


def _encode(payload):
    return json.dumps(payload).encode("utf-8")


def _busy_game(game):
    fill(game, [(7, c) for c in range(5)], color=PALETTE[2])
    fill(game, [(0, 0)], color=PALETTE[6])
    load_pool(game, [normal(13, rotation=1, exception=True), bomb(), normal(5, rotation=3)])
    game.score = 77
    game.combo_counter = 2
    game.revive_count = 1
    game.pick(0)
    return game


def test_round_trip_restores_the_session(game):
    _busy_game(game)
    restored = deserialize(serialize(game), GameConfig())
    assert restored is not None
    assert restored.phase is Phase.PLAYING
    assert (restored.grid.grid == game.grid.grid).all()
    assert restored.score == 77
    assert restored.combo_counter == 2
    assert restored.revive_count == 1
    assert restored.counters == game.counters
    assert restored.held == game.held
    assert restored.pool == game.pool


def test_serialized_form_uses_hex_colors(game):
    _busy_game(game)
    payload = json.loads(serialize(game).decode("utf-8"))
    assert {"row": 0, "col": 0, "color": "#00509D"} in payload["gridBlocks"]
    assert len(payload["gridBlocks"]) == 6
    assert payload["currentPiece"]["exceptionSpawn"] is True
    bombs = [p for p in payload["spawnOptions"] if p["isBlackSpawn"]]
    assert len(bombs) == 1 and bombs[0]["color"] == "#000000"


def test_restored_exception_piece_stays_rotatable(game):
    _busy_game(game)
    restored = deserialize(serialize(game), GameConfig())
    assert restored.rotate_exception_piece() == 2


def test_accepts_saves_without_slot_index():
    restored = deserialize(_encode(VALID), GameConfig())
    assert restored is not None
    assert restored.pool[0] is None and restored.pool[1] is None
    piece = restored.pool[2]
    assert piece.base_index == 2 and piece.rotation_index == 1
    assert piece.color == 0xF39C12
    assert piece.is_exception
    assert restored.grid.color_at(7, 0) == 0xE74C3C
    assert restored.counters.black_spawn_threshold == 9


def _broken(mutate):
    payload = copy.deepcopy(VALID)
    mutate(payload)
    return _encode(payload)


@pytest.mark.parametrize(
    "data",
    [
        b"not json",
        b"{}",
        b"[]",
        _broken(lambda p: p["spawnOptions"][0].update(baseIndex=99)),
        _broken(lambda p: p["spawnOptions"][0].update(rotationIndex=4)),
        _broken(lambda p: p["gridBlocks"][0].update(row=8)),
        _broken(lambda p: p["gridBlocks"][0].update(color="#GG0000")),
        _broken(lambda p: p.update(reviveCount=4)),
        _broken(lambda p: p.update(score=-1)),
        _broken(lambda p: p.update(spawnOptions=p["spawnOptions"] * 4)),
        _broken(lambda p: p.update(spawnOptions=[])),
        _broken(lambda p: p["spawnOptions"].append(
            dict(p["spawnOptions"][0], originalSpawnPosition={"x": 1.0 / 6.0, "y": -0.5}))),
        _broken(lambda p: p.update(currentPiece=dict(p["spawnOptions"][0], slotIndex=0))),
        _broken(lambda p: p["spawnOptions"][0].update(baseIndex=1, rotationIndex=0)),
        _broken(lambda p: p["spawnOptions"][0].update(baseIndex=10, rotationIndex=0)),
    ],
)
def test_malformed_snapshots_are_rejected(data):
    assert deserialize(data, GameConfig()) is None


def test_store_saves_and_loads(tmp_path):
    store = SnapshotStore(tmp_path / "savedGame.json")
    game = BlockShockGame(GameConfig(random_seed=11), store=store)
    game.start()
    load_pool(game, [normal(10)])
    game.pick(0)
    game.release((4, 4))
    assert game.suspend()
    assert store.exists()

    loaded = store.load(GameConfig())
    assert loaded is not None
    assert loaded.store is store
    assert loaded.score == game.score
    assert loaded.grid.color_at(4, 4) == game.grid.color_at(4, 4)
    assert loaded.pool == game.pool


def test_store_drops_corrupt_file(tmp_path):
    path = tmp_path / "savedGame.json"
    path.write_bytes(b"garbage")
    store = SnapshotStore(path)
    assert store.load() is None
    assert not path.exists()


def test_store_load_without_file(tmp_path):
    assert SnapshotStore(tmp_path / "missing.json").load() is None


def test_game_over_removes_snapshot(tmp_path):
    store = SnapshotStore(tmp_path / "savedGame.json")
    game = BlockShockGame(GameConfig(random_seed=5), store=store)
    game.start()
    game.suspend()
    assert store.exists()
    game.phase = Phase.GAME_OVER
    store.save(game)
    assert not store.exists()


def test_start_discards_previous_snapshot(tmp_path):
    store = SnapshotStore(tmp_path / "savedGame.json")
    game = BlockShockGame(GameConfig(random_seed=5), store=store)
    game.start()
    game.suspend()
    game.start()
    assert not store.exists()


def test_every_rotation_index_of_a_legacy_save_loads():
    for rotation in range(4):
        payload = copy.deepcopy(VALID)
        payload["spawnOptions"][0].update(baseIndex=0, rotationIndex=rotation, exceptionSpawn=False)
        restored = deserialize(_encode(payload), GameConfig())
        assert restored is not None, rotation
        assert restored.pool[2].rotation_index == rotation


def test_single_exception_piece_round_trips(game):
    load_pool(game, [normal(10), normal(4, rotation=2, exception=True), normal(9)])
    restored = deserialize(serialize(game), GameConfig())
    assert restored is not None
    assert [p.is_exception for p in restored.pool] == [False, True, False]
