import pytest

from block_shock.game import BlockShockGame, GameConfig

from helpers import FakeStore, RecordingEvents


@pytest.fixture
def events():
    return RecordingEvents()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def game(events, store):
    """A started session with an empty board."""
    g = BlockShockGame(GameConfig(random_seed=1234), events=events, store=store)
    g.start()
    g.grid.reset()
    return g
