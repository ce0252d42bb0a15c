"""Shared fixtures: in-memory store, simulated clock and a seeded world."""
import logging
import random

import pytest
import structlog

from idletycoon._types import SimulatedClock
from idletycoon.audio import AudioController, HeadlessAudioBackend
from idletycoon.business import Business
from idletycoon.database import GameDatabase, GlobalConfig
from idletycoon.player import Player
from idletycoon.session import GameSession
from idletycoon.store import GameStore, MemoryKeyValueStore
from idletycoon.timer import SteppedTimer

NOW = 1_700_000_000_000


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


def make_player(player_id: str = "p1", **overrides) -> Player:
    """Balance 100 with one owned shop earning 10 per tick."""
    fields = dict(
        id=player_id,
        balance=100.0,
        max_money=100.0,
        businesses=[
            Business("shop", "Shop", "retail", base_cost=50, base_income=10, level=1, owned=True),
            Business("mill", "Mill", "industry", base_cost=1_000, base_income=80),
        ],
    )
    fields.update(overrides)
    return Player(**fields)


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return GameStore(kv)


@pytest.fixture
def clock():
    return SimulatedClock(NOW)


@pytest.fixture
def timer():
    return SteppedTimer()


@pytest.fixture
def world(store):
    """A store holding one ordinary player and default config."""
    store.save_database(GameDatabase(players=[make_player()], config=GlobalConfig()))
    return store


@pytest.fixture
def backend():
    return HeadlessAudioBackend()


@pytest.fixture
def session(world, clock, timer, backend):
    return GameSession(
        world,
        clock=clock,
        audio=AudioController(backend),
        timer_factory=lambda: timer,
        rng=random.Random(7),
    )
