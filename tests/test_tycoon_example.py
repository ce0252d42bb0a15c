"""Tests for the example world."""
import random

import pytest

from examples.tycoon_example import define_world
from idletycoon.audio import resolve_track
from idletycoon.economy import calculate_business_income
from idletycoon.session import GameSession, SessionState
from idletycoon.settings import AppSettings
from idletycoon.store import GameStore, MemoryKeyValueStore
from idletycoon.timer import SteppedTimer


def _session():
    store = GameStore(MemoryKeyValueStore())
    store.save_database(define_world())
    timer = SteppedTimer()
    return GameSession(store, timer_factory=lambda: timer, rng=random.Random(0)), timer


def test_world_players():
    world = define_world()
    assert [p.id for p in world.players] == ["rookie", "veteran", "cheater", "admin"]
    assert world.get_player("admin").is_admin


def test_rookie_earns_nothing():
    world = define_world()
    assert calculate_business_income(world.get_player("rookie"), world.config).net == 0.0


def test_veteran_income_is_taxed():
    world = define_world()
    income = calculate_business_income(world.get_player("veteran"), world.config)
    assert income.gross == (1 + 6 + 30) * 3
    assert income.net == pytest.approx(income.gross * 0.9)


def test_cheater_is_locked_out():
    session, timer = _session()
    assert session.login("cheater") is SessionState.BANNED
    assert session.ban.reason == "Autoclicker"
    assert not timer.running


def test_hidden_track_is_silent():
    world = define_world()
    assert resolve_track(AppSettings(selected_track="retired"), world.config) is None
    assert resolve_track(AppSettings(selected_track="lofi"), world.config).endswith("lofi.mp3")


def test_veteran_plays():
    session, timer = _session()
    session.login("veteran")
    timer.fire(10)
    assert session.player.playtime == 7_210
