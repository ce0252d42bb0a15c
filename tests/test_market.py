"""Tests for the price walk and candle history."""
import random

import pytest

from idletycoon.market import (
    Candle,
    Investment,
    MarketModel,
    change_percent,
    step_investment,
    update_market_prices,
)
from idletycoon.player import Player


def test_model_validation():
    with pytest.raises(ValueError):
        MarketModel(volatility=-0.1)
    with pytest.raises(ValueError):
        MarketModel(max_step=1.5)
    with pytest.raises(ValueError):
        MarketModel(price_floor=0)
    with pytest.raises(ValueError):
        MarketModel(history_limit=0)


def test_step_bounded():
    model = MarketModel(volatility=5.0, max_step=0.10)
    rng = random.Random(3)
    price = 100.0
    for _ in range(200):
        new = model.next_price(price, rng)
        assert price * 0.9 - 0.01 <= new <= price * 1.1 + 0.01
        assert new >= model.price_floor
        price = new


def test_floor_holds():
    model = MarketModel(drift=-0.5, volatility=0.0, max_step=0.5, price_floor=1.0)
    assert model.next_price(1.0, random.Random(0)) == 1.0


def test_change_percent():
    assert change_percent(100.0, 110.0) == 10.0
    assert change_percent(0.0, 5.0) == 0.0


def test_new_bucket_appends_candle():
    model = MarketModel(volatility=0.0, drift=0.01)
    inv = Investment("aapl", current_price=100.0)
    inv = step_investment(inv, model, random.Random(0), now=30_000)
    assert len(inv.history) == 1
    assert inv.history[0].time == 30_000
    assert inv.history[0].open == 100.0
    assert inv.history[0].close == inv.current_price == 101.0
    assert inv.change_percent == 1.0


def test_same_bucket_amends_last_candle():
    model = MarketModel(volatility=0.0, drift=0.01)
    inv = Investment("aapl", current_price=100.0)
    inv = step_investment(inv, model, random.Random(0), now=30_000)
    inv = step_investment(inv, model, random.Random(0), now=45_000)
    assert len(inv.history) == 1
    assert inv.history[0].open == 100.0
    assert inv.history[0].close == inv.current_price
    assert inv.history[0].high == inv.current_price


def test_history_bounded():
    model = MarketModel(history_limit=5, candle_interval_ms=1_000)
    inv = Investment("aapl", current_price=100.0)
    rng = random.Random(1)
    for i in range(12):
        inv = step_investment(inv, model, rng, now=i * 1_000)
    assert len(inv.history) == 5
    assert inv.history[-1].time == 11_000


def test_update_leaves_input_untouched():
    p = Player(id="x", investments=[Investment("a", current_price=10.0), Investment("b", current_price=20.0)])
    updated = update_market_prices(p, rng=random.Random(2), now=60_000)
    assert p.investments[0].history == []
    assert p.last_market_update is None
    assert updated.last_market_update == 60_000
    assert all(len(inv.history) == 1 for inv in updated.investments)


def test_legacy_history_gets_new_bucket():
    inv = Investment("a", current_price=10.0, history=[Candle(0, 10, 10, 10, 10)])
    inv = step_investment(inv, MarketModel(), random.Random(0), now=90_000)
    assert len(inv.history) == 2
