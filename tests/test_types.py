"""Tests for clock and saturating arithmetic helpers."""
import math

from idletycoon._types import MAX_CURRENCY, SimulatedClock, saturate, saturating_add


class TestSimulatedClock:
    def test_starts_where_told(self):
        assert SimulatedClock(1234)() == 1234

    def test_advance(self):
        clock = SimulatedClock(0)
        clock.advance(1000)
        clock.advance(500)
        assert clock() == 1500


class TestSaturate:
    def test_negative_becomes_zero(self):
        assert saturate(-5.0) == 0.0

    def test_nan_becomes_zero(self):
        assert saturate(math.nan) == 0.0

    def test_infinity_capped(self):
        assert saturate(math.inf) == MAX_CURRENCY

    def test_ordinary_value_unchanged(self):
        assert saturate(42.5) == 42.5


class TestSaturatingAdd:
    def test_ordinary(self):
        assert saturating_add(100.0, 10.0) == 110.0

    def test_overflow_clamped(self):
        assert saturating_add(MAX_CURRENCY, MAX_CURRENCY) == MAX_CURRENCY

    def test_nan_delta_leaves_total(self):
        assert saturating_add(100.0, math.nan) == 100.0

    def test_negative_clamped(self):
        assert saturating_add(-MAX_CURRENCY, -1e18) == -MAX_CURRENCY
