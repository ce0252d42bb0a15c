"""Tests for manual player actions."""
import pytest

from idletycoon import actions
from idletycoon.business import Business
from idletycoon.market import Investment
from idletycoon.mining import MiningFarm

from conftest import make_player


class TestTap:
    def test_earns_click_value(self):
        result = actions.tap(make_player(click_level=3))
        assert result.success
        assert result.amount == 3.0
        assert result.player.balance == 103.0
        assert result.player.max_money == 103.0

    def test_level_up(self):
        p = make_player(click_exp=99, click_exp_max=100)
        result = actions.tap(p)
        assert result.player.click_level == 2
        assert result.player.click_exp == 0
        assert result.player.click_exp_max == 150

    def test_input_untouched(self):
        p = make_player()
        actions.tap(p)
        assert p.balance == 100.0
        assert p.click_exp == 0


class TestBusinesses:
    def test_buy(self):
        p = make_player(balance=2_000.0)
        result = actions.buy_business(p, "mill")
        assert result.success
        mill = result.player.get_business("mill")
        assert mill.owned and mill.level == 1
        assert result.player.balance == 1_000.0
        assert result.player.logs[-1].startswith("Bought Mill")

    def test_buy_rejections(self):
        p = make_player()
        assert actions.buy_business(p, "shop").reason == "Already owned"
        assert actions.buy_business(p, "mill").reason == "Cannot afford"
        assert not actions.buy_business(p, "nope").success

    def test_upgrade(self):
        result = actions.upgrade_business(make_player(), "shop")
        assert result.success
        assert result.amount == pytest.approx(57.5)
        assert result.player.get_business("shop").level == 2
        assert result.player.balance == pytest.approx(42.5)

    def test_upgrade_not_owned(self):
        assert actions.upgrade_business(make_player(), "mill").reason == "Not owned"

    def test_upgrade_cost(self):
        p = make_player()
        assert actions.upgrade_cost(p, "shop") == pytest.approx(57.5)
        assert actions.upgrade_cost(p, "mill") is None

    def test_rename(self):
        result = actions.rename_business(make_player(), "shop", "  Corner Shop ")
        assert result.player.get_business("shop").display_name == "Corner Shop"

    def test_rename_rejections(self):
        p = make_player()
        assert not actions.rename_business(p, "shop", "   ").success
        assert not actions.rename_business(p, "shop", "x" * 33).success
        assert actions.rename_business(p, "mill", "Mine").reason == "Not owned"

    def test_logs_bounded(self):
        p = make_player(
            balance=1e9,
            logs=[f"entry {i}" for i in range(actions.MAX_LOG_ENTRIES)],
            businesses=[Business("mill", base_cost=1)],
        )
        result = actions.buy_business(p, "mill")
        assert len(result.player.logs) == actions.MAX_LOG_ENTRIES
        assert result.player.logs[0] == "entry 1"


class TestMining:
    def test_buy_gpu(self):
        result = actions.buy_gpu(make_player(balance=1_000.0))
        assert result.player.mining_farm.gpu_count == 1
        assert result.amount == 500.0

    def test_gpu_price_grows(self):
        p = make_player(balance=10_000.0, mining_farm=MiningFarm(gpu_count=1))
        assert actions.buy_gpu(p).amount == pytest.approx(560.0)

    def test_no_free_slots(self):
        p = make_player(balance=1e9, mining_farm=MiningFarm(gpu_count=10, max_slots=10))
        assert actions.buy_gpu(p).reason == "No free GPU slots"

    def test_upgrade_gpu(self):
        result = actions.upgrade_gpu(make_player(balance=5_000.0))
        assert result.player.mining_farm.gpu_level == 2
        assert result.amount == 2_000.0

    def test_upgrade_gpu_cannot_afford(self):
        assert actions.upgrade_gpu(make_player()).reason == "Cannot afford"


class TestShares:
    def _player(self, **kw):
        return make_player(investments=[Investment("aapl", current_price=20.0, **kw)])

    def test_buy(self):
        result = actions.buy_shares(self._player(), "aapl", 3)
        assert result.player.get_investment("aapl").owned_amount == 3
        assert result.player.balance == 40.0

    def test_buy_cannot_afford(self):
        assert actions.buy_shares(self._player(), "aapl", 6).reason == "Cannot afford"

    def test_amount_must_be_positive(self):
        assert not actions.buy_shares(self._player(), "aapl", 0).success
        assert not actions.sell_shares(self._player(owned_amount=1), "aapl", 0).success

    def test_sell(self):
        result = actions.sell_shares(self._player(owned_amount=5), "aapl", 2)
        assert result.player.get_investment("aapl").owned_amount == 3
        assert result.player.balance == 140.0
        assert result.player.max_money == 140.0

    def test_sell_more_than_owned(self):
        assert actions.sell_shares(self._player(owned_amount=1), "aapl", 2).reason == "Not enough shares"

    def test_unknown_investment(self):
        assert not actions.buy_shares(self._player(), "zzz").success
