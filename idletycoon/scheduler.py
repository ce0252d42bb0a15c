"""The once-per-second tick: config poll, ban check, income, market, persist."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, Union

import structlog

from idletycoon._types import Clock, saturating_add, system_clock
from idletycoon.ban import Banned, evaluate_ban
from idletycoon.economy import (
    IncomeBreakdown,
    MiningPerformance,
    calculate_business_income,
    calculate_mining_performance,
)
from idletycoon.market import MarketModel, update_market_prices
from idletycoon.timer import RepeatingTimer, Timer

if TYPE_CHECKING:
    from idletycoon.database import GlobalConfig
    from idletycoon.ledger import PlayerLedger
    from idletycoon.player import Player
    from idletycoon.store import GameStore

logger = structlog.get_logger()

TICK_SECONDS = 1
MARKET_TICK_EVERY = 30


@dataclass(frozen=True)
class Advanced:
    """The tick applied income and persisted the player."""

    player: Player
    income: IncomeBreakdown
    mining: MiningPerformance
    market_updated: bool = False
    config_changed: bool = False


@dataclass(frozen=True)
class Frozen:
    """An active ban was observed; no mutation happened."""

    ban: Banned
    config_changed: bool = False


@dataclass(frozen=True)
class Halted:
    """The player record disappeared; the last snapshot is kept."""

    player_id: str
    last_player: Player


TickResult = Union[Advanced, Frozen, Halted]


class TickScheduler:
    """Advances one player's economy on a fixed period."""

    def __init__(
        self,
        store: GameStore,
        ledger: PlayerLedger,
        config: GlobalConfig | None = None,
        clock: Clock = system_clock,
        timer: Timer | None = None,
        period_seconds: int = TICK_SECONDS,
        market_tick_every: int = MARKET_TICK_EVERY,
        market_model: MarketModel | None = None,
        rng: random.Random | None = None,
        on_result: Callable[[TickResult], None] | None = None,
    ) -> None:
        if period_seconds <= 0:
            raise ValueError("period_seconds must be positive")
        if market_tick_every <= 0:
            raise ValueError("market_tick_every must be positive")

        self._store = store
        self._ledger = ledger
        self._config = config if config is not None else store.load_config()
        self._clock = clock
        self._timer = timer if timer is not None else RepeatingTimer(period_seconds)
        self.period_seconds = period_seconds
        self.market_tick_every = market_tick_every
        self._market_model = market_model or MarketModel()
        self._rng = rng or random.Random()
        self._on_result = on_result

        self._tick_counter = 0
        self._frozen: Banned | None = None
        self._halted = False

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._timer.running

    def start(self) -> None:
        if self._frozen is not None or self._halted:
            return
        self._timer.start(self._on_timer)

    def stop(self) -> None:
        self._timer.stop()

    def _on_timer(self) -> None:
        self.step()

    # ── State ────────────────────────────────────────────────────────

    @property
    def observed_config(self) -> GlobalConfig:
        return self._config

    @property
    def tick_counter(self) -> int:
        return self._tick_counter

    @property
    def frozen(self) -> Banned | None:
        return self._frozen

    @property
    def halted(self) -> bool:
        return self._halted

    # ── Tick ─────────────────────────────────────────────────────────

    def poll_config(self) -> bool:
        """Re-read the shared config; adopt it only if its content changed."""
        fresh = self._store.load_config()
        if fresh == self._config:
            return False
        self._config = fresh
        logger.info("config changed", version=fresh.version, track=fresh.active_track)
        return True

    def step(self) -> TickResult:
        player_id = self._ledger.player.id
        if self._halted:
            return Halted(player_id=player_id, last_player=self._ledger.player)
        if self._frozen is not None:
            return Frozen(ban=self._frozen)

        config_changed = self.poll_config()

        fresh = self._store.get_player(player_id)
        if fresh is None:
            self._halted = True
            self.stop()
            logger.warning("player record missing, halting ticks", player_id=player_id)
            return self._emit(Halted(player_id=player_id, last_player=self._ledger.player))

        now = self._clock()
        status = evaluate_ban(fresh, now)
        if isinstance(status, Banned):
            self._frozen = status
            self.stop()
            logger.info("ban observed during tick", player_id=player_id, until=status.until)
            return self._emit(Frozen(ban=status, config_changed=config_changed))
        if status.expired_ban:
            self._store.unban_user(player_id)

        outcome: list[tuple[IncomeBreakdown, MiningPerformance, bool]] = []

        def advance(prev: Player) -> Player:
            updated, income, mining, market_updated = self._advance(prev, now)
            outcome.append((income, mining, market_updated))
            return updated

        player = self._ledger.apply(advance)
        income, mining, market_updated = outcome[0]
        return self._emit(
            Advanced(
                player=player,
                income=income,
                mining=mining,
                market_updated=market_updated,
                config_changed=config_changed,
            )
        )

    def _advance(
        self, prev: Player, now: int
    ) -> tuple[Player, IncomeBreakdown, MiningPerformance, bool]:
        income = calculate_business_income(prev, self._config)
        mining = calculate_mining_performance(prev, self._config)

        balance = saturating_add(prev.balance, income.net)
        farm = replace(
            prev.mining_farm,
            btc_balance=saturating_add(prev.mining_farm.btc_balance, mining.btc_income),
            energy_debt=saturating_add(prev.mining_farm.energy_debt, mining.energy_cost),
        )
        updated = replace(
            prev,
            balance=balance,
            max_money=max(prev.max_money, balance),
            mining_farm=farm,
            playtime=prev.playtime + self.period_seconds,
            banned_until=None,
            ban_reason=None,
        )

        market_updated = False
        self._tick_counter += 1
        if self._tick_counter >= self.market_tick_every:
            updated = update_market_prices(updated, self._market_model, self._rng, now)
            self._tick_counter = 0
            market_updated = True
        return updated, income, mining, market_updated

    def _emit(self, result: TickResult) -> TickResult:
        if self._on_result is not None:
            self._on_result(result)
        return result
