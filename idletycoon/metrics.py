from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from idletycoon.scheduler import Advanced, Frozen, Halted

if TYPE_CHECKING:
    from idletycoon.scheduler import TickResult


@dataclass
class TickSnapshot:
    playtime: int
    balance: float
    max_money: float
    net_income: float
    btc_balance: float
    energy_debt: float


@dataclass
class PriceEvent:
    playtime: int
    investment_id: str
    price: float
    change_percent: float


@dataclass
class SessionEvent:
    playtime: int
    kind: str
    detail: str = ""


class MetricsCollector:
    """Listens to tick results and keeps a per-tick history."""

    def __init__(self, snapshot_interval: int = 1) -> None:
        self.snapshot_interval = snapshot_interval
        self._last_snapshot_time: int | None = None

        self.ticks = 0
        self.market_updates = 0
        self.snapshots: list[TickSnapshot] = []
        self.prices: list[PriceEvent] = []
        self.events: list[SessionEvent] = []

    def __call__(self, result: TickResult) -> None:
        self.record(result)

    def record(self, result: TickResult) -> None:
        if isinstance(result, Advanced):
            self._record_advanced(result)
        elif isinstance(result, Frozen):
            reason = result.ban.reason or ""
            self.events.append(
                SessionEvent(result.ban.player.playtime, "banned", reason)
            )
        elif isinstance(result, Halted):
            self.events.append(
                SessionEvent(result.last_player.playtime, "halted", result.player_id)
            )

    def _record_advanced(self, result: Advanced) -> None:
        player = result.player
        self.ticks += 1
        if result.config_changed:
            self.events.append(SessionEvent(player.playtime, "config_changed"))

        if (
            self._last_snapshot_time is None
            or player.playtime - self._last_snapshot_time >= self.snapshot_interval
        ):
            self.snapshots.append(
                TickSnapshot(
                    playtime=player.playtime,
                    balance=player.balance,
                    max_money=player.max_money,
                    net_income=result.income.net,
                    btc_balance=player.mining_farm.btc_balance,
                    energy_debt=player.mining_farm.energy_debt,
                )
            )
            self._last_snapshot_time = player.playtime

        if result.market_updated:
            self.market_updates += 1
            for inv in player.investments:
                self.prices.append(
                    PriceEvent(
                        playtime=player.playtime,
                        investment_id=inv.id,
                        price=inv.current_price,
                        change_percent=inv.change_percent,
                    )
                )
