from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from idletycoon.market import Candle
from idletycoon.metrics import MetricsCollector, PriceEvent, SessionEvent, TickSnapshot

if TYPE_CHECKING:
    from idletycoon.player import Player


@dataclass
class SessionReport:
    """Summary of a run of ticks for one player."""

    player_id: str = ""
    outcome: str = ""
    ticks: int = 0
    market_updates: int = 0

    start_balance: float = 0.0
    end_balance: float = 0.0
    max_money: float = 0.0
    btc_mined: float = 0.0
    energy_accrued: float = 0.0
    mean_net_income: float = 0.0

    snapshots: list[TickSnapshot] = field(default_factory=list)
    prices: list[PriceEvent] = field(default_factory=list)
    events: list[SessionEvent] = field(default_factory=list)
    candles: dict[str, list[Candle]] = field(default_factory=dict)

    def balance_series(self) -> list[tuple[int, float]]:
        """(playtime, balance) pairs."""
        return [(s.playtime, s.balance) for s in self.snapshots]

    def price_series(self, investment_id: str) -> list[tuple[int, float]]:
        return [
            (p.playtime, p.price)
            for p in self.prices
            if p.investment_id == investment_id
        ]


def build_report(
    collector: MetricsCollector,
    start: Player,
    end: Player,
    outcome: str,
) -> SessionReport:
    """Build a SessionReport from collected metrics and the two endpoints."""
    nets = [s.net_income for s in collector.snapshots]
    return SessionReport(
        player_id=end.id,
        outcome=outcome,
        ticks=collector.ticks,
        market_updates=collector.market_updates,
        start_balance=start.balance,
        end_balance=end.balance,
        max_money=end.max_money,
        btc_mined=end.mining_farm.btc_balance - start.mining_farm.btc_balance,
        energy_accrued=end.mining_farm.energy_debt - start.mining_farm.energy_debt,
        mean_net_income=(sum(nets) / len(nets)) if nets else 0.0,
        snapshots=collector.snapshots,
        prices=collector.prices,
        events=collector.events,
        candles={inv.id: list(inv.history) for inv in end.investments},
    )
