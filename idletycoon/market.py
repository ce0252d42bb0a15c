"""Investment records and the simulated price walk."""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from idletycoon.player import Player


@dataclass(frozen=True)
class Candle:
    """One OHLC bucket. *time* is the bucket start in epoch milliseconds."""

    time: int
    open: float
    high: float
    low: float
    close: float

    def amend(self, price: float) -> Candle:
        """Fold a new price into a still-open bucket."""
        return replace(
            self,
            high=max(self.high, price),
            low=min(self.low, price),
            close=price,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | float) -> Candle:
        # Older saves stored bare closing prices.
        if isinstance(data, (int, float)):
            price = float(data)
            return cls(time=0, open=price, high=price, low=price, close=price)
        close = float(data.get("close") or 0.0)
        return cls(
            time=int(data.get("time") or 0),
            open=float(data.get("open", close)),
            high=float(data.get("high", close)),
            low=float(data.get("low", close)),
            close=close,
        )


@dataclass
class Investment:
    """A tradable symbol with its price and bounded candle history."""

    id: str
    symbol: str = ""
    name: str = ""
    current_price: float = 0.0
    change_percent: float = 0.0
    owned_amount: int = 0
    history: list[Candle] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.symbol:
            self.symbol = self.id.upper()
        if not self.name:
            self.name = self.symbol

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "name": self.name,
            "currentPrice": self.current_price,
            "changePercent": self.change_percent,
            "ownedAmount": self.owned_amount,
            "history": [c.to_dict() for c in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Investment:
        return cls(
            id=str(data["id"]),
            symbol=data.get("symbol") or "",
            name=data.get("name") or "",
            current_price=float(data.get("currentPrice") or 0.0),
            change_percent=float(data.get("changePercent") or 0.0),
            owned_amount=int(data.get("ownedAmount") or 0),
            history=[Candle.from_dict(c) for c in data.get("history") or []],
        )


@dataclass
class MarketModel:
    """Parameters of the bounded random walk.

    Each market tick moves a price by ``drift + volatility * N(0, 1)``,
    clipped to ``±max_step`` and then to ``[price_floor, price_ceiling]``.
    """

    drift: float = 0.0005
    volatility: float = 0.02
    max_step: float = 0.10
    price_floor: float = 0.01
    price_ceiling: float = 1e9
    candle_interval_ms: int = 30_000
    history_limit: int = 50

    def __post_init__(self) -> None:
        if self.volatility < 0:
            raise ValueError("volatility must be >= 0")
        if not 0 < self.max_step < 1:
            raise ValueError("max_step must be in (0, 1)")
        if not 0 < self.price_floor < self.price_ceiling:
            raise ValueError("price bounds must satisfy 0 < floor < ceiling")
        if self.candle_interval_ms <= 0:
            raise ValueError("candle_interval_ms must be positive")
        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")

    def bucket(self, now: int) -> int:
        return now - now % self.candle_interval_ms

    def next_price(self, price: float, rng: random.Random) -> float:
        step = self.drift + self.volatility * rng.gauss(0.0, 1.0)
        step = max(-self.max_step, min(step, self.max_step))
        moved = max(price, self.price_floor) * (1.0 + step)
        return round(max(self.price_floor, min(moved, self.price_ceiling)), 2)


def change_percent(old: float, new: float) -> float:
    if old <= 0:
        return 0.0
    return round((new - old) / old * 100.0, 2)


def step_investment(
    inv: Investment, model: MarketModel, rng: random.Random, now: int
) -> Investment:
    """Return *inv* after one price step, with its candle series updated."""
    old = inv.current_price
    new = model.next_price(old, rng)
    bucket = model.bucket(now)

    history = list(inv.history)
    if history and bucket <= history[-1].time:
        history[-1] = history[-1].amend(new)
    else:
        opening = old if old > 0 else new
        history.append(
            Candle(
                time=bucket,
                open=opening,
                high=max(opening, new),
                low=min(opening, new),
                close=new,
            )
        )
    if len(history) > model.history_limit:
        history = history[-model.history_limit:]

    return replace(
        inv,
        current_price=new,
        change_percent=change_percent(old, new),
        history=history,
    )


def update_market_prices(
    player: Player,
    model: MarketModel | None = None,
    rng: random.Random | None = None,
    now: int = 0,
) -> Player:
    """Reprice every investment once. Returns a new player; input untouched."""
    model = model or MarketModel()
    rng = rng or random.Random()
    investments = [step_investment(inv, model, rng, now) for inv in player.investments]
    return replace(player, investments=investments, last_market_update=now)
