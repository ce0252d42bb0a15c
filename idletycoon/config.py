from __future__ import annotations

from dataclasses import dataclass, field

from idletycoon.market import MarketModel
from idletycoon.scheduler import MARKET_TICK_EVERY, TICK_SECONDS


@dataclass
class EngineConfig:
    """Settings for a headless or real-time run.

    *wall_period* is the real delay between ticks in real-time mode; it
    defaults to *tick_seconds*.
    """

    tick_seconds: int = TICK_SECONDS
    market_tick_every: int = MARKET_TICK_EVERY
    seed: int | None = None
    market: MarketModel = field(default_factory=MarketModel)
    wall_period: float | None = None

    def __post_init__(self) -> None:
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        if self.market_tick_every <= 0:
            raise ValueError("market_tick_every must be positive")
        if self.wall_period is None:
            self.wall_period = float(self.tick_seconds)
        elif self.wall_period <= 0:
            raise ValueError("wall_period must be positive")
