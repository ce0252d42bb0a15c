from __future__ import annotations

from typing import Callable

from idletycoon._types import MAX_CURRENCY


class CostScaling:
    """Determines how a purchase price grows with the level or count owned."""

    def __init__(self, fn: Callable[[float, int], float]) -> None:
        self._fn = fn

    def compute(self, base_cost: float, owned: int) -> float:
        return min(self._fn(base_cost, max(owned, 0)), MAX_CURRENCY)

    @classmethod
    def exponential(cls, growth_rate: float = 1.15) -> CostScaling:
        """Price = base * growth_rate^owned."""
        gr = growth_rate

        def _compute(base: float, owned: int) -> float:
            try:
                return base * gr ** owned
            except OverflowError:
                return MAX_CURRENCY

        return cls(_compute)


# Upgrade prices used by the manual actions.
BUSINESS_UPGRADE = CostScaling.exponential(1.15)
GPU_PURCHASE = CostScaling.exponential(1.12)
GPU_UPGRADE = CostScaling.exponential(1.6)
