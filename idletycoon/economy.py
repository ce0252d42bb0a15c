"""Per-tick income calculators. Pure: inputs are never mutated."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from idletycoon._types import saturate
from idletycoon.database import GlobalConfig

if TYPE_CHECKING:
    from idletycoon.player import Player

BTC_PER_GPU = 0.00001
GPU_LEVEL_BONUS = 0.25


@dataclass(frozen=True)
class IncomeBreakdown:
    gross: float = 0.0
    tax: float = 0.0
    net: float = 0.0


@dataclass(frozen=True)
class MiningPerformance:
    btc_income: float = 0.0
    energy_cost: float = 0.0


def calculate_business_income(
    player: Player, config: GlobalConfig | None = None
) -> IncomeBreakdown:
    """Net business income for one tick.

    net = gross * globalMultiplier * (1 - taxRate), with the tax rate
    clamped to [0, 1] and the multiplier to >= 0.
    """
    config = config or GlobalConfig()
    gross = saturate(sum(b.income_per_tick() for b in player.businesses))
    if gross == 0.0:
        return IncomeBreakdown()

    multiplier = max(0.0, config.global_multiplier)
    tax_rate = min(1.0, max(0.0, config.tax_rate))
    boosted = saturate(gross * multiplier)
    tax = saturate(boosted * tax_rate)
    return IncomeBreakdown(gross=gross, tax=tax, net=saturate(boosted - tax))


def calculate_mining_performance(
    player: Player, config: GlobalConfig | None = None
) -> MiningPerformance:
    """BTC mined and energy billed for one tick. Both are >= 0."""
    config = config or GlobalConfig()
    farm = player.mining_farm
    count = max(0, farm.gpu_count)
    if count == 0:
        return MiningPerformance()

    level = max(1, farm.gpu_level)
    per_gpu = BTC_PER_GPU * (1.0 + GPU_LEVEL_BONUS * (level - 1))
    return MiningPerformance(
        btc_income=saturate(count * per_gpu),
        energy_cost=saturate(count * max(0.0, config.energy_cost_per_gpu)),
    )
