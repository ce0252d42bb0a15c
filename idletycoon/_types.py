from __future__ import annotations

import math
import time
from typing import Callable

# Milliseconds since the epoch, same unit as persisted timestamps.
Clock = Callable[[], int]

MAX_CURRENCY = 1e18
PERMANENT_BAN = -1
GLOBAL_TRACK = "global"


def system_clock() -> int:
    """Wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class SimulatedClock:
    """Manually advanced clock for headless runs and tests."""

    def __init__(self, start_ms: int = 0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


def saturate(value: float, ceiling: float = MAX_CURRENCY) -> float:
    """Clamp a non-negative per-tick delta into [0, ceiling]. NaN becomes 0."""
    if math.isnan(value) or value <= 0:
        return 0.0
    return min(value, ceiling)


def saturating_add(total: float, delta: float) -> float:
    """Add *delta* to *total* without leaving [-MAX_CURRENCY, MAX_CURRENCY]."""
    result = total + delta
    if math.isnan(result):
        return total
    return max(-MAX_CURRENCY, min(result, MAX_CURRENCY))
