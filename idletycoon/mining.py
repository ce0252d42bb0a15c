from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class MiningFarm:
    """GPU rig state. Energy debt only accrues; settling it happens elsewhere."""

    gpu_level: int = 1
    gpu_count: int = 0
    max_slots: int = 10
    btc_balance: float = 0.0
    energy_debt: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "gpuLevel": self.gpu_level,
            "gpuCount": self.gpu_count,
            "maxSlots": self.max_slots,
            "btcBalance": self.btc_balance,
            "energyDebt": self.energy_debt,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> MiningFarm:
        data = data or {}
        return cls(
            gpu_level=max(1, int(data.get("gpuLevel") or 1)),
            gpu_count=max(0, int(data.get("gpuCount") or 0)),
            max_slots=int(data.get("maxSlots") or 10),
            btc_balance=float(data.get("btcBalance") or 0.0),
            energy_debt=float(data.get("energyDebt") or 0.0),
        )
