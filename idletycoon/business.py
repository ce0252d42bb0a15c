from __future__ import annotations

from dataclasses import dataclass
from typing import Any

BUSINESS_TYPES = ("retail", "transport", "industry", "service")


@dataclass
class Business:
    """A catalog entry the player may own and level up."""

    id: str
    name: str = ""
    type: str = "retail"
    base_cost: float = 0.0
    base_income: float = 0.0
    level: int = 0
    icon: str = ""
    owned: bool = False
    custom_name: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.id
        if self.type not in BUSINESS_TYPES:
            raise ValueError(
                f"Unknown business type: {self.type!r}. Expected one of {list(BUSINESS_TYPES)}"
            )

    @property
    def display_name(self) -> str:
        return self.custom_name or self.name

    def income_per_tick(self) -> float:
        """Gross income for one tick, before global multiplier and tax."""
        if not self.owned or self.level <= 0:
            return 0.0
        return self.base_income * self.level

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "baseCost": self.base_cost,
            "baseIncome": self.base_income,
            "level": self.level,
            "icon": self.icon,
            "owned": self.owned,
        }
        if self.custom_name is not None:
            data["customName"] = self.custom_name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Business:
        btype = data.get("type") or "retail"
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            type=btype if btype in BUSINESS_TYPES else "retail",
            base_cost=float(data.get("baseCost") or 0.0),
            base_income=float(data.get("baseIncome") or 0.0),
            level=int(data.get("level") or 0),
            icon=data.get("icon") or "",
            owned=bool(data.get("owned", False)),
            custom_name=data.get("customName"),
        )
