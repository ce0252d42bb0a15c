from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from idletycoon.business import Business
from idletycoon.market import Investment
from idletycoon.mining import MiningFarm

# Persisted keys handled explicitly; anything else rides along in ``extra``.
_KNOWN_KEYS = frozenset({
    "id", "username", "passwordHash", "registrationIp", "lastLoginIp",
    "registrationDate", "avatarId", "playtime", "clanId", "logs", "isAdmin",
    "balance", "maxMoney", "clickLevel", "clickExp", "clickExpMax",
    "bannedUntil", "banReason", "businesses", "investments", "miningFarm",
    "ownedAssetIds", "activeTitleId", "lastLogin", "lastMarketUpdate",
})


@dataclass
class Player:
    """The mutable aggregate advanced by ticks and manual actions."""

    id: str
    username: str = ""
    password_hash: str = ""
    registration_ip: str = ""
    last_login_ip: str = ""
    registration_date: int = 0
    avatar_id: str = ""
    playtime: int = 0
    clan_id: str | None = None
    logs: list[str] = field(default_factory=list)
    is_admin: bool = False
    balance: float = 0.0
    max_money: float = 0.0
    click_level: int = 1
    click_exp: int = 0
    click_exp_max: int = 100
    banned_until: int | None = None
    ban_reason: str | None = None
    businesses: list[Business] = field(default_factory=list)
    investments: list[Investment] = field(default_factory=list)
    mining_farm: MiningFarm = field(default_factory=MiningFarm)
    owned_asset_ids: list[str] = field(default_factory=list)
    active_title_id: str | None = None
    last_login: int = 0
    last_market_update: int | None = None
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not self.username:
            self.username = self.id

    def get_business(self, business_id: str) -> Business | None:
        for b in self.businesses:
            if b.id == business_id:
                return b
        return None

    def get_investment(self, investment_id: str) -> Investment | None:
        for inv in self.investments:
            if inv.id == investment_id:
                return inv
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = dict(self.extra)
        data.update({
            "id": self.id,
            "username": self.username,
            "passwordHash": self.password_hash,
            "registrationIp": self.registration_ip,
            "lastLoginIp": self.last_login_ip,
            "registrationDate": self.registration_date,
            "avatarId": self.avatar_id,
            "playtime": self.playtime,
            "logs": list(self.logs),
            "isAdmin": self.is_admin,
            "balance": self.balance,
            "maxMoney": self.max_money,
            "clickLevel": self.click_level,
            "clickExp": self.click_exp,
            "clickExpMax": self.click_exp_max,
            "bannedUntil": self.banned_until,
            "businesses": [b.to_dict() for b in self.businesses],
            "investments": [i.to_dict() for i in self.investments],
            "miningFarm": self.mining_farm.to_dict(),
            "ownedAssetIds": list(self.owned_asset_ids),
            "lastLogin": self.last_login,
        })
        if self.clan_id is not None:
            data["clanId"] = self.clan_id
        if self.ban_reason is not None:
            data["banReason"] = self.ban_reason
        if self.active_title_id is not None:
            data["activeTitleId"] = self.active_title_id
        if self.last_market_update is not None:
            data["lastMarketUpdate"] = self.last_market_update
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Player:
        """Build a player, filling every missing field with its default."""
        banned_until = data.get("bannedUntil")
        return cls(
            id=str(data["id"]),
            username=data.get("username") or "",
            password_hash=data.get("passwordHash") or "",
            registration_ip=data.get("registrationIp") or "",
            last_login_ip=data.get("lastLoginIp") or "",
            registration_date=int(data.get("registrationDate") or 0),
            avatar_id=data.get("avatarId") or "",
            playtime=int(data.get("playtime") or 0),
            clan_id=data.get("clanId"),
            logs=list(data.get("logs") or []),
            is_admin=bool(data.get("isAdmin", False)),
            balance=float(data.get("balance") or 0.0),
            max_money=float(data.get("maxMoney") or 0.0),
            click_level=int(data.get("clickLevel") or 1),
            click_exp=int(data.get("clickExp") or 0),
            click_exp_max=int(data.get("clickExpMax") or 100),
            banned_until=int(banned_until) if banned_until is not None else None,
            ban_reason=data.get("banReason"),
            businesses=[Business.from_dict(b) for b in data.get("businesses") or []],
            investments=[Investment.from_dict(i) for i in data.get("investments") or []],
            mining_farm=MiningFarm.from_dict(data.get("miningFarm")),
            owned_asset_ids=list(data.get("ownedAssetIds") or []),
            active_title_id=data.get("activeTitleId"),
            last_login=int(data.get("lastLogin") or 0),
            last_market_update=data.get("lastMarketUpdate"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )
