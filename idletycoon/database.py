from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from idletycoon.player import Player

# Collections the core carries through untouched.
PASSTHROUGH_COLLECTIONS = (
    "promoCodes",
    "tickets",
    "tradeRequests",
    "activeTrades",
    "clans",
    "clanInvites",
    "bannedIps",
)

_CONFIG_FIELDS = {
    "version": "version",
    "global_multiplier": "globalMultiplier",
    "tax_rate": "taxRate",
    "energy_cost_per_gpu": "energyCostPerGpu",
    "active_track": "activeTrack",
    "is_music_enabled": "isMusicEnabled",
    "custom_tracks": "customTracks",
}


@dataclass(frozen=True)
class CustomTrack:
    """An admin-uploaded track. Hidden tracks never resolve to a source."""

    id: str
    name: str = ""
    url: str = ""
    is_hidden: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name, "url": self.url}
        if self.is_hidden:
            data["isHidden"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomTrack:
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            url=data.get("url") or "",
            is_hidden=bool(data.get("isHidden", False)),
        )


@dataclass
class GlobalConfig:
    """Admin-owned shared parameters. Compared structurally when polled."""

    version: str = "1.0"
    global_multiplier: float = 1.0
    tax_rate: float = 0.0
    energy_cost_per_gpu: float = 2.0
    active_track: str = "christmas"
    is_music_enabled: bool = True
    custom_tracks: list[CustomTrack] = field(default_factory=list)

    def find_custom_track(self, track_id: str) -> CustomTrack | None:
        for track in self.custom_tracks:
            if track.id == track_id:
                return track
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "globalMultiplier": self.global_multiplier,
            "taxRate": self.tax_rate,
            "energyCostPerGpu": self.energy_cost_per_gpu,
            "activeTrack": self.active_track,
            "isMusicEnabled": self.is_music_enabled,
            "customTracks": [t.to_dict() for t in self.custom_tracks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> GlobalConfig:
        data = data or {}
        defaults = cls()
        return cls(
            version=str(data.get("version", defaults.version)),
            global_multiplier=float(data.get("globalMultiplier", defaults.global_multiplier)),
            tax_rate=float(data.get("taxRate", defaults.tax_rate)),
            energy_cost_per_gpu=float(
                data.get("energyCostPerGpu", defaults.energy_cost_per_gpu)
            ),
            active_track=data.get("activeTrack") or "",
            is_music_enabled=bool(data.get("isMusicEnabled", defaults.is_music_enabled)),
            custom_tracks=[CustomTrack.from_dict(t) for t in data.get("customTracks") or []],
        )

    @staticmethod
    def persisted_key(field_name: str) -> str:
        """Map a python field name to its persisted key. Raises ValueError."""
        key = _CONFIG_FIELDS.get(field_name)
        if key is None:
            raise ValueError(
                f"Unknown config field: {field_name!r}. Expected one of {list(_CONFIG_FIELDS)}"
            )
        return key


@dataclass
class GameDatabase:
    """The single shared document: players, admin collections and config."""

    players: list[Player] = field(default_factory=list)
    config: GlobalConfig = field(default_factory=GlobalConfig)
    collections: dict[str, list[Any]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in PASSTHROUGH_COLLECTIONS:
            self.collections.setdefault(name, [])

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def upsert_player(self, player: Player) -> None:
        for i, p in enumerate(self.players):
            if p.id == player.id:
                self.players[i] = player
                return
        self.players.append(player)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"players": [p.to_dict() for p in self.players]}
        for name, items in self.collections.items():
            data[name] = list(items)
        data["config"] = self.config.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameDatabase:
        collections = {
            name: list(value)
            for name, value in data.items()
            if name not in ("players", "config") and isinstance(value, list)
        }
        return cls(
            players=[Player.from_dict(p) for p in data.get("players") or []],
            config=GlobalConfig.from_dict(data.get("config")),
            collections=collections,
        )
