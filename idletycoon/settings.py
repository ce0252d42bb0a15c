from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from typing import TYPE_CHECKING, Any

import structlog

from idletycoon._types import GLOBAL_TRACK

if TYPE_CHECKING:
    from idletycoon.store import KeyValueStore

logger = structlog.get_logger()

SETTINGS_KEY = "ft_app_settings"
LANGUAGES = ("ru", "en")

_PERSISTED_NAMES = {
    "show_christmas_vibe": "showChristmasVibe",
    "enable_music": "enableMusic",
    "music_volume": "musicVolume",
    "selected_track": "selectedTrack",
    "language": "language",
}


@dataclass(frozen=True)
class AppSettings:
    """Per-client preferences kept beside, not inside, the shared document."""

    show_christmas_vibe: bool = True
    enable_music: bool = True
    music_volume: float = 0.5
    selected_track: str = GLOBAL_TRACK
    language: str = "ru"

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        volume = min(1.0, max(0.0, float(self.music_volume)))
        object.__setattr__(self, "music_volume", volume)
        if self.language not in LANGUAGES:
            object.__setattr__(self, "language", "ru")

    @property
    def follows_global(self) -> bool:
        return not self.selected_track or self.selected_track == GLOBAL_TRACK

    def with_changes(self, **changes: Any) -> AppSettings:
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown setting(s): {sorted(unknown)}")
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {_PERSISTED_NAMES[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppSettings:
        """Merge persisted values over the defaults, ignoring unknown keys."""
        merged = asdict(cls())
        for name, key in _PERSISTED_NAMES.items():
            if key in data and data[key] is not None:
                merged[name] = data[key]
        return cls(**merged)


def load_settings(kv: KeyValueStore) -> AppSettings:
    raw = kv.get(SETTINGS_KEY)
    if raw is None:
        return AppSettings()
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("discarding unreadable settings", key=SETTINGS_KEY)
        return AppSettings()
    if not isinstance(data, dict):
        return AppSettings()
    return AppSettings.from_dict(data)


def save_settings(kv: KeyValueStore, settings: AppSettings) -> None:
    kv.set(SETTINGS_KEY, json.dumps(settings.to_dict()))
