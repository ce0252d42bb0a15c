"""Persistence for the shared game document and the session token.

The store mirrors a browser's local storage: string values under string
keys. The whole database lives under one key and is read and written in
full; concurrent writers can overwrite each other.
"""

from __future__ import annotations

import contextlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

import structlog

from idletycoon.database import GameDatabase, GlobalConfig
from idletycoon.exceptions import StoreError
from idletycoon.player import Player

logger = structlog.get_logger()

DATABASE_KEY = "ft_game_db"
SESSION_KEY = "ft_session"


class KeyValueStore(Protocol):
    """String key/value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """Process-local key/value store."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileKeyValueStore:
    """One file per key inside *directory*, replaced atomically on write."""

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory).resolve()

    def _path(self, key: str) -> Path:
        target = (self._dir / f"{key}.json").resolve()
        if not target.is_relative_to(self._dir):
            raise ValueError(f"Key {key!r} resolves outside the store directory")
        return target

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreError(f"Failed to read {path}") from exc

    def set(self, key: str, value: str) -> None:
        target = self._path(key)
        self._dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self._dir), suffix=".tmp", prefix=f".{key}_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            Path(tmp_path).replace(target)
        except BaseException:
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise

    def delete(self, key: str) -> None:
        with contextlib.suppress(FileNotFoundError):
            self._path(key).unlink()


class GameStore:
    """Operations the simulation core needs from the shared document."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    # ── Database ─────────────────────────────────────────────────────

    def load_database(self) -> GameDatabase:
        """Full read. Every call returns freshly built objects."""
        raw = self.kv.get(DATABASE_KEY)
        if raw is None:
            return GameDatabase()
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise StoreError(f"Unreadable document under {DATABASE_KEY!r}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Expected a JSON object under {DATABASE_KEY!r}")
        return GameDatabase.from_dict(data)

    def save_database(self, db: GameDatabase) -> None:
        self.kv.set(DATABASE_KEY, json.dumps(db.to_dict()))

    def load_config(self) -> GlobalConfig:
        return self.load_database().config

    # ── Players ──────────────────────────────────────────────────────

    def get_player(self, player_id: str) -> Player | None:
        return self.load_database().get_player(player_id)

    def update_player(self, player: Player) -> None:
        """Insert or replace the player with the same id."""
        db = self.load_database()
        db.upsert_player(player)
        self.save_database(db)

    def unban_user(self, player_id: str) -> None:
        db = self.load_database()
        player = db.get_player(player_id)
        if player is None:
            return
        player.banned_until = None
        player.ban_reason = None
        self.save_database(db)
        logger.info("player unbanned", player_id=player_id)

    def ban_user(self, player_id: str, until: int, reason: str | None = None) -> bool:
        """Admin write. *until* is -1 for permanent or an epoch-ms expiry."""
        db = self.load_database()
        player = db.get_player(player_id)
        if player is None:
            return False
        player.banned_until = until
        player.ban_reason = reason
        self.save_database(db)
        logger.info("player banned", player_id=player_id, until=until, reason=reason)
        return True

    def update_config(self, **changes: Any) -> GlobalConfig:
        """Admin write of config fields by python name. Returns the new config."""
        db = self.load_database()
        data = db.config.to_dict()
        for name, value in changes.items():
            if name == "custom_tracks":
                value = [t.to_dict() if hasattr(t, "to_dict") else t for t in value]
            data[GlobalConfig.persisted_key(name)] = value
        db.config = GlobalConfig.from_dict(data)
        self.save_database(db)
        logger.info("config updated", fields=sorted(changes))
        return db.config

    # ── Session token ────────────────────────────────────────────────

    def save_session(self, player_id: str) -> None:
        self.kv.set(SESSION_KEY, player_id)

    def restore_session(self) -> Player | None:
        player_id = self.kv.get(SESSION_KEY)
        if not player_id:
            return None
        return self.get_player(player_id)

    def clear_session(self) -> None:
        self.kv.delete(SESSION_KEY)
