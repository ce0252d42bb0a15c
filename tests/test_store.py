"""Tests for the key/value stores and GameStore operations."""
import pytest

from idletycoon.database import GameDatabase, GlobalConfig
from idletycoon.exceptions import StoreError
from idletycoon.store import (
    DATABASE_KEY,
    SESSION_KEY,
    FileKeyValueStore,
    GameStore,
    MemoryKeyValueStore,
)

from conftest import make_player


class TestFileKeyValueStore:
    def test_missing_key(self, tmp_path):
        assert FileKeyValueStore(tmp_path).get("nope") is None

    def test_set_get_delete(self, tmp_path):
        kv = FileKeyValueStore(tmp_path / "store")
        kv.set("k", "v")
        assert kv.get("k") == "v"
        kv.delete("k")
        kv.delete("k")
        assert kv.get("k") is None

    def test_rejects_traversal(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        with pytest.raises(ValueError):
            kv.set("../escape", "x")

    def test_no_temp_files_left(self, tmp_path):
        kv = FileKeyValueStore(tmp_path)
        kv.set("k", "one")
        kv.set("k", "two")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]


class TestLoadDatabase:
    def test_empty_store_gives_defaults(self, store):
        db = store.load_database()
        assert db.players == []
        assert db.config == GlobalConfig()

    def test_corrupt_document(self):
        store = GameStore(MemoryKeyValueStore({DATABASE_KEY: "{not json"}))
        with pytest.raises(StoreError):
            store.load_database()

    def test_non_object_document(self):
        store = GameStore(MemoryKeyValueStore({DATABASE_KEY: "[1, 2]"}))
        with pytest.raises(StoreError):
            store.load_database()

    def test_fresh_objects_each_read(self, world):
        assert world.load_config() is not world.load_config()
        assert world.get_player("p1") is not world.get_player("p1")


class TestPlayers:
    def test_update_player_replaces(self, world):
        player = world.get_player("p1")
        player.balance = 999.0
        world.update_player(player)
        assert world.get_player("p1").balance == 999.0
        assert len(world.load_database().players) == 1

    def test_update_player_inserts(self, world):
        world.update_player(make_player("p2"))
        assert world.get_player("p2") is not None

    def test_ban_and_unban(self, world):
        assert world.ban_user("p1", -1, "Autoclicker")
        p = world.get_player("p1")
        assert (p.banned_until, p.ban_reason) == (-1, "Autoclicker")
        world.unban_user("p1")
        p = world.get_player("p1")
        assert (p.banned_until, p.ban_reason) == (None, None)

    def test_ban_unknown(self, world):
        assert world.ban_user("ghost", -1) is False

    def test_unban_unknown_is_noop(self, world):
        world.unban_user("ghost")


class TestConfig:
    def test_update_config(self, world):
        cfg = world.update_config(tax_rate=0.25, is_music_enabled=False)
        assert cfg.tax_rate == 0.25
        assert world.load_config().is_music_enabled is False

    def test_update_config_unknown_field(self, world):
        with pytest.raises(ValueError):
            world.update_config(bogus=1)

    def test_players_untouched(self, world):
        world.update_config(global_multiplier=2.0)
        assert world.get_player("p1").balance == 100.0


class TestSessionToken:
    def test_save_restore_clear(self, world, kv):
        world.save_session("p1")
        assert kv.get(SESSION_KEY) == "p1"
        assert world.restore_session().id == "p1"
        world.clear_session()
        assert world.restore_session() is None

    def test_token_for_deleted_player(self, world):
        world.save_session("p1")
        world.save_database(GameDatabase())
        assert world.restore_session() is None
