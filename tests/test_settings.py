"""Tests for local app settings."""
import json

import pytest

from idletycoon.settings import SETTINGS_KEY, AppSettings, load_settings, save_settings
from idletycoon.store import MemoryKeyValueStore


def test_defaults():
    s = AppSettings()
    assert s.follows_global
    assert s.enable_music
    assert s.music_volume == 0.5
    assert s.language == "ru"


def test_volume_clamped():
    assert AppSettings(music_volume=3.0).music_volume == 1.0
    assert AppSettings(music_volume=-1.0).music_volume == 0.0


def test_unknown_language_falls_back():
    assert AppSettings(language="de").language == "ru"


def test_with_changes_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown setting"):
        AppSettings().with_changes(theme="dark")


def test_local_selection_does_not_follow_global():
    assert not AppSettings(selected_track="lofi").follows_global


def test_partial_document_merges_over_defaults():
    kv = MemoryKeyValueStore({SETTINGS_KEY: json.dumps({"musicVolume": 0.2})})
    s = load_settings(kv)
    assert s.music_volume == 0.2
    assert s.enable_music is True


def test_unreadable_document_gives_defaults():
    kv = MemoryKeyValueStore({SETTINGS_KEY: "nope"})
    assert load_settings(kv) == AppSettings()


def test_save_and_load():
    kv = MemoryKeyValueStore()
    s = AppSettings(enable_music=False, selected_track="tropical", language="en")
    save_settings(kv, s)
    assert json.loads(kv.get(SETTINGS_KEY))["selectedTrack"] == "tropical"
    assert load_settings(kv) == s
