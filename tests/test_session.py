"""Tests for login, logout, the ban gate and session-driven ticks."""
import asyncio

import pytest

from idletycoon import actions
from idletycoon.audio import BUILTIN_TRACKS
from idletycoon.database import GameDatabase
from idletycoon.exceptions import PlayerNotFoundError
from idletycoon.scheduler import Advanced, Frozen
from idletycoon.session import GameSession, SessionState
from idletycoon.settings import SETTINGS_KEY
from idletycoon.store import SESSION_KEY
from idletycoon.timer import RepeatingTimer

from conftest import NOW, make_player


class TestLogin:
    def test_active_login(self, session, world, kv, timer):
        assert session.login("p1") is SessionState.ACTIVE
        assert session.logged_in
        assert session.player.id == "p1"
        assert kv.get(SESSION_KEY) == "p1"
        assert timer.running

    def test_unknown_player(self, session, world, kv):
        world.save_session("ghost")
        with pytest.raises(PlayerNotFoundError) as exc_info:
            session.login("ghost")
        assert exc_info.value.player_id == "ghost"
        assert kv.get(SESSION_KEY) is None
        assert session.state is SessionState.LOGGED_OUT

    def test_banned_login(self, session, world, kv, timer):
        world.ban_user("p1", NOW + 100_000, "Autoclicker")
        assert session.login("p1") is SessionState.BANNED
        assert session.ban.until == NOW + 100_000
        assert session.ban.reason == "Autoclicker"
        assert not session.ban.permanent
        assert kv.get(SESSION_KEY) is None
        assert not timer.running
        assert session.tick() is None

        assert session.logout() is SessionState.LOGGED_OUT
        assert session.ban is None
        assert session.player is None
        assert not session.logged_in

    def test_permanent_ban_login(self, session, world):
        world.ban_user("p1", -1)
        assert session.login("p1") is SessionState.BANNED
        assert session.ban.permanent
        assert world.get_player("p1").banned_until == -1

    def test_expired_ban_cleared_on_login(self, session, world):
        world.ban_user("p1", NOW - 5, "old")
        assert session.login("p1") is SessionState.ACTIVE
        assert session.player.banned_until is None
        stored = world.get_player("p1")
        assert stored.banned_until is None
        assert stored.ban_reason is None

    def test_relogin_switches_player(self, session, world, timer):
        world.update_player(make_player("p2", balance=5.0))
        session.login("p1")
        session.login("p2")
        assert session.player.id == "p2"
        assert timer.starts == 2

    def test_restore_session(self, session, world):
        world.save_session("p1")
        assert session.restore_session() is SessionState.ACTIVE
        assert session.player.id == "p1"

    def test_restore_without_token(self, session):
        assert session.restore_session() is SessionState.LOGGED_OUT

    def test_timer_failure_leaves_session_logged_out(self, world, kv):
        session = GameSession(world)
        with pytest.raises(RuntimeError):
            session.login("p1")
        assert session.state is SessionState.LOGGED_OUT
        assert session.player is None
        assert session.scheduler is None
        assert kv.get(SESSION_KEY) is None


class TestTicks:
    def test_three_ticks(self, session, world, clock, timer):
        session.login("p1")
        for _ in range(3):
            clock.advance(1000)
            timer.fire()
        p = world.get_player("p1")
        assert p.balance == 130.0
        assert p.max_money == 130.0
        assert p.playtime == 3
        assert session.player == p

    def test_manual_tick(self, session, world):
        session.login("p1")
        result = session.tick()
        assert isinstance(result, Advanced)
        assert world.get_player("p1").balance == 110.0

    def test_listeners_see_results(self, session, timer):
        seen = []
        session.subscribe(seen.append)
        session.login("p1")
        timer.fire(2)
        assert len(seen) == 2

    def test_ban_while_playing(self, session, world, timer):
        session.login("p1")
        timer.fire()
        world.ban_user("p1", -1, "Exploit")
        timer.fire()
        assert session.state is SessionState.BANNED
        assert session.ban.reason == "Exploit"
        assert session.player.balance == 110.0
        assert not timer.running
        assert session.perform(actions.tap).reason == "Session is not active"

    def test_player_deleted_while_playing(self, session, world, timer):
        session.login("p1")
        world.save_database(GameDatabase())
        timer.fire()
        assert session.halted
        assert not timer.running
        assert session.player.id == "p1"
        assert session.perform(actions.tap).reason == "Player record is missing"

    def test_logout_stops_ticks(self, session, world, timer, kv):
        session.login("p1")
        session.logout()
        assert not timer.running
        assert kv.get(SESSION_KEY) is None
        assert timer.fire() == 0
        assert world.get_player("p1").balance == 100.0

    def test_logout_when_logged_out(self, session):
        assert session.logout() is SessionState.LOGGED_OUT

    @pytest.mark.asyncio
    async def test_real_timer_login_cycles(self, world):
        session = GameSession(world, timer_factory=lambda: RepeatingTimer(0.01))
        for _ in range(3):
            session.login("p1")
            await asyncio.sleep(0.05)
            session.logout()
        await asyncio.sleep(0.05)
        playtime = world.get_player("p1").playtime
        await asyncio.sleep(0.05)
        assert playtime > 0
        assert world.get_player("p1").playtime == playtime
        assert [t for t in asyncio.all_tasks() if t is not asyncio.current_task()] == []


class TestPerform:
    def test_success_persists(self, session, world):
        session.login("p1")
        result = session.perform(actions.tap)
        assert result.success
        assert result.player.balance == 101.0
        assert world.get_player("p1").balance == 101.0

    def test_rejection_writes_nothing(self, session, world, kv):
        session.login("p1")
        before = kv.get("ft_game_db")
        result = session.perform(actions.buy_business, "mill")
        assert not result.success
        assert kv.get("ft_game_db") == before

    def test_action_then_tick(self, session, world, timer):
        session.login("p1")
        session.perform(actions.upgrade_business, "shop")
        timer.fire()
        p = world.get_player("p1")
        assert p.get_business("shop").level == 2
        assert p.balance == pytest.approx(100.0 - 57.5 + 20.0)

    def test_logged_out(self, session):
        assert not session.perform(actions.tap).success


class TestConfigAndAudio:
    def test_login_starts_global_track(self, session, backend):
        session.login("p1")
        assert backend.source == BUILTIN_TRACKS["christmas"]
        assert session.audio.playing

    def test_logged_out_is_silent(self, session, backend):
        session.reconcile_audio()
        assert not session.audio.playing

    def test_track_change_follows_config(self, session, world, backend, timer):
        session.login("p1")
        world.update_config(active_track="koshak")
        timer.fire()
        assert backend.source == BUILTIN_TRACKS["koshak"]
        assert session.audio.playing

    def test_master_switch_off(self, session, world, backend, timer):
        session.login("p1")
        world.update_config(is_music_enabled=False)
        timer.fire()
        assert backend.source is None
        assert not session.audio.playing

    def test_no_restart_without_change(self, session, backend, timer):
        session.login("p1")
        plays = backend.play_calls
        timer.fire(5)
        assert backend.play_calls == plays

    def test_poll_config_logged_out(self, session, world):
        world.update_config(active_track="sneaky")
        assert session.poll_config() is True
        assert session.config.active_track == "sneaky"
        assert session.poll_config() is False

    def test_update_settings(self, session, kv, backend):
        session.login("p1")
        session.update_settings(selected_track="tropical", music_volume=0.9)
        assert backend.source == BUILTIN_TRACKS["tropical"]
        assert backend.volume == 0.9
        assert '"selectedTrack": "tropical"' in kv.get(SETTINGS_KEY)

    def test_disable_music_locally(self, session):
        session.login("p1")
        session.update_settings(enable_music=False)
        assert not session.audio.playing

    def test_logout_pauses_music(self, session):
        session.login("p1")
        session.logout()
        assert not session.audio.playing

    def test_settings_survive_new_session(self, session, world, clock):
        session.update_settings(language="en")
        again = GameSession(world, clock=clock)
        assert again.settings.language == "en"

    def test_banned_screen_keeps_music(self, session, world, backend):
        world.ban_user("p1", -1)
        session.login("p1")
        assert session.audio.playing
