"""Login, logout and the ban gate around the tick scheduler."""

from __future__ import annotations

import random
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

import structlog

from idletycoon._types import Clock, system_clock
from idletycoon.actions import ActionResult
from idletycoon.audio import AudioController, PlaybackIntent, plan_playback
from idletycoon.ban import Banned, evaluate_ban
from idletycoon.exceptions import PlayerNotFoundError
from idletycoon.ledger import PlayerLedger
from idletycoon.scheduler import (
    MARKET_TICK_EVERY,
    TICK_SECONDS,
    Advanced,
    Frozen,
    Halted,
    TickResult,
    TickScheduler,
)
from idletycoon.settings import AppSettings, load_settings, save_settings
from idletycoon.timer import RepeatingTimer, Timer

if TYPE_CHECKING:
    from idletycoon.database import GlobalConfig
    from idletycoon.market import MarketModel
    from idletycoon.player import Player
    from idletycoon.store import GameStore, KeyValueStore

logger = structlog.get_logger()


class SessionState(Enum):
    LOGGED_OUT = "logged_out"
    ACTIVE = "active"
    BANNED = "banned"


class GameSession:
    """One client's view of the game: who is logged in and what they hear.

    Owns the last observed global config, the player ledger, the tick
    scheduler and the audio controller for the lifetime of a login.
    """

    def __init__(
        self,
        store: GameStore,
        settings_store: KeyValueStore | None = None,
        clock: Clock = system_clock,
        audio: AudioController | None = None,
        timer_factory: Callable[[], Timer] | None = None,
        period_seconds: int = TICK_SECONDS,
        market_tick_every: int = MARKET_TICK_EVERY,
        market_model: MarketModel | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._settings_store = settings_store if settings_store is not None else store.kv
        self._clock = clock
        self.audio = audio if audio is not None else AudioController()
        self._timer_factory = timer_factory or (lambda: RepeatingTimer(period_seconds))
        self._period_seconds = period_seconds
        self._market_tick_every = market_tick_every
        self._market_model = market_model
        self._rng = rng or random.Random()

        self.settings: AppSettings = load_settings(self._settings_store)
        self.state = SessionState.LOGGED_OUT
        self._config: GlobalConfig = store.load_config()
        self._ledger: PlayerLedger | None = None
        self._scheduler: TickScheduler | None = None
        self._ban: Banned | None = None
        self._banned_player: Player | None = None
        self._listeners: list[Callable[[TickResult], None]] = []

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def logged_in(self) -> bool:
        return self.state is not SessionState.LOGGED_OUT

    @property
    def player(self) -> Player | None:
        if self._ledger is not None:
            return self._ledger.player
        return self._banned_player

    @property
    def ban(self) -> Banned | None:
        return self._ban

    @property
    def config(self) -> GlobalConfig:
        if self._scheduler is not None:
            return self._scheduler.observed_config
        return self._config

    @property
    def scheduler(self) -> TickScheduler | None:
        return self._scheduler

    @property
    def halted(self) -> bool:
        return self._scheduler is not None and self._scheduler.halted

    def subscribe(self, listener: Callable[[TickResult], None]) -> None:
        self._listeners.append(listener)

    # ── Transitions ──────────────────────────────────────────────────

    def login(self, player_id: str) -> SessionState:
        """Log in, honouring bans. Raises PlayerNotFoundError for unknown ids."""
        if self.logged_in:
            self.logout()

        player = self._store.get_player(player_id)
        if player is None:
            self._store.clear_session()
            logger.warning("login failed, unknown player", player_id=player_id)
            raise PlayerNotFoundError(player_id)

        self._config = self._store.load_config()
        status = evaluate_ban(player, self._clock())
        if isinstance(status, Banned):
            self._enter_banned(status, player)
            self.reconcile_audio()
            return self.state

        if status.expired_ban:
            self._store.unban_user(player_id)
            player = replace(player, banned_until=None, ban_reason=None)

        ledger = PlayerLedger(self._store, player)
        scheduler = TickScheduler(
            self._store,
            ledger,
            config=self._config,
            clock=self._clock,
            timer=self._timer_factory(),
            period_seconds=self._period_seconds,
            market_tick_every=self._market_tick_every,
            market_model=self._market_model,
            rng=self._rng,
            on_result=self._on_tick,
        )
        # Nothing is committed until the timer is running.
        scheduler.start()
        self._ledger = ledger
        self._scheduler = scheduler
        self._store.save_session(player_id)
        self.state = SessionState.ACTIVE
        logger.info("logged in", player_id=player_id)
        self.reconcile_audio()
        return self.state

    def restore_session(self) -> SessionState:
        """Log back in as the player named by the saved session token."""
        player = self._store.restore_session()
        if player is None:
            return self.state
        return self.login(player.id)

    def logout(self) -> SessionState:
        if self._scheduler is not None:
            self._scheduler.stop()
            self._config = self._scheduler.observed_config
        player_id = self.player.id if self.player is not None else None
        self._store.clear_session()
        self._scheduler = None
        self._ledger = None
        self._ban = None
        self._banned_player = None
        self.state = SessionState.LOGGED_OUT
        self.audio.stop()
        logger.info("logged out", player_id=player_id)
        return self.state

    def _enter_banned(self, ban: Banned, snapshot: Player) -> None:
        self._ban = ban
        self._banned_player = snapshot
        self.state = SessionState.BANNED
        logger.info(
            "player is banned",
            player_id=snapshot.id,
            until=ban.until,
            reason=ban.reason,
        )

    # ── Ticks and actions ────────────────────────────────────────────

    def tick(self) -> TickResult | None:
        """Run one tick now, outside the timer. None when not active."""
        if self.state is not SessionState.ACTIVE or self._scheduler is None:
            return None
        return self._scheduler.step()

    def _on_tick(self, result: TickResult) -> None:
        if isinstance(result, Frozen):
            snapshot = self._ledger.player if self._ledger is not None else result.ban.player
            self._ledger = None
            self._enter_banned(result.ban, snapshot)
        elif isinstance(result, Halted):
            logger.warning("session halted, player record missing", player_id=result.player_id)

        if isinstance(result, (Advanced, Frozen)) and result.config_changed:
            self.reconcile_audio()
        for listener in list(self._listeners):
            listener(result)

    def perform(self, action: Callable[..., ActionResult], *args: Any) -> ActionResult:
        """Run a manual action through the single writer."""
        if self.state is not SessionState.ACTIVE or self._ledger is None:
            return ActionResult(success=False, reason="Session is not active")
        if self.halted:
            return ActionResult(success=False, reason="Player record is missing")

        results: list[ActionResult] = []

        def run(prev: Player) -> Player | None:
            result = action(prev, *args)
            results.append(result)
            return result.player if result.success else None

        player = self._ledger.apply(run)
        result = results[0]
        if result.success:
            return replace(result, player=player)
        return result

    # ── Settings and audio ───────────────────────────────────────────

    def poll_config(self) -> bool:
        """Re-read the shared config outside the tick loop."""
        if self._scheduler is not None:
            changed = self._scheduler.poll_config()
        else:
            fresh = self._store.load_config()
            changed = fresh != self._config
            if changed:
                self._config = fresh
        if changed:
            self.reconcile_audio()
        return changed

    def update_settings(self, **changes: Any) -> AppSettings:
        self.settings = self.settings.with_changes(**changes)
        save_settings(self._settings_store, self.settings)
        self.reconcile_audio()
        return self.settings

    def reconcile_audio(self) -> PlaybackIntent:
        intent = plan_playback(self.settings, self.config, self.logged_in)
        self.audio.apply(intent)
        return intent
