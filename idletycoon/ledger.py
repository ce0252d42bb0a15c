from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from idletycoon.player import Player
    from idletycoon.store import GameStore

PlayerListener = Callable[["Player"], None]


class PlayerLedger:
    """Sole owner of the in-memory player.

    Tick mutations and manual actions both go through :meth:`apply`, which
    computes, persists and publishes one change at a time.
    """

    def __init__(self, store: GameStore, player: Player) -> None:
        self._store = store
        self._player = player
        self._lock = threading.RLock()
        self._listeners: list[PlayerListener] = []

    @property
    def player(self) -> Player:
        return self._player

    def subscribe(self, listener: PlayerListener) -> None:
        self._listeners.append(listener)

    def apply(self, fn: Callable[[Player], Player | None]) -> Player:
        """Replace the player with ``fn(player)`` and persist it.

        When *fn* returns None nothing is written or published.
        """
        with self._lock:
            updated = fn(self._player)
            if updated is None:
                return self._player
            self._store.update_player(updated)
            self._player = updated
        for listener in list(self._listeners):
            listener(updated)
        return updated
