from __future__ import annotations


class IdleTycoonError(Exception):
    """Base class for errors raised by idletycoon."""


class PlayerNotFoundError(IdleTycoonError):
    """Login was attempted for a player id the store does not know."""

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Unknown player: {player_id!r}")
        self.player_id = player_id


class StoreError(IdleTycoonError):
    """The persisted document could not be read or parsed."""


class PlaybackRejected(IdleTycoonError):
    """The audio backend refused to start playback (autoplay policy)."""
