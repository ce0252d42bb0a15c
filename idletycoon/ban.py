"""Ban evaluation as an explicit state transition."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from idletycoon._types import PERMANENT_BAN
from idletycoon.player import Player


@dataclass(frozen=True)
class Active:
    """The player may play. *expired_ban* means a stale ban must be cleared."""

    player: Player
    expired_ban: bool = False


@dataclass(frozen=True)
class Banned:
    """The player is locked out; carries what the ban screen shows."""

    player: Player
    until: int
    reason: str | None = None

    @property
    def permanent(self) -> bool:
        return self.until == PERMANENT_BAN


BanStatus = Union[Active, Banned]


def is_ban_active(banned_until: int | None, now: int) -> bool:
    if not banned_until:
        return False
    return banned_until == PERMANENT_BAN or banned_until > now


def evaluate_ban(player: Player, now: int) -> BanStatus:
    if is_ban_active(player.banned_until, now):
        return Banned(player=player, until=player.banned_until, reason=player.ban_reason)
    return Active(player=player, expired_ban=player.banned_until is not None)
