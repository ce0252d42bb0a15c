"""Manual player actions.

Each action takes a player and returns an :class:`ActionResult` holding a
new player on success. Nothing here persists; the session routes results
through its ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable

from idletycoon._types import saturating_add
from idletycoon.cost_scaling import BUSINESS_UPGRADE, GPU_PURCHASE, GPU_UPGRADE

if TYPE_CHECKING:
    from idletycoon.player import Player

GPU_BASE_COST = 500.0
GPU_UPGRADE_BASE_COST = 2_000.0
CLICK_EXP_GROWTH = 1.5
MAX_LOG_ENTRIES = 50
MAX_BUSINESS_NAME = 32


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a manual action."""

    success: bool
    player: Player | None = None
    amount: float = 0.0
    reason: str = ""


Action = Callable[..., ActionResult]


def _rejected(reason: str) -> ActionResult:
    return ActionResult(success=False, reason=reason)


def _credit(player: Player, amount: float) -> dict:
    balance = saturating_add(player.balance, amount)
    return {"balance": balance, "max_money": max(player.max_money, balance)}


def _log(player: Player, message: str) -> list[str]:
    return (player.logs + [message])[-MAX_LOG_ENTRIES:]


def tap_value(player: Player) -> float:
    return float(max(1, player.click_level))


def tap(player: Player) -> ActionResult:
    """One manual tap: earn click value, gain experience, maybe level up."""
    value = tap_value(player)
    level, exp, exp_max = player.click_level, player.click_exp + 1, player.click_exp_max
    if exp >= exp_max:
        level += 1
        exp = 0
        exp_max = int(exp_max * CLICK_EXP_GROWTH)
    updated = replace(
        player,
        click_level=level,
        click_exp=exp,
        click_exp_max=exp_max,
        **_credit(player, value),
    )
    return ActionResult(success=True, player=updated, amount=value)


def buy_business(player: Player, business_id: str) -> ActionResult:
    business = player.get_business(business_id)
    if business is None:
        return _rejected(f"Unknown business: {business_id!r}")
    if business.owned:
        return _rejected("Already owned")
    cost = business.base_cost
    if player.balance < cost:
        return _rejected("Cannot afford")

    businesses = [
        replace(b, owned=True, level=max(1, b.level)) if b.id == business_id else b
        for b in player.businesses
    ]
    updated = replace(
        player,
        balance=player.balance - cost,
        businesses=businesses,
        logs=_log(player, f"Bought {business.display_name} for {cost:.2f}"),
    )
    return ActionResult(success=True, player=updated, amount=cost)


def upgrade_cost(player: Player, business_id: str) -> float | None:
    business = player.get_business(business_id)
    if business is None or not business.owned:
        return None
    return BUSINESS_UPGRADE.compute(business.base_cost, business.level)


def upgrade_business(player: Player, business_id: str) -> ActionResult:
    business = player.get_business(business_id)
    if business is None:
        return _rejected(f"Unknown business: {business_id!r}")
    if not business.owned:
        return _rejected("Not owned")
    cost = BUSINESS_UPGRADE.compute(business.base_cost, business.level)
    if player.balance < cost:
        return _rejected("Cannot afford")

    businesses = [
        replace(b, level=b.level + 1) if b.id == business_id else b
        for b in player.businesses
    ]
    updated = replace(
        player,
        balance=player.balance - cost,
        businesses=businesses,
        logs=_log(player, f"Upgraded {business.display_name} to level {business.level + 1}"),
    )
    return ActionResult(success=True, player=updated, amount=cost)


def rename_business(player: Player, business_id: str, name: str) -> ActionResult:
    business = player.get_business(business_id)
    if business is None:
        return _rejected(f"Unknown business: {business_id!r}")
    if not business.owned:
        return _rejected("Not owned")
    name = name.strip()
    if not name:
        return _rejected("Name must not be empty")
    if len(name) > MAX_BUSINESS_NAME:
        return _rejected(f"Name longer than {MAX_BUSINESS_NAME} characters")

    businesses = [
        replace(b, custom_name=name) if b.id == business_id else b
        for b in player.businesses
    ]
    return ActionResult(success=True, player=replace(player, businesses=businesses))


def buy_gpu(player: Player) -> ActionResult:
    farm = player.mining_farm
    if farm.gpu_count >= farm.max_slots:
        return _rejected("No free GPU slots")
    cost = GPU_PURCHASE.compute(GPU_BASE_COST, farm.gpu_count)
    if player.balance < cost:
        return _rejected("Cannot afford")
    updated = replace(
        player,
        balance=player.balance - cost,
        mining_farm=replace(farm, gpu_count=farm.gpu_count + 1),
    )
    return ActionResult(success=True, player=updated, amount=cost)


def upgrade_gpu(player: Player) -> ActionResult:
    farm = player.mining_farm
    cost = GPU_UPGRADE.compute(GPU_UPGRADE_BASE_COST, farm.gpu_level - 1)
    if player.balance < cost:
        return _rejected("Cannot afford")
    updated = replace(
        player,
        balance=player.balance - cost,
        mining_farm=replace(farm, gpu_level=farm.gpu_level + 1),
    )
    return ActionResult(success=True, player=updated, amount=cost)


def buy_shares(player: Player, investment_id: str, amount: int = 1) -> ActionResult:
    if amount < 1:
        return _rejected("Amount must be at least 1")
    inv = player.get_investment(investment_id)
    if inv is None:
        return _rejected(f"Unknown investment: {investment_id!r}")
    cost = inv.current_price * amount
    if player.balance < cost:
        return _rejected("Cannot afford")

    investments = [
        replace(i, owned_amount=i.owned_amount + amount) if i.id == investment_id else i
        for i in player.investments
    ]
    updated = replace(player, balance=player.balance - cost, investments=investments)
    return ActionResult(success=True, player=updated, amount=cost)


def sell_shares(player: Player, investment_id: str, amount: int = 1) -> ActionResult:
    if amount < 1:
        return _rejected("Amount must be at least 1")
    inv = player.get_investment(investment_id)
    if inv is None:
        return _rejected(f"Unknown investment: {investment_id!r}")
    if inv.owned_amount < amount:
        return _rejected("Not enough shares")

    proceeds = inv.current_price * amount
    investments = [
        replace(i, owned_amount=i.owned_amount - amount) if i.id == investment_id else i
        for i in player.investments
    ]
    updated = replace(player, investments=investments, **_credit(player, proceeds))
    return ActionResult(success=True, player=updated, amount=proceeds)
