"""MCP server wrapping a GameSession for interactive playtesting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mcp.server.fastmcp import FastMCP

from idletycoon import actions
from idletycoon._types import PERMANENT_BAN, SimulatedClock, system_clock
from idletycoon.actions import ActionResult
from idletycoon.audio import plan_playback
from idletycoon.economy import calculate_business_income, calculate_mining_performance
from idletycoon.exceptions import PlayerNotFoundError
from idletycoon.metrics import MetricsCollector
from idletycoon.session import GameSession, SessionState
from idletycoon.store import GameStore
from idletycoon.timer import SteppedTimer

# Maximum seconds per wait() call (24 hours)
_MAX_WAIT = 86400
# Maximum taps per tap() call
_MAX_TAPS = 1000


@dataclass
class _SessionHolder:
    """Holds the store, the session and its simulated time source."""

    store: GameStore
    clock: SimulatedClock = field(default_factory=lambda: SimulatedClock(system_clock()))
    timer: SteppedTimer = field(default_factory=SteppedTimer)
    collector: MetricsCollector = field(default_factory=MetricsCollector)
    session: GameSession | None = None

    def __post_init__(self) -> None:
        if self.session is None:
            self.session = GameSession(
                self.store, clock=self.clock, timer_factory=lambda: self.timer
            )
            self.session.subscribe(self.collector)


def _money(value: float) -> float:
    return round(value, 2)


def _action_response(result: ActionResult, **extra: Any) -> dict[str, Any]:
    if not result.success:
        return {"success": False, "reason": result.reason}
    response: dict[str, Any] = {"success": True, "amount": _money(result.amount)}
    if result.player is not None:
        response["balance"] = _money(result.player.balance)
    response.update(extra)
    return response


# ── Tool logic functions (testable without MCP protocol) ────────────


def _tool_login(holder: _SessionHolder, player_id: str) -> dict[str, Any]:
    try:
        state = holder.session.login(player_id)
    except PlayerNotFoundError as exc:
        return {"error": str(exc)}
    result: dict[str, Any] = {"state": state.value, "player_id": player_id}
    ban = holder.session.ban
    if state is SessionState.BANNED and ban is not None:
        result["banned_until"] = ban.until
        result["permanent"] = ban.permanent
        result["reason"] = ban.reason
    return result


def _tool_logout(holder: _SessionHolder) -> dict[str, Any]:
    return {"state": holder.session.logout().value}


def _tool_get_state(holder: _SessionHolder) -> dict[str, Any]:
    session = holder.session
    player = session.player
    result: dict[str, Any] = {"state": session.state.value, "now_ms": holder.clock.now_ms}
    if player is None:
        return result

    config = session.config
    income = calculate_business_income(player, config)
    mining = calculate_mining_performance(player, config)
    result["player"] = {
        "id": player.id,
        "username": player.username,
        "balance": _money(player.balance),
        "max_money": _money(player.max_money),
        "playtime": player.playtime,
        "click_level": player.click_level,
        "click_exp": player.click_exp,
        "click_exp_max": player.click_exp_max,
    }
    result["income"] = {
        "gross": _money(income.gross),
        "tax": _money(income.tax),
        "net": _money(income.net),
    }
    result["mining"] = {
        "gpu_count": player.mining_farm.gpu_count,
        "gpu_level": player.mining_farm.gpu_level,
        "max_slots": player.mining_farm.max_slots,
        "btc_balance": player.mining_farm.btc_balance,
        "energy_debt": _money(player.mining_farm.energy_debt),
        "btc_per_tick": mining.btc_income,
        "energy_per_tick": _money(mining.energy_cost),
    }
    result["businesses"] = [
        {
            "id": b.id,
            "name": b.display_name,
            "owned": b.owned,
            "level": b.level,
            "income": _money(b.income_per_tick()),
            "price": _money(b.base_cost) if not b.owned else None,
            "upgrade_cost": _money(actions.upgrade_cost(player, b.id)) if b.owned else None,
        }
        for b in player.businesses
    ]
    result["investments"] = [
        {
            "id": inv.id,
            "symbol": inv.symbol,
            "price": inv.current_price,
            "change_percent": inv.change_percent,
            "owned": inv.owned_amount,
        }
        for inv in player.investments
    ]
    if session.state is SessionState.BANNED and session.ban is not None:
        result["ban"] = {
            "until": session.ban.until,
            "permanent": session.ban.permanent,
            "reason": session.ban.reason,
        }
    return result


def _tool_tap(holder: _SessionHolder, count: int = 1) -> dict[str, Any]:
    if count < 1:
        return {"error": "Count must be at least 1"}
    if count > _MAX_TAPS:
        return {"error": f"Count cannot exceed {_MAX_TAPS}"}

    total = 0.0
    for _ in range(count):
        result = holder.session.perform(actions.tap)
        if not result.success:
            return {"success": False, "reason": result.reason, "taps": 0}
        total += result.amount
    player = holder.session.player
    return {
        "success": True,
        "taps": count,
        "total_earned": _money(total),
        "new_balance": _money(player.balance),
        "click_level": player.click_level,
    }


def _tool_buy_business(holder: _SessionHolder, business_id: str) -> dict[str, Any]:
    return _action_response(holder.session.perform(actions.buy_business, business_id))


def _tool_upgrade_business(holder: _SessionHolder, business_id: str) -> dict[str, Any]:
    result = holder.session.perform(actions.upgrade_business, business_id)
    if not result.success:
        return _action_response(result)
    business = result.player.get_business(business_id)
    return _action_response(result, new_level=business.level)


def _tool_rename_business(
    holder: _SessionHolder, business_id: str, name: str
) -> dict[str, Any]:
    return _action_response(holder.session.perform(actions.rename_business, business_id, name))


def _tool_buy_gpu(holder: _SessionHolder) -> dict[str, Any]:
    result = holder.session.perform(actions.buy_gpu)
    if not result.success:
        return _action_response(result)
    return _action_response(result, gpu_count=result.player.mining_farm.gpu_count)


def _tool_upgrade_gpu(holder: _SessionHolder) -> dict[str, Any]:
    result = holder.session.perform(actions.upgrade_gpu)
    if not result.success:
        return _action_response(result)
    return _action_response(result, gpu_level=result.player.mining_farm.gpu_level)


def _tool_buy_shares(
    holder: _SessionHolder, investment_id: str, amount: int = 1
) -> dict[str, Any]:
    return _action_response(holder.session.perform(actions.buy_shares, investment_id, amount))


def _tool_sell_shares(
    holder: _SessionHolder, investment_id: str, amount: int = 1
) -> dict[str, Any]:
    return _action_response(holder.session.perform(actions.sell_shares, investment_id, amount))


def _tool_wait(holder: _SessionHolder, seconds: int) -> dict[str, Any]:
    if seconds <= 0:
        return {"error": "Seconds must be positive"}
    if seconds > _MAX_WAIT:
        return {"error": f"Cannot wait more than {_MAX_WAIT} seconds (24h) per call"}
    if holder.session.state is not SessionState.ACTIVE:
        return {"error": "Session is not active"}

    events_before = len(holder.collector.events)
    updates_before = holder.collector.market_updates
    start_balance = holder.session.player.balance

    ticks = 0
    for _ in range(int(seconds)):
        if not holder.timer.running:
            break
        holder.clock.advance(1000)
        ticks += holder.timer.fire()

    player = holder.session.player
    result: dict[str, Any] = {
        "waited": seconds,
        "ticks": ticks,
        "state": holder.session.state.value,
        "market_updates": holder.collector.market_updates - updates_before,
    }
    if player is not None:
        result["balance"] = _money(player.balance)
        result["earned"] = _money(player.balance - start_balance)
    new_events = holder.collector.events[events_before:]
    if new_events:
        result["events"] = [{"kind": e.kind, "detail": e.detail} for e in new_events]
    return result


def _tool_update_settings(holder: _SessionHolder, **changes: Any) -> dict[str, Any]:
    changes = {k: v for k, v in changes.items() if v is not None}
    try:
        settings = holder.session.update_settings(**changes)
    except ValueError as exc:
        return {"error": str(exc)}
    return {"settings": settings.to_dict()}


def _tool_get_audio(holder: _SessionHolder) -> dict[str, Any]:
    session = holder.session
    intent = plan_playback(session.settings, session.config, session.logged_in)
    return {
        "source": intent.source,
        "volume": intent.volume,
        "should_play": intent.should_play,
        "playing": session.audio.playing,
    }


def _tool_admin_ban(
    holder: _SessionHolder,
    player_id: str,
    minutes: float | None = None,
    reason: str | None = None,
) -> dict[str, Any]:
    if minutes is not None and minutes <= 0:
        return {"error": "Minutes must be positive"}
    until = PERMANENT_BAN if minutes is None else holder.clock() + int(minutes * 60_000)
    if not holder.store.ban_user(player_id, until, reason):
        return {"error": f"Unknown player: {player_id!r}"}
    return {"success": True, "player_id": player_id, "banned_until": until}


def _tool_admin_unban(holder: _SessionHolder, player_id: str) -> dict[str, Any]:
    if holder.store.get_player(player_id) is None:
        return {"error": f"Unknown player: {player_id!r}"}
    holder.store.unban_user(player_id)
    return {"success": True, "player_id": player_id}


def _tool_admin_set_config(holder: _SessionHolder, **changes: Any) -> dict[str, Any]:
    changes = {k: v for k, v in changes.items() if v is not None}
    try:
        config = holder.store.update_config(**changes)
    except ValueError as exc:
        return {"error": str(exc)}
    return {"config": config.to_dict()}


# ── Server factory ──────────────────────────────────────────────────


def create_server(store: GameStore) -> FastMCP:
    """Create an MCP server driving a GameSession over the given store."""
    holder = _SessionHolder(store=store)

    mcp = FastMCP(name="IdleTycoon")

    @mcp.tool()
    def login(player_id: str) -> dict[str, Any]:
        """Log in as a player. Banned players get the ban details instead of a session."""
        return _tool_login(holder, player_id)

    @mcp.tool()
    def logout() -> dict[str, Any]:
        """Log out and stop the tick loop."""
        return _tool_logout(holder)

    @mcp.tool()
    def get_state() -> dict[str, Any]:
        """Get the session state, balances, income, businesses, mining and market."""
        return _tool_get_state(holder)

    @mcp.tool()
    def tap(count: int = 1) -> dict[str, Any]:
        """Tap N times (max 1000). Returns total earned."""
        return _tool_tap(holder, count)

    @mcp.tool()
    def buy_business(business_id: str) -> dict[str, Any]:
        """Buy a business at its base cost."""
        return _tool_buy_business(holder, business_id)

    @mcp.tool()
    def upgrade_business(business_id: str) -> dict[str, Any]:
        """Raise an owned business by one level."""
        return _tool_upgrade_business(holder, business_id)

    @mcp.tool()
    def rename_business(business_id: str, name: str) -> dict[str, Any]:
        """Give an owned business a custom name."""
        return _tool_rename_business(holder, business_id, name)

    @mcp.tool()
    def buy_gpu() -> dict[str, Any]:
        """Install one more GPU in the mining farm."""
        return _tool_buy_gpu(holder)

    @mcp.tool()
    def upgrade_gpu() -> dict[str, Any]:
        """Raise the mining farm's GPU level."""
        return _tool_upgrade_gpu(holder)

    @mcp.tool()
    def buy_shares(investment_id: str, amount: int = 1) -> dict[str, Any]:
        """Buy shares of a listed investment at the current price."""
        return _tool_buy_shares(holder, investment_id, amount)

    @mcp.tool()
    def sell_shares(investment_id: str, amount: int = 1) -> dict[str, Any]:
        """Sell owned shares at the current price."""
        return _tool_sell_shares(holder, investment_id, amount)

    @mcp.tool()
    def wait(seconds: int) -> dict[str, Any]:
        """Advance game time by the given seconds (max 86400), one tick per second."""
        return _tool_wait(holder, seconds)

    @mcp.tool()
    def update_settings(
        show_christmas_vibe: bool | None = None,
        enable_music: bool | None = None,
        music_volume: float | None = None,
        selected_track: str | None = None,
        language: str | None = None,
    ) -> dict[str, Any]:
        """Change local app settings. Omitted fields are left as they are."""
        return _tool_update_settings(
            holder,
            show_christmas_vibe=show_christmas_vibe,
            enable_music=enable_music,
            music_volume=music_volume,
            selected_track=selected_track,
            language=language,
        )

    @mcp.tool()
    def get_audio() -> dict[str, Any]:
        """Which track should be playing right now, and whether it is."""
        return _tool_get_audio(holder)

    @mcp.tool()
    def admin_ban(
        player_id: str, minutes: float | None = None, reason: str | None = None
    ) -> dict[str, Any]:
        """Ban a player for N minutes, or permanently when minutes is omitted."""
        return _tool_admin_ban(holder, player_id, minutes, reason)

    @mcp.tool()
    def admin_unban(player_id: str) -> dict[str, Any]:
        """Lift a player's ban."""
        return _tool_admin_unban(holder, player_id)

    @mcp.tool()
    def admin_set_config(
        global_multiplier: float | None = None,
        tax_rate: float | None = None,
        energy_cost_per_gpu: float | None = None,
        active_track: str | None = None,
        is_music_enabled: bool | None = None,
    ) -> dict[str, Any]:
        """Edit the shared game config. Running sessions pick it up on their next tick."""
        return _tool_admin_set_config(
            holder,
            global_multiplier=global_multiplier,
            tax_rate=tax_rate,
            energy_cost_per_gpu=energy_cost_per_gpu,
            active_track=active_track,
            is_music_enabled=is_music_enabled,
        )

    return mcp
