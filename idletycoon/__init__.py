# idletycoon: idle tycoon game core with economy, ticks, bans and music

from idletycoon._types import MAX_CURRENCY, PERMANENT_BAN, SimulatedClock, system_clock
from idletycoon.exceptions import (
    IdleTycoonError,
    PlayerNotFoundError,
    PlaybackRejected,
    StoreError,
)
from idletycoon.cost_scaling import CostScaling
from idletycoon.business import Business
from idletycoon.mining import MiningFarm
from idletycoon.market import Candle, Investment, MarketModel, update_market_prices
from idletycoon.player import Player
from idletycoon.database import CustomTrack, GameDatabase, GlobalConfig
from idletycoon.settings import AppSettings
from idletycoon.store import FileKeyValueStore, GameStore, MemoryKeyValueStore
from idletycoon.economy import (
    IncomeBreakdown,
    MiningPerformance,
    calculate_business_income,
    calculate_mining_performance,
)
from idletycoon.ban import Active, Banned, evaluate_ban, is_ban_active
from idletycoon.timer import RepeatingTimer, SteppedTimer
from idletycoon.ledger import PlayerLedger
from idletycoon.scheduler import Advanced, Frozen, Halted, TickScheduler
from idletycoon.audio import (
    AudioController,
    HeadlessAudioBackend,
    PlaybackIntent,
    plan_playback,
    resolve_track,
)
from idletycoon.actions import ActionResult
from idletycoon.session import GameSession, SessionState
from idletycoon.catalog import new_player
from idletycoon.metrics import MetricsCollector
from idletycoon.report import SessionReport, build_report
from idletycoon.formatting import format_text_report

__all__ = [
    # Types
    "MAX_CURRENCY",
    "PERMANENT_BAN",
    "SimulatedClock",
    "system_clock",
    # Errors
    "IdleTycoonError",
    "PlayerNotFoundError",
    "PlaybackRejected",
    "StoreError",
    # Cost
    "CostScaling",
    # Data model
    "Business",
    "MiningFarm",
    "Candle",
    "Investment",
    "Player",
    "CustomTrack",
    "GameDatabase",
    "GlobalConfig",
    "AppSettings",
    # Store
    "FileKeyValueStore",
    "GameStore",
    "MemoryKeyValueStore",
    # Economy
    "IncomeBreakdown",
    "MiningPerformance",
    "calculate_business_income",
    "calculate_mining_performance",
    "MarketModel",
    "update_market_prices",
    # Bans
    "Active",
    "Banned",
    "evaluate_ban",
    "is_ban_active",
    # Ticks
    "RepeatingTimer",
    "SteppedTimer",
    "PlayerLedger",
    "Advanced",
    "Frozen",
    "Halted",
    "TickScheduler",
    # Audio
    "AudioController",
    "HeadlessAudioBackend",
    "PlaybackIntent",
    "plan_playback",
    "resolve_track",
    # Session
    "ActionResult",
    "GameSession",
    "SessionState",
    "new_player",
    # Reporting
    "MetricsCollector",
    "SessionReport",
    "build_report",
    "format_text_report",
]
