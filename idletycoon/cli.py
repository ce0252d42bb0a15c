from __future__ import annotations

import argparse
import asyncio
import importlib
import random
import sys

from idletycoon._types import PERMANENT_BAN, SimulatedClock, system_clock
from idletycoon.config import EngineConfig
from idletycoon.database import GameDatabase
from idletycoon.exceptions import PlayerNotFoundError
from idletycoon.formatting import format_text_report
from idletycoon.logging import setup_logging
from idletycoon.market import MarketModel
from idletycoon.metrics import MetricsCollector
from idletycoon.report import SessionReport, build_report
from idletycoon.session import GameSession, SessionState
from idletycoon.store import FileKeyValueStore, GameStore
from idletycoon.timer import RepeatingTimer, SteppedTimer


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idletycoon",
        description="idletycoon: idle tycoon simulation and admin CLI",
    )
    parser.add_argument("--log-dir", default=None, help="Write a log file here too")
    sub = parser.add_subparsers(dest="command")

    seed = sub.add_parser("seed", help="Write an example world into a store")
    seed.add_argument("store_dir", help="Store directory")
    seed.add_argument(
        "--world",
        default="examples.tycoon_example",
        help="Python module with define_world() (default: examples.tycoon_example)",
    )

    run = sub.add_parser("run", help="Log in and run ticks for a player")
    run.add_argument("store_dir", help="Store directory")
    run.add_argument("player_id", help="Player to log in as")
    run.add_argument(
        "--ticks", type=_positive_int, default=60, help="Ticks to run (default: 60)"
    )
    run.add_argument(
        "--realtime",
        action="store_true",
        help="Wait one real period per tick instead of fast-forwarding",
    )
    run.add_argument("--tick-seconds", type=int, default=1, help="Seconds per tick")
    run.add_argument(
        "--market-every", type=int, default=30, help="Ticks between market updates"
    )
    run.add_argument("--seed", type=int, default=None, help="Random seed")
    run.add_argument("--volatility", type=float, default=None, help="Market volatility")
    run.add_argument("--export-csv", default=None, help="CSV export path prefix")
    run.add_argument("--export-json", default=None, help="JSON export path")
    run.add_argument("--plot", default=None, help="Plot output path (PNG)")

    ban = sub.add_parser("ban", help="Ban a player")
    ban.add_argument("store_dir", help="Store directory")
    ban.add_argument("player_id", help="Player to ban")
    group = ban.add_mutually_exclusive_group(required=True)
    group.add_argument("--minutes", type=float, help="Ban duration in minutes")
    group.add_argument("--permanent", action="store_true", help="Ban forever")
    ban.add_argument("--reason", default=None, help="Reason shown to the player")

    unban = sub.add_parser("unban", help="Lift a player's ban")
    unban.add_argument("store_dir", help="Store directory")
    unban.add_argument("player_id", help="Player to unban")

    cfg = sub.add_parser("config", help="Show or edit the shared game config")
    cfg.add_argument("store_dir", help="Store directory")
    cfg.add_argument("--multiplier", type=float, default=None, help="Global income multiplier")
    cfg.add_argument("--tax-rate", type=float, default=None, help="Tax rate in [0, 1]")
    cfg.add_argument("--energy-cost", type=float, default=None, help="Energy cost per GPU per tick")
    cfg.add_argument("--track", default=None, help="Broadcast track key")
    cfg.add_argument(
        "--music", choices=["on", "off"], default=None, help="Global music switch"
    )

    return parser


def load_world(module_path: str) -> GameDatabase:
    """Import module and call define_world()."""
    mod = importlib.import_module(module_path)
    if not hasattr(mod, "define_world"):
        print(f"Error: module {module_path!r} has no define_world() function")
        sys.exit(1)
    return mod.define_world()


def open_store(store_dir: str) -> GameStore:
    return GameStore(FileKeyValueStore(store_dir))


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    setup_logging(log_dir=args.log_dir)
    store = open_store(args.store_dir)

    if args.command == "seed":
        world = load_world(args.world)
        store.save_database(world)
        print(f"Seeded {len(world.players)} player(s) into {args.store_dir}")

    elif args.command == "run":
        config = EngineConfig(
            tick_seconds=args.tick_seconds,
            market_tick_every=args.market_every,
            seed=args.seed,
            market=MarketModel() if args.volatility is None else MarketModel(volatility=args.volatility),
        )
        try:
            if args.realtime:
                report = asyncio.run(run_realtime(store, args.player_id, args.ticks, config))
            else:
                report = run_fast_forward(store, args.player_id, args.ticks, config)
        except PlayerNotFoundError as exc:
            print(f"Error: {exc}")
            sys.exit(1)

        print(format_text_report(report))

        if args.export_csv:
            from idletycoon.export import export_csv
            export_csv(report, args.export_csv)
            print(f"\nCSV exported to {args.export_csv}_*.csv")

        if args.export_json:
            from idletycoon.export import export_json
            export_json(report, args.export_json)
            print(f"\nJSON exported to {args.export_json}")

        if args.plot:
            from idletycoon.visualization import plot_session
            plot_session(report, args.plot)
            print(f"\nPlot saved to {args.plot}")

    elif args.command == "ban":
        until = PERMANENT_BAN if args.permanent else system_clock() + int(args.minutes * 60_000)
        if not store.ban_user(args.player_id, until, args.reason):
            print(f"Error: unknown player {args.player_id!r}")
            sys.exit(1)
        print(f"Banned {args.player_id} ({'permanent' if args.permanent else f'{args.minutes} min'})")

    elif args.command == "unban":
        if store.get_player(args.player_id) is None:
            print(f"Error: unknown player {args.player_id!r}")
            sys.exit(1)
        store.unban_user(args.player_id)
        print(f"Unbanned {args.player_id}")

    elif args.command == "config":
        changes = {
            name: value
            for name, value in (
                ("global_multiplier", args.multiplier),
                ("tax_rate", args.tax_rate),
                ("energy_cost_per_gpu", args.energy_cost),
                ("active_track", args.track),
                ("is_music_enabled", None if args.music is None else args.music == "on"),
            )
            if value is not None
        }
        current = store.update_config(**changes) if changes else store.load_config()
        for key, value in current.to_dict().items():
            print(f"{key}: {value}")


def _session_outcome(session: GameSession, ticks_run: int) -> str:
    if session.state is SessionState.BANNED:
        return "Banned"
    if session.halted:
        return "Halted: player record missing"
    return f"Completed {ticks_run} tick(s)"


def run_fast_forward(
    store: GameStore, player_id: str, ticks: int, config: EngineConfig
) -> SessionReport:
    """Run *ticks* ticks without waiting, on a simulated clock."""
    clock = SimulatedClock(system_clock())
    timer = SteppedTimer()
    session = GameSession(
        store,
        clock=clock,
        timer_factory=lambda: timer,
        period_seconds=config.tick_seconds,
        market_tick_every=config.market_tick_every,
        market_model=config.market,
        rng=random.Random(config.seed),
    )
    collector = MetricsCollector()
    session.subscribe(collector)

    if session.login(player_id) is SessionState.BANNED:
        return _refused(session)

    start = session.player
    ticks_run = 0
    while ticks_run < ticks and timer.running:
        clock.advance(config.tick_seconds * 1000)
        ticks_run += timer.fire()

    end = session.player
    outcome = _session_outcome(session, ticks_run)
    session.logout()
    return build_report(collector, start, end, outcome)


async def run_realtime(
    store: GameStore, player_id: str, ticks: int, config: EngineConfig
) -> SessionReport:
    """Run *ticks* ticks on the wall clock, one per period."""
    session = GameSession(
        store,
        timer_factory=lambda: RepeatingTimer(config.wall_period),
        period_seconds=config.tick_seconds,
        market_tick_every=config.market_tick_every,
        market_model=config.market,
        rng=random.Random(config.seed),
    )
    collector = MetricsCollector()
    done = asyncio.Event()
    seen = 0

    def on_result(_result) -> None:
        nonlocal seen
        seen += 1
        if seen >= ticks and session.scheduler is not None:
            session.scheduler.stop()
        if seen >= ticks or session.state is not SessionState.ACTIVE or session.halted:
            done.set()

    session.subscribe(collector)
    session.subscribe(on_result)

    if session.login(player_id) is SessionState.BANNED:
        return _refused(session)

    start = session.player
    if ticks > 0:
        await done.wait()
    end = session.player
    outcome = _session_outcome(session, collector.ticks)
    session.logout()
    return build_report(collector, start, end, outcome)


def _refused(session: GameSession) -> SessionReport:
    ban = session.ban
    player = session.player
    session.logout()
    until = "permanent" if ban.permanent else str(ban.until)
    reason = f", reason: {ban.reason}" if ban.reason else ""
    return build_report(
        MetricsCollector(), player, player, f"Login refused: banned until {until}{reason}"
    )


if __name__ == "__main__":
    main()
