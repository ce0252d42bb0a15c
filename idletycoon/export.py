from __future__ import annotations

import csv
import json
from pathlib import Path

from idletycoon.report import SessionReport


def export_csv(report: SessionReport, path: str | Path) -> None:
    """Export session data as CSV files.

    Creates three files:
      - {path}_ticks.csv
      - {path}_prices.csv
      - {path}_candles.csv
    """
    base = str(path)

    with open(f"{base}_ticks.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(
            ["playtime", "balance", "max_money", "net_income", "btc_balance", "energy_debt"]
        )
        for s in report.snapshots:
            writer.writerow(
                [s.playtime, s.balance, s.max_money, s.net_income, s.btc_balance, s.energy_debt]
            )

    with open(f"{base}_prices.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["playtime", "investment_id", "price", "change_percent"])
        for p in report.prices:
            writer.writerow([p.playtime, p.investment_id, p.price, p.change_percent])

    with open(f"{base}_candles.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["investment_id", "time", "open", "high", "low", "close"])
        for inv_id, candles in sorted(report.candles.items()):
            for c in candles:
                writer.writerow([inv_id, c.time, c.open, c.high, c.low, c.close])


def export_json(report: SessionReport, path: str | Path) -> None:
    """Export the session summary and candle histories as JSON."""
    data = {
        "player_id": report.player_id,
        "outcome": report.outcome,
        "ticks": report.ticks,
        "market_updates": report.market_updates,
        "start_balance": report.start_balance,
        "end_balance": report.end_balance,
        "max_money": report.max_money,
        "btc_mined": report.btc_mined,
        "energy_accrued": report.energy_accrued,
        "mean_net_income": report.mean_net_income,
        "events": [
            {"playtime": e.playtime, "kind": e.kind, "detail": e.detail}
            for e in report.events
        ],
        "candles": {
            inv_id: [c.to_dict() for c in candles]
            for inv_id, candles in report.candles.items()
        },
    }
    with open(str(path), "w") as f:
        json.dump(data, f, indent=2)
