from __future__ import annotations

from idletycoon.report import SessionReport


def format_money(value: float) -> str:
    """Compact money string: 1234 -> 1.23K, 5e6 -> 5.00M."""
    sign = "-" if value < 0 else ""
    value = abs(value)
    for threshold, suffix in ((1e15, "Q"), (1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if value >= threshold:
            return f"{sign}{value / threshold:.2f}{suffix}"
    return f"{sign}{value:.2f}"


def format_text_report(report: SessionReport) -> str:
    """Format a session report for console output."""
    lines: list[str] = []

    lines.append("=" * 30 + " idletycoon Session Report " + "=" * 30)
    lines.append(f"Player: {report.player_id}")
    lines.append(f"Result: {report.outcome} after {report.ticks} tick(s)")
    lines.append("")

    lines.append("ECONOMY:")
    lines.append(f"  Balance: {format_money(report.start_balance)} -> {format_money(report.end_balance)}")
    lines.append(f"  Max money: {format_money(report.max_money)}")
    lines.append(f"  Mean net income: {format_money(report.mean_net_income)}/tick")
    lines.append(f"  BTC mined: {report.btc_mined:.8f}")
    lines.append(f"  Energy debt accrued: {format_money(report.energy_accrued)}")
    lines.append("")

    if report.candles:
        lines.append(f"MARKET ({report.market_updates} update(s)):")
        for inv_id, candles in sorted(report.candles.items()):
            if not candles:
                lines.append(f"  {inv_id:.<20s} no history")
                continue
            last = candles[-1]
            lines.append(
                f"  {inv_id:.<20s} {last.close:>12.2f}  "
                f"(H {last.high:.2f} / L {last.low:.2f}, {len(candles)} candle(s))"
            )
        lines.append("")

    if report.events:
        lines.append("EVENTS:")
        for e in report.events:
            detail = f" ({e.detail})" if e.detail else ""
            lines.append(f"  * {e.playtime}s {e.kind}{detail}")

    return "\n".join(lines)
