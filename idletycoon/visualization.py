from __future__ import annotations

from idletycoon.report import SessionReport


def plot_session(
    report: SessionReport,
    output_path: str | None = None,
) -> None:
    """Plot the balance curve and one candlestick panel per investment.

    Requires matplotlib (optional dependency).
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError(
            "matplotlib is required for visualization. "
            "Install with: pip install idletycoon[viz]"
        )

    symbols = sorted(report.candles)
    rows = 1 + len(symbols)
    fig, axes = plt.subplots(rows, 1, figsize=(12, 3.5 * rows), squeeze=False)
    fig.suptitle(f"idletycoon session: {report.player_id}", fontsize=14)

    # Balance and max money
    ax = axes[0][0]
    if report.snapshots:
        times = [s.playtime for s in report.snapshots]
        ax.plot(times, [s.balance for s in report.snapshots], label="balance")
        ax.plot(
            times,
            [s.max_money for s in report.snapshots],
            linestyle="--",
            label="max money",
        )
    ax.set_xlabel("Playtime (s)")
    ax.set_ylabel("Money")
    ax.set_title("Balance")
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)

    # Candles, drawn by hand: wick line plus body bar
    for row, inv_id in enumerate(symbols, start=1):
        ax = axes[row][0]
        candles = report.candles[inv_id]
        for i, c in enumerate(candles):
            color = "tab:green" if c.close >= c.open else "tab:red"
            ax.vlines(i, c.low, c.high, color=color, linewidth=1)
            body = max(abs(c.close - c.open), 1e-9)
            ax.bar(i, body, bottom=min(c.open, c.close), width=0.6, color=color)
        ax.set_title(f"{inv_id} candles")
        ax.set_xlabel("Candle")
        ax.set_ylabel("Price")
        ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=150)
    else:
        plt.show()
