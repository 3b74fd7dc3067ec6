"""
Human-readable terminal output for books and reconstructed trades.

Every CLI command uses these formatters; structured events carry the same data.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from book_core.contracts import BookView, CompletedTrade, DepthRow, OpenPosition, TradeSummary
from book_core.orderbook import display_asks, display_bids, max_cumulative, price_decimals

BAR_WIDTH = 20


def _fmt_price(price: Decimal, decimals: int) -> str:
    return f"{price:.{decimals}f}"


def _bar(row: DepthRow, scale: Decimal) -> str:
    if scale <= 0:
        return ""
    return "#" * int(row.cumulative_size / scale * BAR_WIDTH)


def _fmt_row(row: DepthRow, decimals: int, scale: Decimal) -> str:
    return (
        f"{_fmt_price(row.price, decimals):>14}  {row.size:>12.2f}  "
        f"{row.cumulative_size:>12.2f}  {_bar(row, scale)}"
    )


def format_book(view: BookView, depth: int = 10) -> str:
    """Asks worst-first above the mid price, bids best-first below it."""
    decimals = price_decimals(view.precision)
    scale = max_cumulative(view, depth)
    lines = [
        f"--- Order Book: {view.instrument} (step {view.precision}) ---",
        f"{'Price':>14}  {'Size':>12}  {'Total':>12}",
    ]
    asks = display_asks(view, depth)
    bids = display_bids(view, depth)
    if not asks:
        lines.append(f"{'(no asks)':>14}")
    lines.extend(_fmt_row(row, decimals, scale) for row in asks)
    if view.mid_price is None:
        lines.append(f"{'mid n/a':>14}")
    else:
        lines.append(f"{'mid ' + _fmt_price(view.mid_price, decimals):>14}")
    lines.extend(_fmt_row(row, decimals, scale) for row in bids)
    if not bids:
        lines.append(f"{'(no bids)':>14}")
    return "\n".join(lines)


def format_trades(trades: Sequence[CompletedTrade]) -> str:
    if not trades:
        return "No completed trades found. The account may only have open positions."
    lines = [
        f"{'Coin':<10} {'Direction':<9} {'Opening Time (UTC)':<20} {'Duration':>10} {'Realized PnL':>14}",
    ]
    for t in trades:
        lines.append(
            f"{t.instrument:<10} {t.direction.value.upper():<9} "
            f"{t.opened_at.strftime('%Y-%m-%d %H:%M:%S'):<20} "
            f"{t.duration_label:>10} {'$' + format(t.realized_pnl, '.2f'):>14}"
        )
    return "\n".join(lines)


def format_summary(summary: TradeSummary) -> str:
    return (
        f"Completed trades: {summary.count}  "
        f"(wins {summary.wins}, losses {summary.losses}, win rate {summary.win_rate:.0%})  "
        f"Total realized PnL: ${summary.total_pnl:.2f}"
    )


def format_open_positions(positions: Sequence[OpenPosition]) -> str:
    """Positions still open; they have no completed cycle yet."""
    lines = [
        f"Open positions: {len(positions)}",
        f"{'Coin':<10} {'Direction':<9} {'Size':>14} {'Entry':>14} {'Unrealized PnL':>16}",
    ]
    for p in positions:
        entry = "n/a" if p.entry_price is None else str(p.entry_price)
        lines.append(
            f"{p.instrument:<10} {p.direction.value.upper():<9} {abs(p.size):>14} "
            f"{entry:>14} {'$' + format(p.unrealized_pnl, '.2f'):>16}"
        )
    return "\n".join(lines)
