"""
Trade reconstructor: unordered fills -> completed flat-to-flat position cycles.

Per instrument the position walks Flat -> Open -> Flat. Every fill that
does not return the position to flat keeps it Open; the Open -> Flat
transition emits exactly one CompletedTrade.

Realized PnL is the sum of the exchange-reported closedPnl of every fill in
the cycle. The exchange only attributes PnL to size-reducing fills, so
plain accumulation is correct.

Equal-timestamp ordering: fills are sorted by (timestamp, trade_id). Fills
without a trade_id sort after those that have one at the same timestamp.
Remaining ties fall back to the fill contents: fills carrying no closed PnL
(opening or increasing) before closing fills, then order id, side, size,
price and closed PnL. The order never depends on the order of the input.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Callable, Iterable, Mapping, Sequence

from book_core.contracts import (
    ZERO,
    CompletedTrade,
    Direction,
    Fill,
    PositionAccumulator,
    Side,
    TradeSummary,
)
from book_core.errors import ValidationError
from book_core.parsing import parse_fills

logger = logging.getLogger("hyperbook.trades")

# Residue below which a position counts as flat. Tolerance only, not a business rule.
FLAT_EPSILON = Decimal("0.0001")

TraceCallback = Callable[[str, dict], None]


def _validate(fills: Sequence[Fill]) -> None:
    """Reject the whole input if any fill is invalid. No partial reconstruction."""
    for index, fill in enumerate(fills):
        if not isinstance(fill, Fill):
            raise ValidationError(f"fill[{index}]: expected Fill, got {type(fill).__name__}")
        if not isinstance(fill.size, Decimal) or not fill.size.is_finite():
            raise ValidationError(f"fill[{index}]: size must be a finite Decimal")
        if fill.size <= 0:
            raise ValidationError(f"fill[{index}]: size must be positive, got {fill.size}")
        if not isinstance(fill.price, Decimal) or not fill.price.is_finite():
            raise ValidationError(f"fill[{index}]: price must be a finite Decimal")
        if not isinstance(fill.side, Side):
            raise ValidationError(f"fill[{index}]: unknown side {fill.side!r}")
        if not isinstance(fill.closed_pnl, Decimal) or not fill.closed_pnl.is_finite():
            raise ValidationError(f"fill[{index}]: closed_pnl must be a finite Decimal")
        if isinstance(fill.timestamp, bool) or not isinstance(fill.timestamp, int):
            raise ValidationError(f"fill[{index}]: timestamp must be integer milliseconds")
        if fill.trade_id is not None and (
            isinstance(fill.trade_id, bool) or not isinstance(fill.trade_id, int)
        ):
            raise ValidationError(f"fill[{index}]: trade_id must be an integer or None")


def _order_id_key(order_id: Any) -> tuple:
    if order_id is None:
        return (2, "")
    if isinstance(order_id, int) and not isinstance(order_id, bool):
        return (0, order_id)
    return (1, str(order_id))


def _sort_key(fill: Fill) -> tuple:
    if fill.trade_id is None:
        head = (fill.timestamp, 1, 0)
    else:
        head = (fill.timestamp, 0, fill.trade_id)
    return head + (
        fill.closed_pnl != ZERO,
        _order_id_key(fill.order_id),
        fill.side.value,
        fill.size,
        fill.price,
        fill.closed_pnl,
    )


def partition_by_instrument(fills: Iterable[Fill]) -> dict[str, list[Fill]]:
    """Group fills by instrument, sorted chronologically within each group."""
    groups: dict[str, list[Fill]] = defaultdict(list)
    for fill in fills:
        groups[fill.instrument].append(fill)
    return {coin: sorted(group, key=_sort_key) for coin, group in groups.items()}


def _scan_instrument(
    instrument: str,
    fills: Sequence[Fill],
    on_event: TraceCallback | None,
) -> list[CompletedTrade]:
    acc = PositionAccumulator(instrument=instrument)
    trades: list[CompletedTrade] = []

    for fill in fills:
        if acc.direction is None:
            acc.direction = Direction.LONG if fill.side is Side.BUY else Direction.SHORT

        acc.signed_size += fill.signed_size
        acc.fill_count += 1

        if acc.open_timestamp is None and acc.signed_size != ZERO:
            acc.open_timestamp = fill.timestamp
            if on_event:
                on_event("position_opened", {"instrument": instrument, "direction": acc.direction.value, "ts": fill.timestamp})

        acc.accumulated_pnl += fill.closed_pnl

        if acc.open_timestamp is not None and abs(acc.signed_size) < FLAT_EPSILON:
            trade = CompletedTrade(
                instrument=instrument,
                direction=acc.direction,
                open_timestamp=acc.open_timestamp,
                close_timestamp=fill.timestamp,
                duration_ms=fill.timestamp - acc.open_timestamp,
                realized_pnl=acc.accumulated_pnl,
                fill_count=acc.fill_count,
            )
            trades.append(trade)
            if on_event:
                on_event("position_closed", {"instrument": instrument, "trade": trade})
            acc.reset()

    if acc.is_open and on_event:
        on_event(
            "dangling_position",
            {"instrument": instrument, "signed_size": acc.signed_size, "open_ts": acc.open_timestamp},
        )
    return trades


def reconstruct(
    fills: Sequence[Fill],
    *,
    on_event: TraceCallback | None = None,
) -> list[CompletedTrade]:
    """
    Reconstruct completed round-trip trades from an unordered list of fills.

    Only closed cycles are returned; a position still open at the end of the
    input produces nothing. Result is most recent open first. on_event is an
    optional tracing hook and never changes the result.
    """
    fills = list(fills)
    _validate(fills)

    trades: list[CompletedTrade] = []
    for instrument, group in partition_by_instrument(fills).items():
        trades.extend(_scan_instrument(instrument, group, on_event))

    # Deterministic regardless of input order: instrument then close time break ties.
    trades.sort(key=lambda t: (t.instrument, -t.close_timestamp))
    trades.sort(key=lambda t: t.open_timestamp, reverse=True)
    logger.debug("Reconstructed %d trades from %d fills", len(trades), len(fills))
    return trades


def reconstruct_raw(
    raw_fills: Sequence[Mapping[str, Any]],
    *,
    on_event: TraceCallback | None = None,
) -> list[CompletedTrade]:
    """Parse userFills entries, then reconstruct. Any malformed entry aborts the call."""
    return reconstruct(parse_fills(raw_fills), on_event=on_event)


def summarize(trades: Sequence[CompletedTrade]) -> TradeSummary:
    wins = sum(1 for t in trades if t.realized_pnl > 0)
    losses = sum(1 for t in trades if t.realized_pnl < 0)
    total = sum((t.realized_pnl for t in trades), ZERO)
    return TradeSummary(count=len(trades), wins=wins, losses=losses, total_pnl=total)
