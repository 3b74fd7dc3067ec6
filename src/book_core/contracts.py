"""
Data contracts for book_core: price levels, book snapshots, fills, trades.

book_core consumes PriceLevel/BookSnapshot/Fill and produces BookView and
CompletedTrade. No I/O; these are plain dataclasses. All prices, sizes and
PnL values are Decimal so that mid prices and position sizes are exact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

ZERO = Decimal("0")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Side(str, Enum):
    """Side of an individual fill. Values are the exchange codes."""

    BUY = "B"
    SELL = "A"


class Direction(str, Enum):
    """Direction of a position cycle."""

    LONG = "long"
    SHORT = "short"


# ---------------------------------------------------------------------------
# Order book
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PriceLevel:
    price: Decimal
    size: Decimal


@dataclass(frozen=True)
class BookSnapshot:
    """Full re-send of the visible levels for one instrument.

    Bids are ordered best (highest) first, asks best (lowest) first, as the
    provider sends them.
    """

    instrument: str
    bid_levels: tuple[PriceLevel, ...]
    ask_levels: tuple[PriceLevel, ...]
    timestamp: int


@dataclass(frozen=True)
class DepthRow:
    price: Decimal
    size: Decimal
    cumulative_size: Decimal


@dataclass(frozen=True)
class BookView:
    """Display-ready book. mid_price is None when either side is empty."""

    instrument: str
    bids: tuple[DepthRow, ...]
    asks: tuple[DepthRow, ...]
    mid_price: Decimal | None
    timestamp: int
    precision: Decimal

    @property
    def has_mid(self) -> bool:
        return self.mid_price is not None


# ---------------------------------------------------------------------------
# Fills and trades
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fill:
    """One execution event for an account.

    size is unsigned; side carries the sign. closed_pnl is the realized PnL
    the exchange attributes to this fill (0 when nothing was closed).
    trade_id, fee, start_position and dir are reported by the exchange;
    only trade_id is used by reconstruction (equal-timestamp ordering).
    """

    instrument: str
    price: Decimal
    size: Decimal
    side: Side
    timestamp: int
    closed_pnl: Decimal = ZERO
    order_id: Any = None
    trade_id: int | None = None
    fee: Decimal = ZERO
    start_position: Decimal | None = None
    dir: str | None = None

    @property
    def signed_size(self) -> Decimal:
        return self.size if self.side is Side.BUY else -self.size


@dataclass
class PositionAccumulator:
    """Transient per-instrument position state while reconstructing."""

    instrument: str
    signed_size: Decimal = ZERO
    open_timestamp: int | None = None
    direction: Direction | None = None
    accumulated_pnl: Decimal = ZERO
    fill_count: int = 0

    @property
    def is_open(self) -> bool:
        return self.open_timestamp is not None

    def reset(self) -> None:
        self.signed_size = ZERO
        self.open_timestamp = None
        self.direction = None
        self.accumulated_pnl = ZERO
        self.fill_count = 0


@dataclass(frozen=True)
class CompletedTrade:
    """One flat-to-flat position cycle."""

    instrument: str
    direction: Direction
    open_timestamp: int
    close_timestamp: int
    duration_ms: int
    realized_pnl: Decimal
    fill_count: int = field(default=0, compare=False)

    @property
    def opened_at(self) -> datetime:
        return datetime.fromtimestamp(self.open_timestamp / 1000, tz=timezone.utc)

    @property
    def closed_at(self) -> datetime:
        return datetime.fromtimestamp(self.close_timestamp / 1000, tz=timezone.utc)

    @property
    def duration_label(self) -> str:
        """Duration as whole hours and minutes, e.g. '2h 5m'."""
        hours, rem = divmod(self.duration_ms, 3_600_000)
        minutes = rem // 60_000
        return f"{hours}h {minutes}m"


@dataclass(frozen=True)
class TradeSummary:
    count: int
    wins: int
    losses: int
    total_pnl: Decimal

    @property
    def win_rate(self) -> float:
        return self.wins / self.count if self.count else 0.0


@dataclass(frozen=True)
class OpenPosition:
    """A position the exchange still reports as open (clearinghouseState)."""

    instrument: str
    size: Decimal  # signed: positive long, negative short
    entry_price: Decimal | None = None
    unrealized_pnl: Decimal = ZERO

    @property
    def direction(self) -> Direction:
        return Direction.LONG if self.size > 0 else Direction.SHORT
