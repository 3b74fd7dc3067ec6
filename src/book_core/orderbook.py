"""
Order book materializer: BookSnapshot -> cumulative-depth BookView.

Each side is a strict left-to-right scan in provider order (bids best-first
descending, asks best-first ascending). Totals are always computed in
provider order; reversing asks for display happens afterwards and never
feeds back into the totals.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Sequence

from book_core.contracts import ZERO, BookSnapshot, BookView, DepthRow, PriceLevel
from book_core.errors import ValidationError
from book_core.parsing import parse_book_snapshot, parse_decimal

DEFAULT_PRECISION = Decimal("0.001")


def _depth_rows(levels: Sequence[PriceLevel]) -> tuple[DepthRow, ...]:
    running = ZERO
    rows: list[DepthRow] = []
    for level in levels:
        running += level.size
        rows.append(DepthRow(price=level.price, size=level.size, cumulative_size=running))
    return tuple(rows)


def mid_price(snapshot: BookSnapshot) -> Decimal | None:
    """(best bid + best ask) / 2, or None when either side is empty."""
    if not snapshot.bid_levels or not snapshot.ask_levels:
        return None
    return (snapshot.bid_levels[0].price + snapshot.ask_levels[0].price) / 2


def validate_precision(precision: Any) -> Decimal:
    step = parse_decimal(precision, "precision")
    if step <= 0:
        raise ValidationError(f"precision: must be a positive step, got {precision!r}")
    return step


def materialize(snapshot: BookSnapshot, precision: Any = DEFAULT_PRECISION) -> BookView:
    """Build the display-ready view of a snapshot. Pure."""
    step = validate_precision(precision)
    return BookView(
        instrument=snapshot.instrument,
        bids=_depth_rows(snapshot.bid_levels),
        asks=_depth_rows(snapshot.ask_levels),
        mid_price=mid_price(snapshot),
        timestamp=snapshot.timestamp,
        precision=step,
    )


def materialize_raw(raw: Mapping[str, Any], precision: Any = DEFAULT_PRECISION) -> BookView:
    """Parse an l2Book payload and materialize it. Malformed numbers raise ParseError."""
    return materialize(parse_book_snapshot(raw), precision)


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------


def price_decimals(precision: Decimal) -> int:
    """Display decimals for a price step: 0.001 -> 3, 0.5 -> 1, 1 -> 0, 10 -> 0."""
    exponent = precision.normalize().as_tuple().exponent
    return max(0, -int(exponent))


def display_asks(view: BookView, depth: int = 10) -> list[DepthRow]:
    """Top `depth` asks, worst (highest) first, for stacking above the mid."""
    return list(reversed(view.asks[:depth]))


def display_bids(view: BookView, depth: int = 10) -> list[DepthRow]:
    return list(view.bids[:depth])


def max_cumulative(view: BookView, depth: int = 10) -> Decimal:
    """Largest cumulative size among the displayed rows of both sides."""
    totals = [row.cumulative_size for row in view.bids[:depth]]
    totals += [row.cumulative_size for row in view.asks[:depth]]
    return max(totals, default=ZERO)


# ---------------------------------------------------------------------------
# Latest snapshot per instrument
# ---------------------------------------------------------------------------


class BookCache:
    """Latest snapshot per instrument, last write wins.

    A snapshot replaces the stored one unless it is strictly older; equal
    timestamps replace (the provider may re-send within the same millisecond).
    """

    def __init__(self) -> None:
        self._books: dict[str, BookSnapshot] = {}

    def apply(self, snapshot: BookSnapshot) -> bool:
        current = self._books.get(snapshot.instrument)
        if current is not None and snapshot.timestamp < current.timestamp:
            return False
        self._books[snapshot.instrument] = snapshot
        return True

    def get(self, instrument: str) -> BookSnapshot | None:
        return self._books.get(instrument)

    def discard(self, instrument: str) -> None:
        self._books.pop(instrument, None)

    def instruments(self) -> list[str]:
        return sorted(self._books)

    def __len__(self) -> int:
        return len(self._books)
