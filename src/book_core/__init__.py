"""
book_core: pure order-book and trade-history logic.

No I/O, no network, no side effects. Consumes book snapshots and fills,
produces depth views and completed trades. Deterministic and unit-testable.
"""

from book_core.contracts import (
    BookSnapshot,
    BookView,
    CompletedTrade,
    DepthRow,
    Direction,
    Fill,
    OpenPosition,
    PriceLevel,
    Side,
)
from book_core.errors import ParseError, ValidationError
from book_core.orderbook import BookCache, materialize
from book_core.trades import reconstruct

__all__ = [
    "BookCache",
    "BookSnapshot",
    "BookView",
    "CompletedTrade",
    "DepthRow",
    "Direction",
    "Fill",
    "materialize",
    "OpenPosition",
    "ParseError",
    "PriceLevel",
    "reconstruct",
    "Side",
    "ValidationError",
]
