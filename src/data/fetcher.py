"""
Market data sources. Configurable adapter; sync.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from book_core.contracts import BookSnapshot, Fill


@dataclass(frozen=True)
class Asset:
    """One entry of the exchange universe (meta)."""

    name: str
    sz_decimals: int
    max_leverage: int | None = None
    only_isolated: bool = False


class MarketDataSource(Protocol):
    """Protocol for exchange data sources. Implement per provider."""

    def get_assets(self) -> list[Asset]:
        ...

    def get_order_book(self, coin: str) -> BookSnapshot:
        ...

    def get_user_fills(self, user: str) -> list[Fill]:
        """All fills for an account; no ordering guarantee."""
        ...

    def get_user_state(self, user: str) -> dict[str, Any]:
        ...


@dataclass
class StaticMarketData:
    """In-memory source; for tests and offline runs."""

    assets: list[Asset] = field(default_factory=list)
    books: dict[str, BookSnapshot] = field(default_factory=dict)
    fills: dict[str, list[Fill]] = field(default_factory=dict)
    states: dict[str, dict[str, Any]] = field(default_factory=dict)

    def get_assets(self) -> list[Asset]:
        return list(self.assets)

    def get_order_book(self, coin: str) -> BookSnapshot:
        if coin not in self.books:
            raise KeyError(f"No order book for {coin}")
        return self.books[coin]

    def get_user_fills(self, user: str) -> list[Fill]:
        return list(self.fills.get(user, []))

    def get_user_state(self, user: str) -> dict[str, Any]:
        return dict(self.states.get(user, {"assetPositions": []}))
