"""
Exchange collaborators: HTTP info client, live book stream, static source.

Depends on book_core for contracts and parsing; no dependency from book_core
back to data.
"""

from data.fetcher import Asset, MarketDataSource, StaticMarketData

__all__ = [
    "Asset",
    "MarketDataSource",
    "StaticMarketData",
]


def get_hyperliquid_client(info_url: str, timeout: float = 10.0):
    """Lazy import so book-only tooling does not pull in requests."""
    from data.hyperliquid import HyperLiquidClient

    return HyperLiquidClient(info_url, timeout=timeout)
