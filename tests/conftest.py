"""Pytest fixtures: fills and book payloads for deterministic tests."""

from decimal import Decimal

import pytest

from book_core.contracts import BookSnapshot, Fill, PriceLevel, Side


def make_fill(
    side: str,
    size: str | int,
    time: int,
    pnl: str | int = 0,
    coin: str = "X",
    price: str = "100",
    tid: int | None = None,
) -> Fill:
    return Fill(
        instrument=coin,
        price=Decimal(price),
        size=Decimal(str(size)),
        side=Side.BUY if side == "B" else Side.SELL,
        timestamp=time,
        closed_pnl=Decimal(str(pnl)),
        order_id=f"oid-{time}",
        trade_id=tid,
    )


def raw_fill(
    side: str,
    sz: str,
    time: int,
    closed_pnl: str = "0.0",
    coin: str = "AVAX",
    px: str = "29.45",
    **extra,
) -> dict:
    return {
        "coin": coin,
        "px": px,
        "sz": sz,
        "side": side,
        "time": time,
        "startPosition": "0.0",
        "dir": "Open Long" if side == "B" else "Close Long",
        "closedPnl": closed_pnl,
        "hash": "0xabc",
        "oid": 1000 + time,
        "crossed": True,
        "fee": "0.01",
        **extra,
    }


@pytest.fixture
def l2book_payload() -> dict:
    """Three-level AVAX l2Book payload as the info endpoint returns it."""
    return {
        "coin": "AVAX",
        "time": 1_700_000_000_000,
        "levels": [
            [
                {"px": "29.400", "sz": "100.00", "n": 3},
                {"px": "29.399", "sz": "150.00", "n": 2},
                {"px": "29.398", "sz": "200.00", "n": 1},
            ],
            [
                {"px": "29.500", "sz": "100.00", "n": 1},
                {"px": "29.501", "sz": "150.00", "n": 4},
                {"px": "29.502", "sz": "200.00", "n": 2},
            ],
        ],
    }


@pytest.fixture
def avax_snapshot() -> BookSnapshot:
    return BookSnapshot(
        instrument="AVAX",
        bid_levels=(
            PriceLevel(Decimal("29.40"), Decimal("100")),
            PriceLevel(Decimal("29.39"), Decimal("150")),
        ),
        ask_levels=(
            PriceLevel(Decimal("29.50"), Decimal("100")),
            PriceLevel(Decimal("29.51"), Decimal("150")),
            PriceLevel(Decimal("29.52"), Decimal("200")),
        ),
        timestamp=1_700_000_000_000,
    )
