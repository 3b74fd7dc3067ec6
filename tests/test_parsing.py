"""Tests for numeric and payload parsing into book_core contracts."""

from decimal import Decimal

import pytest

from book_core.contracts import Direction, Side
from book_core.errors import ParseError, ValidationError
from book_core.parsing import (
    parse_book_snapshot,
    parse_decimal,
    parse_fill,
    parse_open_positions,
    parse_price_level,
    parse_side,
    parse_timestamp,
)
from conftest import raw_fill


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("29.401", Decimal("29.401")),
        (" 1.5 ", Decimal("1.5")),
        ("-0.25", Decimal("-0.25")),
        (3, Decimal("3")),
        (0.1, Decimal("0.1")),
        (Decimal("7.7"), Decimal("7.7")),
    ],
)
def test_parse_decimal_accepts(value, expected) -> None:
    assert parse_decimal(value) == expected


@pytest.mark.parametrize("value", ["", "   ", "abc", "1.2.3", "NaN", "Infinity", None, True, [1]])
def test_parse_decimal_rejects(value) -> None:
    with pytest.raises(ParseError):
        parse_decimal(value, "sz")


def test_parse_error_is_validation_error() -> None:
    with pytest.raises(ValidationError, match="px"):
        parse_decimal("x", "px")


def test_parse_side() -> None:
    assert parse_side("B") is Side.BUY
    assert parse_side("A") is Side.SELL
    assert parse_side("buy") is Side.BUY
    assert parse_side(Side.SELL) is Side.SELL
    with pytest.raises(ValidationError, match="unknown side"):
        parse_side("S")


def test_parse_timestamp() -> None:
    assert parse_timestamp(1_700_000_000_123) == 1_700_000_000_123
    assert parse_timestamp("1000") == 1000
    with pytest.raises(ValidationError):
        parse_timestamp("10.5")
    with pytest.raises(ValidationError):
        parse_timestamp("soon")
    with pytest.raises(ValidationError):
        parse_timestamp(True)


def test_parse_price_level_shapes() -> None:
    assert parse_price_level({"px": "1.5", "sz": "2", "n": 3}).price == Decimal("1.5")
    level = parse_price_level({"price": "2.5", "size": "4"})
    assert level.size == Decimal("4")
    with pytest.raises(ValidationError, match="missing field"):
        parse_price_level({"px": "1"})


def test_parse_book_snapshot(l2book_payload: dict) -> None:
    snap = parse_book_snapshot(l2book_payload)
    assert snap.instrument == "AVAX"
    assert snap.timestamp == 1_700_000_000_000
    assert [lvl.price for lvl in snap.bid_levels] == [Decimal("29.400"), Decimal("29.399"), Decimal("29.398")]
    assert snap.ask_levels[0].size == Decimal("100.00")


def test_parse_book_snapshot_bad_levels(l2book_payload: dict) -> None:
    l2book_payload["levels"] = [[]]
    with pytest.raises(ValidationError, match="pair"):
        parse_book_snapshot(l2book_payload)


@pytest.mark.parametrize(
    "levels",
    [[5, 6], ["bids", "asks"], [None, []], [[], {"px": "1", "sz": "1"}]],
)
def test_parse_book_snapshot_side_not_a_list(l2book_payload: dict, levels: list) -> None:
    l2book_payload["levels"] = levels
    with pytest.raises(ValidationError, match="each side must be a list"):
        parse_book_snapshot(l2book_payload)


def test_parse_book_snapshot_level_not_an_object(l2book_payload: dict) -> None:
    l2book_payload["levels"] = [[7], []]
    with pytest.raises(ValidationError, match="expected an object"):
        parse_book_snapshot(l2book_payload)


def test_parse_book_snapshot_malformed_number(l2book_payload: dict) -> None:
    l2book_payload["levels"][1][0]["px"] = "29,5"
    with pytest.raises(ParseError):
        parse_book_snapshot(l2book_payload)


def test_parse_fill_full() -> None:
    fill = parse_fill(raw_fill("A", "0.75", 1234, "-3.2", tid=99))
    assert fill.instrument == "AVAX"
    assert fill.side is Side.SELL
    assert fill.size == Decimal("0.75")
    assert fill.closed_pnl == Decimal("-3.2")
    assert fill.fee == Decimal("0.01")
    assert fill.start_position == Decimal("0.0")
    assert fill.order_id == 2234
    assert fill.trade_id == 99
    assert fill.dir == "Close Long"


def test_parse_fill_missing_closed_pnl_is_zero() -> None:
    raw = raw_fill("B", "1", 0)
    del raw["closedPnl"]
    assert parse_fill(raw).closed_pnl == Decimal("0")


@pytest.mark.parametrize("sz", ["0", "0.0", "-2"])
def test_parse_fill_rejects_non_positive_size(sz: str) -> None:
    with pytest.raises(ValidationError, match="size must be positive"):
        parse_fill(raw_fill("B", sz, 0))


def test_parse_fill_rejects_unknown_side() -> None:
    with pytest.raises(ValidationError):
        parse_fill(raw_fill("X", "1", 0))


def test_parse_fill_missing_field() -> None:
    raw = raw_fill("B", "1", 0)
    del raw["coin"]
    with pytest.raises(ValidationError, match="coin"):
        parse_fill(raw)


def test_parse_open_positions() -> None:
    state = {
        "assetPositions": [
            {"type": "oneWay", "position": {"coin": "ETH", "szi": "-2.0", "entryPx": "2000.5", "unrealizedPnl": "-1.25"}},
            {"type": "oneWay", "position": {"coin": "SOL", "szi": "0.0", "entryPx": None, "unrealizedPnl": "0.0"}},
            {"type": "oneWay", "position": {"coin": "BTC", "szi": "0.01"}},
        ]
    }
    eth, btc = parse_open_positions(state)
    assert eth.instrument == "ETH"
    assert eth.size == Decimal("-2.0")
    assert eth.direction is Direction.SHORT
    assert eth.entry_price == Decimal("2000.5")
    assert eth.unrealized_pnl == Decimal("-1.25")
    assert btc.direction is Direction.LONG
    assert btc.entry_price is None


def test_parse_open_positions_malformed() -> None:
    with pytest.raises(ValidationError, match="assetPositions"):
        parse_open_positions({})
    with pytest.raises(ValidationError, match="position"):
        parse_open_positions({"assetPositions": [{"coin": "ETH"}]})
