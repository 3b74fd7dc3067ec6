"""
Parse exchange-shaped values into book_core contracts.

Prices, sizes and PnL arrive as decimal strings ("29.401"). They are parsed
to Decimal before any arithmetic; anything that is not a finite number is a
ParseError. Semantic problems (non-positive fill size, unknown side code)
are ValidationError.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from book_core.contracts import ZERO, BookSnapshot, Fill, OpenPosition, PriceLevel, Side
from book_core.errors import ParseError, ValidationError

_SIDE_CODES = {
    "B": Side.BUY,
    "A": Side.SELL,
    "BUY": Side.BUY,
    "SELL": Side.SELL,
}


def parse_decimal(value: Any, field: str = "value") -> Decimal:
    """Parse a decimal string (or number) into a finite Decimal."""
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or value is None:
        raise ParseError(f"{field}: expected a number, got {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # repr keeps the shortest round-tripping text (0.1 -> "0.1")
        result = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ParseError(f"{field}: empty numeric string")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ParseError(f"{field}: not a number: {value!r}") from None
    else:
        raise ParseError(f"{field}: expected a number, got {type(value).__name__}")

    if not result.is_finite():
        raise ParseError(f"{field}: not a finite number: {value!r}")
    return result


def parse_side(code: Any) -> Side:
    if isinstance(code, Side):
        return code
    if isinstance(code, str) and code.strip().upper() in _SIDE_CODES:
        return _SIDE_CODES[code.strip().upper()]
    raise ValidationError(f"side: unknown side code {code!r}")


def parse_timestamp(value: Any, field: str = "time") -> int:
    """Millisecond timestamp; must be integral."""
    if isinstance(value, bool):
        raise ValidationError(f"{field}: expected integer milliseconds, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        number = parse_decimal(value, field)
    except ParseError as exc:
        raise ValidationError(str(exc)) from None
    if number != number.to_integral_value():
        raise ValidationError(f"{field}: expected integer milliseconds, got {value!r}")
    return int(number)


def _require(raw: Mapping[str, Any], key: str, what: str) -> Any:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"{what}: expected an object, got {type(raw).__name__}")
    if key not in raw:
        raise ValidationError(f"{what}: missing field {key!r}")
    return raw[key]


def parse_price_level(raw: Mapping[str, Any]) -> PriceLevel:
    """Accepts the exchange shape {px, sz} or {price, size}."""
    if isinstance(raw, Mapping) and "px" in raw:
        price, size = raw["px"], _require(raw, "sz", "level")
    else:
        price, size = _require(raw, "price", "level"), _require(raw, "size", "level")
    return PriceLevel(price=parse_decimal(price, "px"), size=parse_decimal(size, "sz"))


def parse_levels(raw_levels: Sequence[Mapping[str, Any]]) -> tuple[PriceLevel, ...]:
    if not isinstance(raw_levels, Sequence) or isinstance(raw_levels, (str, bytes)):
        raise ValidationError(
            f"levels: each side must be a list of levels, got {type(raw_levels).__name__}"
        )
    return tuple(parse_price_level(level) for level in raw_levels)


def parse_book_snapshot(raw: Mapping[str, Any]) -> BookSnapshot:
    """Parse an l2Book payload: {coin, levels: [bids, asks], time}."""
    coin = _require(raw, "coin", "l2Book")
    levels = _require(raw, "levels", "l2Book")
    if not isinstance(levels, Sequence) or isinstance(levels, str) or len(levels) != 2:
        raise ValidationError("l2Book: levels must be a [bids, asks] pair")
    bids, asks = levels
    return BookSnapshot(
        instrument=str(coin),
        bid_levels=parse_levels(bids),
        ask_levels=parse_levels(asks),
        timestamp=parse_timestamp(raw.get("time", 0)),
    )


def parse_fill(raw: Mapping[str, Any]) -> Fill:
    """Parse one userFills entry. Missing closedPnl counts as zero."""
    size = parse_decimal(_require(raw, "sz", "fill"), "sz")
    if size <= 0:
        raise ValidationError(f"fill: size must be positive, got {size}")

    closed_pnl = raw.get("closedPnl")
    fee = raw.get("fee")
    start_position = raw.get("startPosition")
    trade_id = raw.get("tid")
    return Fill(
        instrument=str(_require(raw, "coin", "fill")),
        price=parse_decimal(_require(raw, "px", "fill"), "px"),
        size=size,
        side=parse_side(_require(raw, "side", "fill")),
        timestamp=parse_timestamp(_require(raw, "time", "fill")),
        closed_pnl=parse_decimal(closed_pnl, "closedPnl") if closed_pnl not in (None, "") else ZERO,
        order_id=raw.get("oid"),
        trade_id=parse_timestamp(trade_id, "tid") if trade_id is not None else None,
        fee=parse_decimal(fee, "fee") if fee not in (None, "") else ZERO,
        start_position=(
            parse_decimal(start_position, "startPosition")
            if start_position not in (None, "")
            else None
        ),
        dir=raw.get("dir"),
    )


def parse_fills(raw_fills: Sequence[Mapping[str, Any]]) -> list[Fill]:
    return [parse_fill(raw) for raw in raw_fills]


def parse_open_positions(state: Mapping[str, Any]) -> list[OpenPosition]:
    """Open positions from a clearinghouseState payload. Zero-size entries are skipped."""
    raw_positions = _require(state, "assetPositions", "clearinghouseState")
    if not isinstance(raw_positions, Sequence) or isinstance(raw_positions, str):
        raise ValidationError("clearinghouseState: assetPositions must be a list")
    positions = []
    for entry in raw_positions:
        raw = _require(entry, "position", "assetPosition")
        size = parse_decimal(_require(raw, "szi", "position"), "szi")
        if size == 0:
            continue
        entry_px = raw.get("entryPx")
        unrealized = raw.get("unrealizedPnl")
        positions.append(
            OpenPosition(
                instrument=str(_require(raw, "coin", "position")),
                size=size,
                entry_price=parse_decimal(entry_px, "entryPx") if entry_px not in (None, "") else None,
                unrealized_pnl=(
                    parse_decimal(unrealized, "unrealizedPnl") if unrealized not in (None, "") else ZERO
                ),
            )
        )
    return positions
