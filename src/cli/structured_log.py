"""
Structured JSON event logger.

Emits one JSON object per line to stderr. Events are designed to be
parsed by log aggregators (Grafana Loki, CloudWatch, ELK).
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any


def _default(obj: Any) -> Any:
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    return str(obj)


class StructuredEventLogger:
    """Emit structured JSON events to a stream (stderr by default)."""

    def __init__(
        self,
        coin: str,
        *,
        enabled: bool = True,
        stream: Any = None,
    ) -> None:
        self._coin = coin
        self._enabled = enabled
        self._stream = stream or sys.stderr

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "coin": self._coin,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record, default=_default) + "\n")
            self._stream.flush()
        return record

    def fills_fetched(self, user: str, count: int) -> dict:
        return self._emit("fills_fetched", user=user, fills=count)

    def trades_reconstructed(self, user: str, trades: int, total_pnl: Decimal) -> dict:
        return self._emit(
            "trades_reconstructed",
            user=user,
            trades=trades,
            total_pnl=str(total_pnl),
        )

    def trace(self, event_type: str, payload: dict) -> dict:
        """Adapter for book_core.trades.reconstruct(on_event=...)."""
        fields = dict(payload)
        trade = fields.pop("trade", None)
        if trade is not None:
            fields.update(
                direction=trade.direction.value,
                open_ts=trade.open_timestamp,
                close_ts=trade.close_timestamp,
                realized_pnl=str(trade.realized_pnl),
            )
        return self._emit(event_type, **fields)

    def book_snapshot(self, levels_bid: int, levels_ask: int, mid_price: Decimal | None) -> dict:
        return self._emit(
            "book_snapshot",
            bids=levels_bid,
            asks=levels_ask,
            mid=str(mid_price) if mid_price is not None else None,
        )

    def stream_state(self, state: str, attempt: int) -> dict:
        return self._emit("stream_state", state=state, attempt=attempt)

    def error(self, message: str, detail: str = "") -> dict:
        return self._emit("error", message=message, detail=detail)

    def shutdown(self, updates: int) -> dict:
        return self._emit("shutdown", updates=updates)
