"""
Live l2Book stream over the HyperLiquid websocket.

One BookStream owns one connection for one coin. Connection lifecycle is an
explicit state machine:

    DISCONNECTED -> CONNECTING -> SUBSCRIBED
                        ^              |
                        |        (closed / error)
                        |              v
                        +------ RECONNECTING(n)

Reconnect delay is n * base_delay seconds. After max_reconnect_attempts
consecutive failures the stream returns to DISCONNECTED and run() returns.
A successful subscription resets the attempt counter.

Each l2Book message is a full snapshot; it goes through a BookCache (last
write wins) and, when applied, the materialized view is handed to on_book.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

import websockets
from websockets.exceptions import WebSocketException

from book_core.contracts import BookView
from book_core.errors import ValidationError
from book_core.orderbook import DEFAULT_PRECISION, BookCache, materialize, validate_precision
from book_core.parsing import parse_book_snapshot
from config.loader import DEFAULT_WS_URL

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    SUBSCRIBED = "SUBSCRIBED"
    RECONNECTING = "RECONNECTING"


BookCallback = Callable[[BookView], None]
StateCallback = Callable[[StreamState, int], None]


class BookStream:
    """Subscribe to l2Book for one coin and push materialized views to a callback."""

    def __init__(
        self,
        coin: str,
        on_book: BookCallback,
        *,
        ws_url: str = DEFAULT_WS_URL,
        precision: Any = DEFAULT_PRECISION,
        max_reconnect_attempts: int = 5,
        reconnect_base_delay_s: float = 1.0,
        ping_interval_s: float | None = 20.0,
        on_state: StateCallback | None = None,
        connect: Callable[..., Any] = websockets.connect,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.coin = coin
        self.ws_url = ws_url
        self.precision = validate_precision(precision)
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_base_delay_s = reconnect_base_delay_s
        self.ping_interval_s = ping_interval_s
        self.cache = BookCache()
        self.state = StreamState.DISCONNECTED
        self.attempt = 0
        self._on_book = on_book
        self._on_state = on_state
        self._connect = connect
        self._sleep = sleep
        self._stopped = False
        self._ws: Any = None

    def _set_state(self, state: StreamState) -> None:
        self.state = state
        logger.info("Stream %s: %s (attempt %d)", self.coin, state.value, self.attempt)
        if self._on_state:
            self._on_state(state, self.attempt)

    def subscription_message(self) -> str:
        return json.dumps({"method": "subscribe", "subscription": {"type": "l2Book", "coin": self.coin}})

    def reconnect_delay(self, attempt: int) -> float:
        return self.reconnect_base_delay_s * attempt

    def handle_message(self, raw: str | bytes) -> BookView | None:
        """Apply one websocket message. Returns the view pushed to on_book, if any."""
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring non-JSON message on %s stream", self.coin)
            return None

        if not isinstance(message, dict) or message.get("channel") != "l2Book":
            return None
        data = message.get("data")
        if not isinstance(data, dict) or data.get("coin") != self.coin:
            logger.debug("Ignoring l2Book message for %s", data.get("coin") if isinstance(data, dict) else None)
            return None

        try:
            snapshot = parse_book_snapshot(data)
        except ValidationError as e:
            logger.warning("Skipping malformed l2Book message for %s: %s", self.coin, e)
            return None

        if not self.cache.apply(snapshot):
            logger.debug("Dropping stale snapshot for %s at %d", self.coin, snapshot.timestamp)
            return None
        view = materialize(snapshot, self.precision)
        self._on_book(view)
        return view

    async def run(self) -> None:
        """Connect, subscribe and pump messages until stopped or attempts run out."""
        self._stopped = False
        self.attempt = 0
        try:
            while not self._stopped:
                self._set_state(StreamState.CONNECTING)
                try:
                    async with self._connect(self.ws_url, ping_interval=self.ping_interval_s) as ws:
                        self._ws = ws
                        await ws.send(self.subscription_message())
                        self.attempt = 0
                        self._set_state(StreamState.SUBSCRIBED)
                        async for raw in ws:
                            self.handle_message(raw)
                            if self._stopped:
                                break
                except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                    logger.warning("Stream %s error: %s", self.coin, e)
                finally:
                    self._ws = None

                if self._stopped:
                    break
                if self.attempt >= self.max_reconnect_attempts:
                    logger.error("Max reconnection attempts reached for %s", self.coin)
                    break
                self.attempt += 1
                self._set_state(StreamState.RECONNECTING)
                await self._sleep(self.reconnect_delay(self.attempt))
        finally:
            self._set_state(StreamState.DISCONNECTED)

    def request_stop(self) -> None:
        """Stop after the current message; safe to call from on_book."""
        self._stopped = True

    async def stop(self) -> None:
        self.request_stop()
        if self._ws is not None:
            await self._ws.close()
