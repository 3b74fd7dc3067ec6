"""
HyperLiquid info API client: implements MarketDataSource over HTTP.

Every request is a POST of {"type": ...} to the info endpoint. Responses are
validated against data.schemas before being parsed into book_core contracts.
Transport failures raise ExchangeError; there are no retries here, fallback
policy belongs to the caller.
"""

import logging
from typing import Any

import requests

from book_core.contracts import BookSnapshot, Fill
from book_core.parsing import parse_book_snapshot, parse_fills
from config.loader import DEFAULT_INFO_URL
from data.fetcher import Asset
from data.schemas import (
    L2_BOOK_SCHEMA,
    META_SCHEMA,
    USER_FILLS_SCHEMA,
    USER_STATE_SCHEMA,
    validate_payload,
)

logger = logging.getLogger(__name__)


class ExchangeError(RuntimeError):
    """HTTP or transport failure talking to the exchange."""

    def __init__(self, request_type: str, message: str, status: int | None = None) -> None:
        super().__init__(f"{request_type}: {message}")
        self.request_type = request_type
        self.status = status


class HyperLiquidClient:
    """
    Fetch market metadata, L2 books, user fills and user state.

    Uses a single requests.Session. info_url and timeout typically come from
    AppConfig.api.
    """

    def __init__(
        self,
        info_url: str = DEFAULT_INFO_URL,
        *,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.info_url = info_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

    def _post(self, payload: dict[str, Any]) -> Any:
        request_type = payload["type"]
        logger.debug("POST %s %s", self.info_url, payload)
        try:
            response = self.session.post(self.info_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error("Error fetching %s: HTTP %s", request_type, status)
            raise ExchangeError(request_type, str(e), status=status) from e
        except requests.exceptions.RequestException as e:
            logger.error("Error fetching %s: %s", request_type, e)
            raise ExchangeError(request_type, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise ExchangeError(request_type, "response is not JSON", status=response.status_code) from e

    def get_assets(self) -> list[Asset]:
        data = self._post({"type": "meta"})
        validate_payload(data, META_SCHEMA, "meta")
        assets = [
            Asset(
                name=item["name"],
                sz_decimals=item["szDecimals"],
                max_leverage=item.get("maxLeverage"),
                only_isolated=bool(item.get("onlyIsolated", False)),
            )
            for item in data["universe"]
        ]
        logger.info("Fetched %d assets", len(assets))
        return assets

    def get_order_book(self, coin: str) -> BookSnapshot:
        data = self._post({"type": "l2Book", "coin": coin})
        validate_payload(data, L2_BOOK_SCHEMA, "l2Book")
        snapshot = parse_book_snapshot(data)
        logger.debug(
            "Order book for %s: %d bids, %d asks",
            coin,
            len(snapshot.bid_levels),
            len(snapshot.ask_levels),
        )
        return snapshot

    def get_user_fills(self, user: str) -> list[Fill]:
        data = self._post({"type": "userFills", "user": user})
        if data is None:
            data = []
        validate_payload(data, USER_FILLS_SCHEMA, "userFills")
        fills = parse_fills(data)
        logger.info("Fetched %d fills for %s", len(fills), user)
        return fills

    def get_user_state(self, user: str) -> dict[str, Any]:
        data = self._post({"type": "clearinghouseState", "user": user})
        validate_payload(data, USER_STATE_SCHEMA, "clearinghouseState")
        return data
