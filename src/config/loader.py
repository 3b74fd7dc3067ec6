"""
Config loader: YAML file -> frozen dataclass tree.

The account address is resolved from the environment (HYPERBOOK_USER_ADDRESS)
and endpoint URLs may be overridden there (HYPERBOOK_INFO_URL,
HYPERBOOK_WS_URL). The config file holds only non-secret values.
"""

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

import yaml

from book_core.errors import ValidationError
from book_core.orderbook import validate_precision

DEFAULT_INFO_URL = "https://api.hyperliquid.xyz/info"
DEFAULT_WS_URL = "wss://api.hyperliquid.xyz/ws"


@dataclass(frozen=True)
class ApiConfig:
    info_url: str = DEFAULT_INFO_URL
    ws_url: str = DEFAULT_WS_URL
    timeout_s: float = 10.0


@dataclass(frozen=True)
class BookConfig:
    coin: str = "AVAX"
    precision: Decimal = Decimal("0.001")
    depth: int = 10


@dataclass(frozen=True)
class StreamConfig:
    max_reconnect_attempts: int = 5
    reconnect_base_delay_s: float = 1.0
    ping_interval_s: float = 20.0


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    structured_logs: bool = False


@dataclass(frozen=True)
class AppConfig:
    api: ApiConfig = ApiConfig()
    book: BookConfig = BookConfig()
    stream: StreamConfig = StreamConfig()
    logging: LoggingConfig = LoggingConfig()
    user_address: str = ""


def _precision(value: object) -> Decimal:
    try:
        return validate_precision(value)
    except ValidationError as e:
        raise ValueError(f"book.{e}") from e


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """
    Load configuration from a YAML file.

    Environment variables:
      - HYPERBOOK_USER_ADDRESS: default account for `trades`
      - HYPERBOOK_INFO_URL / HYPERBOOK_WS_URL: endpoint overrides
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    api_raw = raw.get("api", {})
    api_cfg = ApiConfig(
        info_url=os.environ.get("HYPERBOOK_INFO_URL") or api_raw.get("info_url", DEFAULT_INFO_URL),
        ws_url=os.environ.get("HYPERBOOK_WS_URL") or api_raw.get("ws_url", DEFAULT_WS_URL),
        timeout_s=float(api_raw.get("timeout_s", 10.0)),
    )

    book_raw = raw.get("book", {})
    book_cfg = BookConfig(
        coin=str(book_raw.get("coin", "AVAX")),
        precision=_precision(book_raw.get("precision", "0.001")),
        depth=int(book_raw.get("depth", 10)),
    )

    stream_raw = raw.get("stream", {})
    stream_cfg = StreamConfig(
        max_reconnect_attempts=int(stream_raw.get("max_reconnect_attempts", 5)),
        reconnect_base_delay_s=float(stream_raw.get("reconnect_base_delay_s", 1.0)),
        ping_interval_s=float(stream_raw.get("ping_interval_s", 20.0)),
    )

    log_raw = raw.get("logging", {})
    log_cfg = LoggingConfig(
        level=str(log_raw.get("level", "INFO")).upper(),
        structured_logs=bool(log_raw.get("structured_logs", False)),
    )

    return AppConfig(
        api=api_cfg,
        book=book_cfg,
        stream=stream_cfg,
        logging=log_cfg,
        user_address=os.environ.get("HYPERBOOK_USER_ADDRESS", ""),
    )
