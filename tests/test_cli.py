"""Tests for CLI commands using click CliRunner. No network; uses a static data source."""

from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from book_core.contracts import BookSnapshot, PriceLevel
from cli.main import cli
from data.fetcher import Asset, StaticMarketData
from data.hyperliquid import ExchangeError
from conftest import make_fill


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
api:
  info_url: https://api.test/info
book:
  coin: AVAX
  precision: "0.01"
  depth: 5
logging:
  level: WARNING
  structured_logs: false
"""
    )
    return config_path


@pytest.fixture
def source() -> StaticMarketData:
    book = BookSnapshot(
        "AVAX",
        (PriceLevel(Decimal("29.40"), Decimal("100")), PriceLevel(Decimal("29.39"), Decimal("150"))),
        (PriceLevel(Decimal("29.50"), Decimal("100")),),
        1_700_000_000_000,
    )
    fills = [
        make_fill("B", 1, 1_700_000_000_000, coin="BTC"),
        make_fill("A", 1, 1_700_003_600_000, "5.0", coin="BTC"),
        make_fill("A", 2, 1_700_010_000_000, coin="ETH"),
    ]
    return StaticMarketData(
        assets=[Asset("AVAX", 2), Asset("BTC", 5)],
        books={"AVAX": book},
        fills={"0xabc": fills},
        states={
            "0xabc": {
                "assetPositions": [
                    {"position": {"coin": "ETH", "szi": "-2.0", "entryPx": "2000.5", "unrealizedPnl": "-1.25"}}
                ]
            }
        },
    )


def _invoke(tmp_config: Path, source, *args: str):
    runner = CliRunner()
    with patch("cli.main._make_client", return_value=source):
        return runner.invoke(cli, ["--config", str(tmp_config), *args])


def test_cli_book(tmp_config: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_config, source, "book")
    assert result.exit_code == 0, result.output
    assert "Order Book: AVAX" in result.output
    assert "mid 29.45" in result.output
    assert "250.00" in result.output


def test_cli_book_precision_override(tmp_config: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_config, source, "book", "AVAX", "--precision", "0.001")
    assert result.exit_code == 0, result.output
    assert "mid 29.450" in result.output


def test_cli_book_exchange_error(tmp_config: Path) -> None:
    class Failing(StaticMarketData):
        def get_order_book(self, coin: str) -> BookSnapshot:
            raise ExchangeError("l2Book", "connection refused")

    result = _invoke(tmp_config, Failing(), "book")
    assert result.exit_code == 1
    assert "Failed to load order book for AVAX" in result.output


def test_cli_trades(tmp_config: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_config, source, "trades", "0xabc")
    assert result.exit_code == 0, result.output
    assert "BTC" in result.output
    assert "LONG" in result.output
    assert "1h 0m" in result.output
    assert "$5.00" in result.output
    assert "Completed trades: 1" in result.output
    assert "Open positions: 1" in result.output
    assert "SHORT" in result.output
    assert "$-1.25" in result.output


def test_cli_trades_no_open(tmp_config: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_config, source, "trades", "0xabc", "--no-open")
    assert result.exit_code == 0, result.output
    assert "Open positions" not in result.output
    assert "ETH" not in result.output


def test_cli_trades_bad_user_state(tmp_config: Path, source: StaticMarketData) -> None:
    source.states["0xabc"] = {"assetPositions": [{"position": {"coin": "ETH", "szi": "lots"}}]}
    result = _invoke(tmp_config, source, "trades", "0xabc")
    assert result.exit_code == 1
    assert "szi" in result.output


def test_cli_trades_none_found(tmp_config: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_config, source, "trades", "0xempty")
    assert result.exit_code == 0
    assert "No completed trades" in result.output


def test_cli_trades_requires_address(tmp_config: Path, source: StaticMarketData, monkeypatch) -> None:
    monkeypatch.delenv("HYPERBOOK_USER_ADDRESS", raising=False)
    result = _invoke(tmp_config, source, "trades")
    assert result.exit_code == 2
    assert "ADDRESS" in result.output


def test_cli_trades_address_from_env(tmp_config: Path, source: StaticMarketData, monkeypatch) -> None:
    monkeypatch.setenv("HYPERBOOK_USER_ADDRESS", "0xabc")
    result = _invoke(tmp_config, source, "trades", "--no-summary")
    assert result.exit_code == 0, result.output
    assert "BTC" in result.output
    assert "Completed trades" not in result.output


def test_cli_assets(tmp_config: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_config, source, "assets", "--limit", "1")
    assert result.exit_code == 0, result.output
    assert "AVAX" in result.output
    assert "BTC" not in result.output


def test_cli_health(tmp_config: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_config, source, "health")
    assert result.exit_code == 0
    assert "[OK] info_api: 2 assets" in result.output
    assert "HEALTHY" in result.output


def test_cli_health_missing_config(tmp_path: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_path / "missing.yaml", source, "health")
    assert result.exit_code == 1
    assert "[FAIL] config" in result.output


def test_cli_missing_config(tmp_path: Path, source: StaticMarketData) -> None:
    result = _invoke(tmp_path / "missing.yaml", source, "book")
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_cli_watch_stops_after_updates(tmp_config: Path, source: StaticMarketData) -> None:
    from book_core.orderbook import materialize

    captured: dict = {}

    class FakeStream:
        def __init__(self, coin, on_book, **kwargs) -> None:
            captured.update(kwargs, coin=coin)
            self._on_book = on_book
            self._stopped = False

        async def run(self) -> None:
            view = materialize(source.books["AVAX"], captured["precision"])
            for _ in range(5):
                if self._stopped:
                    break
                self._on_book(view)

        def request_stop(self) -> None:
            self._stopped = True

    runner = CliRunner()
    with patch("data.stream.BookStream", FakeStream):
        result = runner.invoke(cli, ["--config", str(tmp_config), "watch", "--updates", "2"])
    assert result.exit_code == 0, result.output
    assert result.output.count("Order Book: AVAX") == 2
    assert captured["coin"] == "AVAX"
    assert captured["precision"] == Decimal("0.01")
    assert captured["max_reconnect_attempts"] == 5


@pytest.mark.parametrize("precision", ["abc", "0", "0.000"])
def test_cli_watch_invalid_precision(tmp_config: Path, source: StaticMarketData, precision: str) -> None:
    constructed: list = []

    class FakeStream:
        def __init__(self, *args, **kwargs) -> None:
            constructed.append(kwargs)

    runner = CliRunner()
    with patch("data.stream.BookStream", FakeStream):
        result = runner.invoke(cli, ["--config", str(tmp_config), "watch", "--precision", precision])
    assert result.exit_code == 1
    assert "Invalid precision" in result.output
    assert "Traceback" not in result.output
    assert constructed == []
