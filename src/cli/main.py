"""
CLI entry point: hyperbook assets | book | watch | trades | health.

Every command loads config from --config (default config.yaml) and prints
human-readable output. Structured JSON events go to stderr when enabled.
"""

import asyncio
import logging
import sys

import click
from dotenv import load_dotenv

from book_core.errors import ValidationError
from config import AppConfig, load_config
from data.fetcher import MarketDataSource

load_dotenv()

logger = logging.getLogger("hyperbook")


def _setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _make_client(cfg: AppConfig) -> MarketDataSource:
    from data import get_hyperliquid_client

    return get_hyperliquid_client(cfg.api.info_url, timeout=cfg.api.timeout_s)


def _load(ctx: click.Context) -> AppConfig:
    try:
        cfg = load_config(ctx.obj["config_path"])
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    _setup_logging(cfg.logging.level)
    return cfg


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """hyperbook: HyperLiquid order book viewer and completed-trade reconstructor."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------- hyperbook assets ----------


@cli.command()
@click.option("--limit", default=10, help="Number of assets to list.")
@click.pass_context
def assets(ctx: click.Context, limit: int) -> None:
    """List tradable assets from the exchange universe."""
    from data.hyperliquid import ExchangeError

    cfg = _load(ctx)
    client = _make_client(cfg)
    try:
        universe = client.get_assets()
    except (ExchangeError, ValidationError) as e:
        raise click.ClickException(f"Failed to fetch assets: {e}")
    for asset in universe[:limit]:
        click.echo(f"  {asset.name:<10} size decimals {asset.sz_decimals}")


# ---------- hyperbook book ----------


@cli.command()
@click.argument("coin", required=False)
@click.option("--precision", default=None, help="Price step for display (e.g. 0.001, 0.01, 0.1, 1).")
@click.option("--depth", default=None, type=int, help="Levels per side to show.")
@click.pass_context
def book(ctx: click.Context, coin: str | None, precision: str | None, depth: int | None) -> None:
    """Fetch one L2 snapshot and show cumulative depth and the mid price."""
    from book_core.orderbook import materialize
    from cli.output import format_book
    from cli.structured_log import StructuredEventLogger
    from data.hyperliquid import ExchangeError

    cfg = _load(ctx)
    coin = coin or cfg.book.coin
    events = StructuredEventLogger(coin, enabled=cfg.logging.structured_logs)
    client = _make_client(cfg)
    try:
        snapshot = client.get_order_book(coin)
        view = materialize(snapshot, precision or cfg.book.precision)
    except (ExchangeError, ValidationError) as e:
        events.error(message="order book unavailable", detail=str(e))
        raise click.ClickException(f"Failed to load order book for {coin}: {e}")

    events.book_snapshot(len(view.bids), len(view.asks), view.mid_price)
    click.echo(format_book(view, depth or cfg.book.depth))


# ---------- hyperbook watch ----------


@cli.command()
@click.argument("coin", required=False)
@click.option("--precision", default=None, help="Price step for display.")
@click.option("--depth", default=None, type=int, help="Levels per side to show.")
@click.option("--updates", default=None, type=int, help="Stop after N book updates (default: run until interrupted).")
@click.pass_context
def watch(ctx: click.Context, coin: str | None, precision: str | None, depth: int | None, updates: int | None) -> None:
    """Stream live L2 updates over the websocket and redraw the book."""
    from book_core.orderbook import validate_precision
    from cli.output import format_book
    from cli.structured_log import StructuredEventLogger
    from data.stream import BookStream

    cfg = _load(ctx)
    coin = coin or cfg.book.coin
    events = StructuredEventLogger(coin, enabled=cfg.logging.structured_logs)
    try:
        step = validate_precision(precision or cfg.book.precision)
    except ValidationError as e:
        events.error(message="invalid precision", detail=str(e))
        raise click.ClickException(f"Invalid precision for {coin}: {e}")
    seen = 0

    def on_book(view) -> None:
        nonlocal seen
        seen += 1
        click.echo(format_book(view, depth or cfg.book.depth))
        click.echo("")
        if updates is not None and seen >= updates:
            stream.request_stop()

    stream = BookStream(
        coin,
        on_book,
        ws_url=cfg.api.ws_url,
        precision=step,
        max_reconnect_attempts=cfg.stream.max_reconnect_attempts,
        reconnect_base_delay_s=cfg.stream.reconnect_base_delay_s,
        ping_interval_s=cfg.stream.ping_interval_s,
        on_state=lambda state, attempt: events.stream_state(state.value, attempt),
    )
    try:
        asyncio.run(stream.run())
    except KeyboardInterrupt:
        click.echo("Interrupted.")
    events.shutdown(updates=seen)


# ---------- hyperbook trades ----------


@cli.command()
@click.argument("address", required=False)
@click.option("--summary/--no-summary", default=True, help="Print win/loss summary after the table.")
@click.option("--open/--no-open", "show_open", default=True, help="List positions that are still open.")
@click.pass_context
def trades(ctx: click.Context, address: str | None, summary: bool, show_open: bool) -> None:
    """Reconstruct completed (opened then closed) trades for an account."""
    from book_core.parsing import parse_open_positions
    from book_core.trades import reconstruct, summarize
    from cli.output import format_open_positions, format_summary, format_trades
    from cli.structured_log import StructuredEventLogger
    from data.hyperliquid import ExchangeError

    cfg = _load(ctx)
    address = (address or cfg.user_address).strip()
    if not address:
        raise click.UsageError("Provide an ADDRESS or set HYPERBOOK_USER_ADDRESS.")

    events = StructuredEventLogger("*", enabled=cfg.logging.structured_logs)
    client = _make_client(cfg)
    try:
        fills = client.get_user_fills(address)
        events.fills_fetched(address, len(fills))
        completed = reconstruct(fills, on_event=events.trace)
        positions = parse_open_positions(client.get_user_state(address)) if show_open else []
    except (ExchangeError, ValidationError) as e:
        events.error(message="trade reconstruction failed", detail=str(e))
        raise click.ClickException(f"Failed to reconstruct trades for {address}: {e}")

    stats = summarize(completed)
    events.trades_reconstructed(address, stats.count, stats.total_pnl)
    click.echo(format_trades(completed))
    if summary and completed:
        click.echo("")
        click.echo(format_summary(stats))
    if positions:
        click.echo("")
        click.echo(format_open_positions(positions))


# ---------- hyperbook health ----------


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check config and info endpoint reachability. Exit code 0 = healthy."""
    checks: list[tuple[str, bool, str]] = []

    try:
        cfg = load_config(ctx.obj["config_path"])
        checks.append(("config", True, f"loaded (coin={cfg.book.coin})"))
    except Exception as e:
        checks.append(("config", False, str(e)))
        _print_health(checks)
        raise SystemExit(1)

    try:
        universe = _make_client(cfg).get_assets()
        checks.append(("info_api", True, f"{len(universe)} assets at {cfg.api.info_url}"))
    except Exception as e:
        checks.append(("info_api", False, str(e)))

    _print_health(checks)
    healthy = all(ok for _, ok, _ in checks)
    raise SystemExit(0 if healthy else 1)


def _print_health(checks: list[tuple[str, bool, str]]) -> None:
    for name, ok, detail in checks:
        status = "OK" if ok else "FAIL"
        click.echo(f"  [{status}] {name}: {detail}")
    healthy = all(ok for _, ok, _ in checks)
    click.echo(f"\nHealth: {'HEALTHY' if healthy else 'UNHEALTHY'}")


if __name__ == "__main__":
    cli()
