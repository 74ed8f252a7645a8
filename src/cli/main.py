"""
CLI entry point: papertrade quote | candles | trade | status | analyze | health.

Every command loads config from --config (default config.yaml). Trades
settle against the seed portfolio plus the replayed trade journal, so
consecutive invocations see each other's trades.
"""

import json
import logging
import sys
from typing import Callable

import click
from dotenv import load_dotenv

from config import load_config

load_dotenv()

logger = logging.getLogger("papertrade")


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _open_session(ctx: click.Context):
    from cli.structured_log import StructuredEventLogger
    from session import build_session

    cfg = load_config(ctx.obj["config_path"])
    events = StructuredEventLogger(
        enabled=cfg.alerting.structured_logs,
        webhook_url=cfg.alerting.webhook_url,
    )
    session = build_session(cfg, events=events, mock_mode=ctx.obj["mock_mode"])
    logger.debug(
        "Session opened: %s mode, %d positions, %d trades",
        "mock" if session.mock_mode else "real", len(session.ledger.positions), len(session.ledger.trades),
    )
    return session


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.option("--mock/--real", "mock_mode", default=None, help="Override the configured data mode.")
@click.pass_context
def cli(ctx: click.Context, config_path: str, mock_mode: bool | None) -> None:
    """papertrade: paper-trading against a virtual portfolio with live or mock quotes."""
    _setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["mock_mode"] = mock_mode


# ---------- papertrade quote ----------


@cli.command()
@click.argument("symbol")
@click.pass_context
def quote(ctx: click.Context, symbol: str) -> None:
    """Show the current quote for SYMBOL."""
    from cli.output import format_quote

    with _open_session(ctx) as session:
        sym = symbol.upper()
        click.echo(format_quote(sym, session.quote(sym), mock_mode=session.mock_mode))


# ---------- papertrade candles ----------


@cli.command()
@click.argument("symbol")
@click.option("--range", "range_str", type=click.Choice(["1D", "1M", "1Y"], case_sensitive=False), default=None,
              help="History window. Defaults to config value.")
@click.option("--last", "last_n", default=None, type=int, help="Only show the last N candles.")
@click.pass_context
def candles(ctx: click.Context, symbol: str, range_str: str | None, last_n: int | None) -> None:
    """Show historical candles for SYMBOL."""
    from cli.output import format_candles
    from portfolio_core import TimeRange

    with _open_session(ctx) as session:
        time_range = TimeRange(range_str.upper()) if range_str else session.config.range
        sym = symbol.upper()
        click.echo(format_candles(sym, session.candles(sym, time_range), last=last_n))


# ---------- papertrade trade ----------


@cli.command()
@click.argument("symbol")
@click.argument("action", type=click.Choice(["buy", "sell"], case_sensitive=False))
@click.argument("quantity", type=float)
@click.option("--price", default=None, type=float, help="Settle at this price instead of fetching a quote.")
@click.pass_context
def trade(ctx: click.Context, symbol: str, action: str, quantity: float, price: float | None) -> None:
    """Buy or sell QUANTITY of SYMBOL at the current quote."""
    from cli.output import format_trade_result
    from portfolio_core import Quote, TradeRejected

    with _open_session(ctx) as session:
        sym = symbol.upper()
        captured = Quote.at_price(price) if price is not None else session.quote(sym)
        try:
            record = session.execute_trade(sym, action, quantity, quote=captured)
        except TradeRejected as exc:
            click.echo(f"Order rejected ({exc.code}): {exc}")
            raise SystemExit(1)
        click.echo(format_trade_result(record, session.ledger))


# ---------- papertrade status ----------


@cli.command()
@click.option("--trades", "n_trades", default=5, help="Number of recent trades to show.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the full ledger as JSON.")
@click.pass_context
def status(ctx: click.Context, n_trades: int, as_json: bool) -> None:
    """Show positions, cash, and recent trades."""
    from cli.output import format_positions, format_trades

    with _open_session(ctx) as session:
        if as_json:
            click.echo(json.dumps(session.ledger.snapshot(), indent=2))
            return
        click.echo(format_positions(session.ledger))
        click.echo("")
        click.echo(format_trades(session.ledger.trades, limit=n_trades))


# ---------- papertrade analyze ----------


@cli.command()
@click.argument("symbol")
@click.pass_context
def analyze(ctx: click.Context, symbol: str) -> None:
    """Generate an AI narrative for SYMBOL at its current quote."""
    from cli.output import format_quote

    with _open_session(ctx) as session:
        sym = symbol.upper()
        q = session.quote(sym)
        click.echo(format_quote(sym, q, mock_mode=session.mock_mode))
        click.echo("")
        click.echo(session.analyze(sym, q))


# ---------- papertrade health ----------


HealthCheck = tuple[str, bool, str]


def _check(name: str, run: Callable[[], str]) -> HealthCheck:
    try:
        return name, True, run()
    except Exception as e:
        return name, False, str(e)


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check system health: config, seed portfolio, journal, provider keys.

    Exit code 0 = healthy, 1 = unhealthy. Missing provider keys only mean
    mock data and are reported, not failed.
    """
    from config.portfolio import load_portfolio
    from journal import read_trades

    try:
        cfg = load_config(ctx.obj["config_path"])
    except Exception as e:
        _report_health([("config", False, str(e))])
        raise SystemExit(1)

    def describe_portfolio() -> str:
        seed = load_portfolio(cfg.portfolio_path or None)
        seed.to_ledger(cfg.cash_symbol, cfg.cash_policy)
        return f"validated ({len(seed.positions)} positions, {len(seed.trades)} trades)"

    def describe_journal() -> str:
        if not cfg.journal.enabled:
            return "disabled (trades are not persisted)"
        return f"{len(read_trades(cfg.journal.path))} trades in {cfg.journal.path}"

    checks = [
        ("config", True, _describe_config(cfg)),
        _check("portfolio", describe_portfolio),
        _check("journal", describe_journal),
        ("market_data", True, "alpaca keys configured" if cfg.real_data_available else "mock only (no alpaca keys)"),
        ("analysis", True, "gemini key configured" if cfg.real_analysis_available else "mock only (no gemini key)"),
    ]
    raise SystemExit(0 if _report_health(checks) else 1)


def _describe_config(cfg) -> str:
    return f"loaded (mode={cfg.mode}, cash={cfg.cash_symbol}, policy={cfg.cash_policy.value})"


def _report_health(checks: list[HealthCheck]) -> bool:
    """Print one line per check plus a verdict; return True when all passed."""
    for name, ok, detail in checks:
        click.echo(f"  [{'OK' if ok else 'FAIL'}] {name}: {detail}")
    healthy = all(ok for _, ok, _ in checks)
    click.echo(f"\nHealth: {'HEALTHY' if healthy else 'UNHEALTHY'}")
    return healthy


if __name__ == "__main__":
    cli()
