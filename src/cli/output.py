"""
Human-readable output for the terminal.

Every CLI command uses these formatters; the dashboard shows the same numbers.
"""

from __future__ import annotations

from typing import Sequence

from portfolio_core.contracts import Candle, Quote, TradeRecord
from portfolio_core.ledger import Ledger


def _fmt_volume(vol: int | float) -> str:
    if vol >= 1_000_000:
        return f"{vol / 1_000_000:.2f}M"
    if vol >= 1_000:
        return f"{vol / 1_000:.0f}K"
    return str(int(vol))


def _fmt_qty(qty: float) -> str:
    return f"{qty:,.0f}" if float(qty).is_integer() else f"{qty:,.4f}"


def _signed(val: float) -> str:
    return f"+{val:.2f}" if val > 0 else f"{val:.2f}"


def format_quote(symbol: str, quote: Quote, *, mock_mode: bool = True) -> str:
    arrow = "▲" if quote.percent_change >= 0 else "▼"
    lines = [
        f"=== {symbol} ({'mock' if mock_mode else 'real'} data) ===",
        f"Price        : {quote.price:.2f}",
        f"Change       : {_signed(quote.change)}  {arrow} {abs(quote.percent_change):.2f}%",
        f"Open         : {quote.open:.2f}",
        f"High / Low   : {quote.high:.2f} / {quote.low:.2f}",
        f"Prev. close  : {quote.previous_close:.2f}",
    ]
    return "\n".join(lines)


def format_candles(symbol: str, candles: Sequence[Candle], *, last: int | None = None) -> str:
    if not candles:
        return f"No candles for {symbol}."
    shown = list(candles)[-last:] if last else list(candles)
    lines = [
        f"--- {symbol}: {len(shown)} of {len(candles)} candles ---",
        f"{'Time (UTC)':<17s} {'Open':>9s} {'High':>9s} {'Low':>9s} {'Close':>9s} {'Volume':>8s}",
    ]
    for c in shown:
        lines.append(
            f"{c.time.strftime('%Y-%m-%d %H:%M'):<17s} {c.open:>9.2f} {c.high:>9.2f} "
            f"{c.low:>9.2f} {c.close:>9.2f} {_fmt_volume(c.volume):>8s}"
        )
    return "\n".join(lines)


def format_positions(ledger: Ledger) -> str:
    lines = [
        "=== Account Status ===",
        f"Cash ({ledger.cash_symbol})   : ${ledger.cash_balance:,.2f}",
        f"Total value  : ${ledger.total_cost_value():,.2f}  (at average cost)",
    ]
    holdings = ledger.holdings
    if not holdings:
        lines.append("Positions    : none")
        return "\n".join(lines)
    lines.append("")
    lines.append(f"  {'Symbol':<8s} {'Quantity':>12s} {'Avg cost':>10s} {'Value':>14s}")
    for p in holdings:
        lines.append(
            f"  {p.symbol:<8s} {_fmt_qty(p.quantity):>12s} {p.average_cost:>10.2f} {p.cost_value:>14,.2f}"
        )
    return "\n".join(lines)


def format_trade_line(t: TradeRecord) -> str:
    return (
        f"  {t.timestamp.strftime('%Y-%m-%d %H:%M')}  {t.action.value:<4s} {_fmt_qty(t.quantity)} "
        f"{t.symbol} @ {t.price:.2f}  total {t.total:,.2f}"
    )


def format_trades(trades: Sequence[TradeRecord], limit: int = 10) -> str:
    if not trades:
        return "No trades yet."
    shown = list(trades)[:limit]
    lines = [f"Recent trades ({len(shown)}):"]
    lines.extend(format_trade_line(t) for t in shown)
    return "\n".join(lines)


def format_trade_result(record: TradeRecord, ledger: Ledger) -> str:
    pos = ledger.position(record.symbol)
    lines = [
        f"Trade executed: {record.action.value} {_fmt_qty(record.quantity)} {record.symbol} @ {record.price:.2f}",
        f"  Total        : {record.total:,.2f} {ledger.cash_symbol}",
    ]
    if pos:
        lines.append(f"  Position     : {_fmt_qty(pos.quantity)} @ {pos.average_cost:.2f}")
    else:
        lines.append("  Position     : closed")
    lines.append(f"  Cash         : ${ledger.cash_balance:,.2f}")
    return "\n".join(lines)
