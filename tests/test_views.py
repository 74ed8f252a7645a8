"""Tests for dashboard view helpers (no Streamlit needed)."""

from datetime import datetime, timezone

import pytest

from portfolio_core import Candle, Ledger, Quote
from views import (
    EDUCATIONAL_CONTENT,
    allocation_columns,
    chart_columns,
    estimated_total,
    money,
    position_rows,
    trade_rows,
)


def test_money() -> None:
    assert money(42000) == "$42,000.00"
    assert money(-1.5) == "$-1.50"


def test_chart_columns() -> None:
    t = datetime(2026, 10, 1, tzinfo=timezone.utc)
    cols = chart_columns([Candle(t, 1, 2, 0.5, 1.5, 100)])
    assert cols == {"time": [t], "close": [1.5], "volume": [100]}


def test_position_rows_prefer_live_price(ledger: Ledger) -> None:
    rows = {r["Symbol"]: r for r in position_rows(ledger, {"AAPL": 160.0})}
    assert rows["AAPL"]["Value"] == 24_000.0
    assert rows["AAPL"]["Name"] == "Apple Inc."
    assert rows["USD"]["Avg cost"] is None
    assert rows["USD"]["Value"] == 50_000.0


def test_trade_rows_limit(ledger: Ledger) -> None:
    for _ in range(12):
        ledger.apply_trade("AAPL", "BUY", 1, 100.0)
    rows = trade_rows(ledger.trades)
    assert len(rows) == 10
    assert rows[0]["Side"] == "BUY"
    assert rows[0]["Total"] == 100.0


def test_allocation_columns(ledger: Ledger) -> None:
    cols = allocation_columns(ledger)
    assert cols["symbol"] == ["USD", "AAPL"]
    assert cols["value"][1] == pytest.approx(21_780.0)


def test_estimated_total() -> None:
    assert estimated_total(Quote.at_price(160.0), 50) == 8_000.0
    assert estimated_total(None, 50) == 0.0


def test_educational_content() -> None:
    assert len(EDUCATIONAL_CONTENT) == 3
    assert all(item["title"] and item["content"] for item in EDUCATIONAL_CONTENT)
