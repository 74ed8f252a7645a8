"""
Pure view helpers for the dashboard: rows and columns ready for Streamlit.
No Streamlit import here so these stay testable.
"""

from typing import Any, Sequence

from portfolio_core.contracts import Candle, Quote, TradeRecord
from portfolio_core.ledger import Ledger

EDUCATIONAL_CONTENT = [
    {
        "title": "Reading a candlestick chart",
        "content": "A candle is built from the open, close, high and low. A filled up-candle means the close "
                   "was above the open; a down-candle means it closed below. The wicks mark the extremes "
                   "reached during the period.",
    },
    {
        "title": "What volume tells you",
        "content": "Volume measures how active the market is. Rising prices on rising volume usually mean a "
                   "strong trend; rising prices on shrinking volume can signal weak buying and a pullback.",
    },
    {
        "title": "Simple moving average (SMA)",
        "content": "An SMA joins the average price over a window. Price above its SMA reads as strength, "
                   "below as weakness. Common windows are 5 (week), 20 (month) and 60 (quarter) days.",
    },
]


def money(value: float) -> str:
    return f"${value:,.2f}"


def chart_columns(candles: Sequence[Candle]) -> dict[str, list[Any]]:
    """Column-oriented candle data for st.line_chart / st.bar_chart."""
    return {
        "time": [c.time for c in candles],
        "close": [c.close for c in candles],
        "volume": [c.volume for c in candles],
    }


def position_rows(ledger: Ledger, live_prices: dict[str, float] | None = None) -> list[dict[str, Any]]:
    """One row per position; cash shows no average cost."""
    prices = live_prices or {}
    rows = []
    for p in ledger.positions:
        is_cash = p.symbol == ledger.cash_symbol
        price = 1.0 if is_cash else prices.get(p.symbol, p.average_cost)
        rows.append({
            "Symbol": p.symbol,
            "Name": p.display_name,
            "Quantity": p.quantity,
            "Avg cost": None if is_cash else round(p.average_cost, 2),
            "Value": round(p.quantity * price, 2),
        })
    return rows


def trade_rows(trades: Sequence[TradeRecord], limit: int = 10) -> list[dict[str, Any]]:
    return [
        {
            "Date": t.timestamp.strftime("%Y-%m-%d"),
            "Side": t.action.value,
            "Symbol": t.symbol,
            "Quantity": t.quantity,
            "Price": t.price,
            "Total": round(t.total, 2),
        }
        for t in list(trades)[:limit]
    ]


def allocation_columns(ledger: Ledger) -> dict[str, list[Any]]:
    pairs = ledger.allocation()
    return {"symbol": [s for s, _ in pairs], "value": [round(v, 2) for _, v in pairs]}


def estimated_total(quote: Quote | None, quantity: float) -> float:
    return quote.price * quantity if quote else 0.0
