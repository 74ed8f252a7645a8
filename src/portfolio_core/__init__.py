"""
portfolio-core: positions, trade records, and the ledger that settles trades.

Pure in-memory logic. Providers, persistence and UI live outside this package.
"""

from portfolio_core.contracts import (
    AssetKind,
    Candle,
    Position,
    Quote,
    TimeRange,
    TradeAction,
    TradeRecord,
)
from portfolio_core.ledger import (
    DEFAULT_CASH_SYMBOL,
    CashPolicy,
    InsufficientCash,
    InsufficientHoldings,
    InvalidPrice,
    InvalidQuantity,
    InvalidSymbol,
    Ledger,
    TradeRejected,
    apply_trade,
)

__all__ = [
    "AssetKind",
    "Candle",
    "CashPolicy",
    "DEFAULT_CASH_SYMBOL",
    "InsufficientCash",
    "InsufficientHoldings",
    "InvalidPrice",
    "InvalidQuantity",
    "InvalidSymbol",
    "Ledger",
    "Position",
    "Quote",
    "TimeRange",
    "TradeAction",
    "TradeRecord",
    "TradeRejected",
    "apply_trade",
]
