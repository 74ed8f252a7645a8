"""
Trading session: explicit per-user context threaded into ledger and providers.
"""

from session.trading_session import MarketSnapshot, TradingSession, build_session

__all__ = ["MarketSnapshot", "TradingSession", "build_session"]
