"""
Trade journal and trade-store collaborators. Persistence is best-effort.
"""

from journal.store import BackgroundTradeSaver, JournalTradeStore, NullTradeStore, TradeStore
from journal.writer import JournalWriter, read_trades

__all__ = [
    "BackgroundTradeSaver",
    "JournalTradeStore",
    "JournalWriter",
    "NullTradeStore",
    "TradeStore",
    "read_trades",
]
