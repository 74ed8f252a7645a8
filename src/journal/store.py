"""
Trade stores: where a settled TradeRecord goes after the ledger commits it.

Saving is fire-and-forget. The ledger is updated first; BackgroundTradeSaver
then hands the record to the store on a worker thread. A failed save is
logged and never rolled back, so the journal can lag or miss trades that the
in-memory ledger holds.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Protocol

from portfolio_core.contracts import TradeRecord

from journal.writer import JournalWriter

logger = logging.getLogger("papertrade.journal")


class TradeStore(Protocol):
    """Persistence collaborator: accept one settled trade."""

    def save(self, record: TradeRecord) -> None:
        ...


class NullTradeStore:
    """Discards trades. Default when no journal is configured."""

    def save(self, record: TradeRecord) -> None:
        logger.debug("Trade %s not persisted (null store)", record.id)


class JournalTradeStore:
    """Appends each trade to a JSON-lines journal."""

    def __init__(self, writer: JournalWriter) -> None:
        self._writer = writer

    @property
    def writer(self) -> JournalWriter:
        return self._writer

    def save(self, record: TradeRecord) -> None:
        self._writer.trade(record)


class BackgroundTradeSaver:
    """Single worker thread draining saves in submission order."""

    def __init__(self, store: TradeStore) -> None:
        self._store = store
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="trade-saver")
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._failures = 0

    @property
    def store(self) -> TradeStore:
        return self._store

    @property
    def failures(self) -> int:
        return self._failures

    def submit(self, record: TradeRecord) -> Future:
        """Queue *record* for saving and return immediately."""
        fut = self._pool.submit(self._store.save, record)
        with self._lock:
            self._pending.add(fut)
        fut.add_done_callback(lambda f, r=record: self._done(f, r))
        return fut

    def _done(self, fut: Future, record: TradeRecord) -> None:
        exc = fut.exception()
        with self._lock:
            self._pending.discard(fut)
            if exc is not None:
                self._failures += 1
        if exc is not None:
            logger.warning("Saving trade %s (%s %s) failed: %s", record.id, record.action.value, record.symbol, exc)

    def flush(self, timeout: float | None = None) -> None:
        """Block until every queued save has finished (or *timeout* passes)."""
        with self._lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def close(self) -> None:
        self._pool.shutdown(wait=True)
