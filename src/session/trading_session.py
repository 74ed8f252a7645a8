"""
TradingSession: the context a dashboard or CLI run owns and passes around.

Holds the mode flag, the ledger, the market and analysis providers, the
trade store and the event logger. Nothing here is process-global; two
sessions never share state.

Trade flow: capture a quote (network, may be slow) -> settle under the
session lock (pure, fast) -> queue the record for saving (fire-and-forget).
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from analysis import Analyst, build_analyst
from config.loader import AppConfig
from config.portfolio import load_portfolio
from data import MarketDataProvider, build_market_data
from journal import (
    BackgroundTradeSaver,
    JournalTradeStore,
    JournalWriter,
    NullTradeStore,
    TradeStore,
    read_trades,
)
from portfolio_core import Candle, Ledger, Quote, TimeRange, TradeAction, TradeRecord, TradeRejected

if TYPE_CHECKING:
    from cli.structured_log import StructuredEventLogger

logger = logging.getLogger("papertrade.session")


@dataclass(frozen=True)
class MarketSnapshot:
    """Quote and candles fetched together for one symbol and range."""

    symbol: str
    time_range: TimeRange
    quote: Quote
    candles: list[Candle]
    generation: int


class TradingSession:
    """
    One user's trading context.

    The lock serialises settlement against the one ledger; quote fetches run
    outside it so a slow provider never blocks another caller's trade.
    """

    def __init__(
        self,
        config: AppConfig,
        ledger: Ledger,
        *,
        store: TradeStore | None = None,
        journal: JournalWriter | None = None,
        events: StructuredEventLogger | None = None,
        mock_mode: bool | None = None,
        seed: int | None = None,
        market: MarketDataProvider | None = None,
        analyst: Analyst | None = None,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._journal = journal
        self._events = events
        self._seed = seed
        self._mock_mode = config.mock_mode if mock_mode is None else mock_mode
        if events:
            events.set_mode(self._mock_mode)
        self._market = market or self._build_market()
        self._analyst = analyst or build_analyst(config, mock_mode=self._mock_mode)
        self._saver = BackgroundTradeSaver(store or NullTradeStore())
        self._lock = threading.Lock()
        self._generation = 0
        self._current: MarketSnapshot | None = None

    def __enter__(self) -> TradingSession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- wiring ------------------------------------------------------------

    def _on_fallback(self, what: str, symbol: str, exc: Exception) -> None:
        if self._events:
            self._events.provider_fallback(what, symbol, detail=str(exc))

    def _build_market(self) -> MarketDataProvider:
        return build_market_data(
            self._config,
            mock_mode=self._mock_mode,
            seed=self._seed,
            on_fallback=self._on_fallback,
        )

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def saver(self) -> BackgroundTradeSaver:
        return self._saver

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, mock_mode: bool) -> None:
        """Switch data sourcing and rebuild both providers."""
        if mock_mode == self._mock_mode:
            return
        self._mock_mode = mock_mode
        self._market = self._build_market()
        self._analyst = build_analyst(self._config, mock_mode=mock_mode)
        self._current = None
        logger.info("Switched to %s mode", "mock" if mock_mode else "real")
        if self._events:
            self._events.mode_changed(mock_mode)

    # -- market data -------------------------------------------------------

    def quote(self, symbol: str) -> Quote:
        return self._market.get_quote(symbol)

    def candles(self, symbol: str, time_range: TimeRange) -> list[Candle]:
        return self._market.get_candles(symbol, TimeRange(time_range))

    def load_market(self, symbol: str, time_range: TimeRange) -> MarketSnapshot:
        """Fetch quote and candles, tagged with a request generation."""
        with self._lock:
            self._generation += 1
            generation = self._generation
        return MarketSnapshot(
            symbol=symbol,
            time_range=TimeRange(time_range),
            quote=self.quote(symbol),
            candles=self.candles(symbol, time_range),
            generation=generation,
        )

    def accept(self, snapshot: MarketSnapshot) -> bool:
        """Keep *snapshot* as current unless a newer request has started."""
        with self._lock:
            if snapshot.generation != self._generation:
                logger.debug("Dropping stale market snapshot for %s", snapshot.symbol)
                return False
            self._current = snapshot
            return True

    @property
    def current_market(self) -> MarketSnapshot | None:
        return self._current

    def market_for(self, symbol: str, time_range: TimeRange, *, refresh: bool = False) -> MarketSnapshot:
        """Return the accepted snapshot for symbol and range, fetching only when it is missing.

        Re-rendering a page must not move the price the user is looking at;
        pass refresh=True to fetch a new quote on purpose. A mode switch
        clears the current snapshot, so the next call fetches from the new
        provider.
        """
        time_range = TimeRange(time_range)
        current = self._current
        if not refresh and current and current.symbol == symbol and current.time_range is time_range:
            return current
        snapshot = self.load_market(symbol, time_range)
        if self.accept(snapshot):
            return snapshot
        return self._current or snapshot

    def analyze(self, symbol: str, quote: Quote) -> str:
        text = self._analyst.analyze(symbol, quote)
        if self._events:
            self._events.analysis_generated(symbol, len(text))
        return text

    # -- trading -----------------------------------------------------------

    def execute_trade(
        self,
        symbol: str,
        action: TradeAction | str,
        quantity: float,
        *,
        quote: Quote | None = None,
    ) -> TradeRecord:
        """Settle a trade at the captured quote's price.

        The quote is fetched before the lock is taken when not supplied.
        The ledger commits first and the save is queued afterwards; a
        rejection is logged, journaled, and re-raised.
        """
        action = TradeAction.parse(action)
        if isinstance(symbol, str):
            symbol = symbol.strip().upper()
        if quote is None:
            quote = self.quote(symbol)
        try:
            with self._lock:
                record = self._ledger.apply_trade(symbol, action, quantity, quote.price)
        except TradeRejected as exc:
            self._record_rejection(symbol, action, quantity, exc)
            raise
        self._saver.submit(record)
        logger.info(
            "Executed %s %g %s @ %.2f (total %.2f)",
            record.action.value, record.quantity, record.symbol, record.price, record.total,
        )
        if self._events:
            self._events.trade_executed(
                record.symbol, record.action.value, record.quantity, record.price, record.total, record.id,
            )
        return record

    def _record_rejection(self, symbol: str, action: TradeAction, quantity, exc: TradeRejected) -> None:
        logger.info("Rejected %s %s %s: %s", action.value, quantity, symbol, exc)
        if self._events:
            self._events.trade_rejected(symbol, action.value, quantity, exc.code, str(exc))
        if self._journal:
            try:
                self._journal.rejection(symbol, action.value, quantity, str(exc), exc.code)
            except OSError as err:
                logger.warning("Could not journal rejection: %s", err)
                if self._events:
                    self._events.error("journal write failed", detail=str(err))

    def close(self) -> None:
        """Wait for queued saves, then stop the saver."""
        self._saver.flush()
        self._saver.close()


def build_session(
    config: AppConfig,
    *,
    ledger: Ledger | None = None,
    events: StructuredEventLogger | None = None,
    mock_mode: bool | None = None,
    seed: int | None = None,
) -> TradingSession:
    """Wire a session from config.

    Without an explicit ledger, the seed portfolio is loaded and, when the
    journal is enabled, journaled trades are replayed on top of it.
    """
    journal: JournalWriter | None = None
    store: TradeStore = NullTradeStore()
    if config.journal.enabled:
        journal = JournalWriter(config.journal.path, echo_stdout=config.journal.echo_stdout)
        store = JournalTradeStore(journal)

    if ledger is None:
        portfolio = load_portfolio(config.portfolio_path or None)
        ledger = portfolio.to_ledger(config.cash_symbol, config.cash_policy)
        if journal is not None:
            history = read_trades(journal.path)
            skipped = ledger.replay(history, strict=False)
            for r in skipped:
                logger.warning("Journaled trade %s (%s %g %s) no longer settles; skipped",
                               r.id, r.action.value, r.quantity, r.symbol)
            logger.debug("Replayed %d journaled trades", len(history) - len(skipped))

    return TradingSession(
        config,
        ledger,
        store=store,
        journal=journal,
        events=events,
        mock_mode=mock_mode,
        seed=seed,
    )
