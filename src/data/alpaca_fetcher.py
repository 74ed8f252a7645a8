"""
Alpaca market data: implements MarketDataProvider using the alpaca-py SDK.

Quote comes from the stock snapshot (latest trade, today's daily bar,
previous daily bar). Candles come from historical bars, one timeframe per
chart range. Any upstream failure, or an empty answer, is logged and served
from the fallback provider instead. Free tier uses IEX data.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from portfolio_core.contracts import Candle, Quote, TimeRange

from data.fetcher import MarketDataProvider, MockMarketData

logger = logging.getLogger("papertrade.data")

# Chart range -> (bar unit, bar amount, lookback)
_RANGE_MAP = {
    TimeRange.DAY: ("Hour", 1, timedelta(days=1)),
    TimeRange.MONTH: ("Day", 1, timedelta(days=30)),
    TimeRange.YEAR: ("Week", 1, timedelta(days=365)),
}

FallbackHook = Callable[[str, str, Exception], None]


def _parse_range(time_range: TimeRange):
    """Convert a chart range to an Alpaca TimeFrame and lookback."""
    from alpaca.data.timeframe import TimeFrame, TimeFrameUnit

    unit_str, amount, lookback = _RANGE_MAP[TimeRange(time_range)]
    unit = getattr(TimeFrameUnit, unit_str)
    return TimeFrame(amount, unit), lookback


def _utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class AlpacaMarketData:
    """
    Quotes and candles from the Alpaca Market Data API.

    Uses StockHistoricalDataClient from alpaca-py. API keys via constructor
    (typically from AppConfig, sourced from env vars).
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        *,
        feed: str = "iex",
        fallback: MarketDataProvider | None = None,
        on_fallback: FallbackHook | None = None,
        client: Any = None,
    ) -> None:
        if not api_key or not api_secret:
            raise ValueError(
                "Alpaca API key and secret are required. "
                "Set APCA_API_KEY_ID and APCA_API_SECRET_KEY environment variables."
            )
        if client is None:
            try:
                from alpaca.data.historical import StockHistoricalDataClient
            except ImportError:
                raise ImportError(
                    "alpaca-py is required for AlpacaMarketData. "
                    "Install with: pip install alpaca-py"
                )
            client = StockHistoricalDataClient(api_key, api_secret)
        self._client = client
        self._feed = feed.lower()
        self._fallback = fallback or MockMarketData()
        self._on_fallback = on_fallback

    def _fall_back(self, what: str, symbol: str, exc: Exception) -> None:
        logger.warning("Alpaca %s failed for %s, falling back to mock data: %s", what, symbol, exc)
        if self._on_fallback:
            self._on_fallback(what, symbol, exc)

    def get_quote(self, symbol: str) -> Quote:
        try:
            return self._fetch_quote(symbol)
        except Exception as exc:
            self._fall_back("quote", symbol, exc)
            return self._fallback.get_quote(symbol)

    def get_candles(self, symbol: str, time_range: TimeRange) -> list[Candle]:
        try:
            candles = self._fetch_candles(symbol, time_range)
            if not candles:
                raise LookupError("no bars returned")
            return candles
        except Exception as exc:
            self._fall_back("candles", symbol, exc)
            return self._fallback.get_candles(symbol, time_range)

    def _fetch_quote(self, symbol: str) -> Quote:
        from alpaca.data.enums import DataFeed
        from alpaca.data.requests import StockSnapshotRequest

        request = StockSnapshotRequest(symbol_or_symbols=symbol, feed=DataFeed(self._feed))
        response = self._client.get_stock_snapshot(request)
        snapshot = response[symbol]
        price = float(snapshot.latest_trade.price)
        daily = snapshot.daily_bar
        previous_close = float(snapshot.previous_daily_bar.close)
        change = price - previous_close
        percent = change / previous_close * 100 if previous_close else 0.0
        return Quote(
            price=price,
            change=round(change, 2),
            percent_change=round(percent, 2),
            high=float(daily.high),
            low=float(daily.low),
            open=float(daily.open),
            previous_close=previous_close,
        )

    def _fetch_candles(self, symbol: str, time_range: TimeRange) -> list[Candle]:
        from alpaca.data.enums import DataFeed
        from alpaca.data.requests import StockBarsRequest

        timeframe, lookback = _parse_range(time_range)
        end = datetime.now(timezone.utc)
        request = StockBarsRequest(
            symbol_or_symbols=symbol,
            timeframe=timeframe,
            start=end - lookback,
            end=end,
            feed=DataFeed(self._feed),
        )
        response = self._client.get_stock_bars(request)
        raw_bars = response.data.get(symbol, []) if hasattr(response, "data") else response.get(symbol, [])
        candles = [
            Candle(
                time=_utc(b.timestamp),
                open=float(b.open),
                high=float(b.high),
                low=float(b.low),
                close=float(b.close),
                volume=int(b.volume),
            )
            for b in raw_bars
        ]
        logger.info("Fetched %d %s candles for %s", len(candles), TimeRange(time_range).value, symbol)
        return candles
