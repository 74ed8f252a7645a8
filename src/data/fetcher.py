"""
Fetch quotes and candles from a market data source. Configurable adapter; sync.

Providers never raise for upstream trouble: the real adapter falls back to
MockMarketData, so callers can treat every provider as always-succeeding.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Protocol

from portfolio_core.contracts import Candle, Quote, TimeRange

MOCK_START_PRICE = 150.0
MOCK_VOLATILITY = 0.02

# Number of candles and spacing per chart range.
_MOCK_RANGE = {
    TimeRange.DAY: (24, timedelta(hours=1)),
    TimeRange.MONTH: (30, timedelta(days=1)),
    TimeRange.YEAR: (250, timedelta(days=1)),
}


class MarketDataProvider(Protocol):
    """Protocol for quote/candle providers. Implement per data vendor."""

    def get_quote(self, symbol: str) -> Quote:
        """Current quote for *symbol*."""
        ...

    def get_candles(self, symbol: str, time_range: TimeRange) -> list[Candle]:
        """Historical candles for *symbol*, oldest first, timestamps in UTC."""
        ...


class MockMarketData:
    """Synthetic quotes and random-walk candles; for mock mode and fallback.

    Pass a seed for deterministic output (tests, demos).
    """

    def __init__(self, seed: int | None = None, *, start_price: float = MOCK_START_PRICE) -> None:
        self._rng = random.Random(seed)
        self._start_price = start_price

    def get_quote(self, symbol: str) -> Quote:
        base = self._rng.random() * 100 + 100
        return Quote(
            price=round(base, 2),
            change=round(self._rng.random() * 10 - 5, 2),
            percent_change=round(self._rng.random() * 5 - 2.5, 2),
            high=round(base + 5, 2),
            low=round(base - 5, 2),
            open=round(base, 2),
            previous_close=round(base - 2, 2),
        )

    def get_candles(
        self,
        symbol: str,
        time_range: TimeRange,
        *,
        now: datetime | None = None,
    ) -> list[Candle]:
        count, step = _MOCK_RANGE[TimeRange(time_range)]
        return self.generate(count, step, now=now)

    def generate(self, count: int, step: timedelta, *, now: datetime | None = None) -> list[Candle]:
        """Random walk of *count* candles ending one *step* before *now*."""
        end = now or datetime.now(timezone.utc)
        price = self._start_price
        candles: list[Candle] = []
        for i in range(count, 0, -1):
            swing = price * MOCK_VOLATILITY
            open_ = price + (self._rng.random() - 0.5) * swing
            close = open_ + (self._rng.random() - 0.5) * swing
            high = max(open_, close) + self._rng.random() * swing * 0.5
            low = min(open_, close) - self._rng.random() * swing * 0.5
            candles.append(
                Candle(
                    time=end - i * step,
                    open=round(open_, 2),
                    high=round(high, 2),
                    low=round(low, 2),
                    close=round(close, 2),
                    volume=self._rng.randrange(50_000, 1_050_000),
                )
            )
            price = close
        return candles
