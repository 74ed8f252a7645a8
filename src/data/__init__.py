"""
Market data: quotes and candles for the dashboard, CLI and trade settlement.

Depends on portfolio_core.contracts for Quote/Candle; no dependency from
portfolio_core back to data.
"""

from data.fetcher import MarketDataProvider, MockMarketData

__all__ = [
    "MarketDataProvider",
    "MockMarketData",
    "build_market_data",
    "get_alpaca_provider",
]


def get_alpaca_provider(api_key: str, api_secret: str, **kwargs):
    """Lazy import to avoid requiring alpaca-py when not used."""
    from data.alpaca_fetcher import AlpacaMarketData

    return AlpacaMarketData(api_key, api_secret, **kwargs)


def build_market_data(config, *, mock_mode: bool, seed: int | None = None, on_fallback=None) -> MarketDataProvider:
    """Mock provider unless real mode is on and Alpaca keys are configured."""
    if mock_mode or not config.real_data_available:
        return MockMarketData(seed)
    return get_alpaca_provider(
        config.data.api_key,
        config.data.api_secret,
        feed=config.data.feed,
        fallback=MockMarketData(seed),
        on_fallback=on_fallback,
    )
