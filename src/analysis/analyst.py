"""
Analysis providers: symbol + quote -> narrative text.

Every analyst always returns a string. The real adapter masks upstream
failures with a fixed apology so the dashboard never sees an exception.
"""

import textwrap
from typing import Protocol

from portfolio_core.contracts import Quote

MOCK_ANALYSIS = textwrap.dedent(
    """\
    [Mock AI analysis]
    Based on the current market data for {symbol}:
    1. Technicals: {symbol} is in an uptrend and RSI shows strong momentum, though it is close to overbought.
    2. Fundamentals: recent earnings came in ahead of expectations and cash flow is steady.
    3. Suggestion: holders may keep their position and consider adding on a pullback to support. The long-term outlook is positive, but watch for broad market volatility.
    """
)


class Analyst(Protocol):
    """Protocol for narrative analysis providers."""

    def analyze(self, symbol: str, quote: Quote) -> str:
        ...


class MockAnalyst:
    """Canned narrative with the symbol filled in."""

    def analyze(self, symbol: str, quote: Quote) -> str:
        return MOCK_ANALYSIS.format(symbol=symbol)


def build_analyst(config, *, mock_mode: bool) -> Analyst:
    """Mock analyst unless real mode is on and a Gemini key is configured."""
    if mock_mode or not config.real_analysis_available:
        return MockAnalyst()
    from analysis.gemini_analyst import GeminiAnalyst

    return GeminiAnalyst(
        config.analysis.api_key,
        model=config.analysis.model,
        language=config.analysis.language,
    )
