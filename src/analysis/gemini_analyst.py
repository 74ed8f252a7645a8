"""
Gemini analyst: narrative analysis through the google-genai SDK.

The prompt asks for plain text (no markdown) so the dashboard can show it
verbatim.
"""

import logging
from typing import Any

from portfolio_core.contracts import Quote

logger = logging.getLogger("papertrade.analysis")

DEFAULT_MODEL = "gemini-2.5-flash"
EMPTY_RESPONSE = "Unable to retrieve analysis."
UNAVAILABLE = "The AI service is temporarily unavailable. Please try again later (or switch to mock mode)."


def build_prompt(symbol: str, quote: Quote, language: str = "English") -> str:
    return f"""
Please analyze the stock {symbol}.
Current Price: {quote.price}, Change: {quote.percent_change}%.
Provide a concise summary of the stock's recent performance and investment advice.
Strictly follow these rules:
1. Answer in {language}.
2. Do NOT use Markdown formatting (no bold, no italics, no bullet point symbols like *, -).
3. Use plain numbered lists like 1. 2. 3. if needed.
4. Keep it professional but accessible.
5. Limit to 150 words.
""".strip()


class GeminiAnalyst:
    """
    Narrative analysis from Google Gemini.

    API key via constructor (typically from AppConfig, sourced from env vars).
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        language: str = "English",
        client: Any = None,
    ) -> None:
        if not api_key:
            raise ValueError("Gemini API key is required. Set the GEMINI_API_KEY environment variable.")
        if client is None:
            try:
                from google import genai
            except ImportError:
                raise ImportError(
                    "google-genai is required for GeminiAnalyst. "
                    "Install with: pip install google-genai"
                )
            client = genai.Client(api_key=api_key)
        self._client = client
        self._model = model
        self._language = language

    def analyze(self, symbol: str, quote: Quote) -> str:
        prompt = build_prompt(symbol, quote, self._language)
        try:
            resp = self._client.models.generate_content(model=self._model, contents=prompt)
        except Exception as exc:
            logger.error("Gemini request failed for %s: %s", symbol, exc)
            return UNAVAILABLE
        text = getattr(resp, "text", None)
        return text.strip() if text else EMPTY_RESPONSE
