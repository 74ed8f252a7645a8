"""Tests for analysis providers (fake Gemini client). No network calls."""

from types import SimpleNamespace

import pytest

from analysis import MockAnalyst, build_analyst
from analysis.gemini_analyst import EMPTY_RESPONSE, UNAVAILABLE, GeminiAnalyst, build_prompt
from config import default_config
from portfolio_core import Quote


class FakeModels:
    def __init__(self, text=None, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    def generate_content(self, *, model: str, contents: str):
        self.calls.append({"model": model, "contents": contents})
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def _client(**kwargs) -> SimpleNamespace:
    return SimpleNamespace(models=FakeModels(**kwargs))


def test_mock_analyst_fills_symbol(quote: Quote) -> None:
    text = MockAnalyst().analyze("NVDA", quote)
    assert "NVDA" in text
    assert "{symbol}" not in text


def test_prompt_mentions_quote_and_language(quote: Quote) -> None:
    prompt = build_prompt("AAPL", quote, "German")
    assert "AAPL" in prompt
    assert "160.0" in prompt
    assert "1.59%" in prompt
    assert "German" in prompt
    assert "150 words" in prompt


def test_gemini_returns_text(quote: Quote) -> None:
    client = _client(text="  1. Trend is up.  ")
    analyst = GeminiAnalyst("key", model="gemini-test", client=client)
    assert analyst.analyze("AAPL", quote) == "1. Trend is up."
    assert client.models.calls[0]["model"] == "gemini-test"


def test_gemini_empty_text(quote: Quote) -> None:
    analyst = GeminiAnalyst("key", client=_client(text=""))
    assert analyst.analyze("AAPL", quote) == EMPTY_RESPONSE


def test_gemini_failure_masked(quote: Quote, caplog: pytest.LogCaptureFixture) -> None:
    analyst = GeminiAnalyst("key", client=_client(error=RuntimeError("quota exceeded")))
    assert analyst.analyze("AAPL", quote) == UNAVAILABLE
    assert "quota exceeded" in caplog.text


def test_gemini_requires_key() -> None:
    with pytest.raises(ValueError):
        GeminiAnalyst("", client=_client())


class TestFactory:
    def test_mock_mode(self) -> None:
        assert isinstance(build_analyst(default_config(), mock_mode=True), MockAnalyst)

    def test_real_mode_without_key_is_mock(self) -> None:
        assert isinstance(build_analyst(default_config(), mock_mode=False), MockAnalyst)

    def test_real_mode_with_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "gemini_key_789")
        assert isinstance(build_analyst(default_config(), mock_mode=False), GeminiAnalyst)
