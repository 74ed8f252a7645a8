"""Tests for config loader: YAML parsing, env var resolution, error cases."""

from pathlib import Path

import pytest

from config import default_config, load_config
from portfolio_core import CashPolicy, TimeRange


def _write_yaml(path: Path, content: str) -> Path:
    path.write_text(content)
    return path


def test_load_config_basic(tmp_path: Path) -> None:
    path = _write_yaml(
        tmp_path / "config.yaml",
        """
mode: real
symbol: tsla
range: 1M
cash_symbol: EUR
cash_policy: require_funds
portfolio_path: my_portfolio.json
data:
  source: alpaca
  feed: sip
analysis:
  model: gemini-2.0-flash
  language: Chinese
journal:
  path: test_journal.jsonl
alerting:
  webhook_url: https://example.invalid/hook
""",
    )
    cfg = load_config(path)
    assert cfg.mode == "real"
    assert cfg.mock_mode is False
    assert cfg.symbol == "TSLA"
    assert cfg.range is TimeRange.MONTH
    assert cfg.cash_symbol == "EUR"
    assert cfg.cash_policy is CashPolicy.REQUIRE_FUNDS
    assert cfg.portfolio_path == "my_portfolio.json"
    assert cfg.data.feed == "sip"
    assert cfg.analysis.model == "gemini-2.0-flash"
    assert cfg.analysis.language == "Chinese"
    assert cfg.journal.path == "test_journal.jsonl"
    assert cfg.alerting.webhook_url == "https://example.invalid/hook"


def test_load_config_env_vars(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write_yaml(tmp_path / "config.yaml", "symbol: SPY\n")
    monkeypatch.setenv("APCA_API_KEY_ID", "test_key_123")
    monkeypatch.setenv("APCA_API_SECRET_KEY", "test_secret_456")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini_key_789")
    cfg = load_config(path)
    assert cfg.data.api_key == "test_key_123"
    assert cfg.data.api_secret == "test_secret_456"
    assert cfg.analysis.api_key == "gemini_key_789"
    assert cfg.real_data_available
    assert cfg.real_analysis_available


def test_google_api_key_fallback(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "google_key_123")
    assert default_config().analysis.api_key == "google_key_123"


def test_short_keys_do_not_count_as_configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APCA_API_KEY_ID", "abc")
    monkeypatch.setenv("APCA_API_SECRET_KEY", "long_enough_secret")
    monkeypatch.setenv("GEMINI_API_KEY", "12345")
    cfg = default_config()
    assert not cfg.real_data_available
    assert not cfg.real_analysis_available


def test_load_config_defaults(tmp_path: Path) -> None:
    cfg = load_config(_write_yaml(tmp_path / "config.yaml", "symbol: SPY\n"))
    assert cfg.mock_mode is True
    assert cfg.range is TimeRange.DAY
    assert cfg.cash_symbol == "USD"
    assert cfg.cash_policy is CashPolicy.UNCONSTRAINED
    assert cfg.journal.enabled is True
    assert cfg.journal.echo_stdout is False
    assert cfg.alerting.structured_logs is True
    assert not cfg.real_data_available


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    cfg = load_config(_write_yaml(tmp_path / "config.yaml", ""))
    assert cfg == default_config()


def test_load_config_missing_file() -> None:
    with pytest.raises(FileNotFoundError):
        load_config("/nonexistent/path.yaml")


@pytest.mark.parametrize(
    "content",
    ["mode: live\n", "range: 5Y\n", "cash_policy: yolo\n", "- just\n- a list\n"],
)
def test_load_config_invalid_values(tmp_path: Path, content: str) -> None:
    with pytest.raises(ValueError):
        load_config(_write_yaml(tmp_path / "config.yaml", content))
