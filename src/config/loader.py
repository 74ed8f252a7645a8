"""
Config loader: YAML file -> frozen dataclass tree.

API secrets resolved from environment variables (APCA_API_KEY_ID,
APCA_API_SECRET_KEY, GEMINI_API_KEY). Config file holds only non-secret values.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from portfolio_core.contracts import TimeRange
from portfolio_core.ledger import DEFAULT_CASH_SYMBOL, CashPolicy

MODES = ("mock", "real")


def _looks_configured(secret: str, min_len: int = 5) -> bool:
    return len(secret.strip()) > min_len


@dataclass(frozen=True)
class DataConfig:
    source: str = "alpaca"
    feed: str = "iex"
    api_key: str = ""
    api_secret: str = ""


@dataclass(frozen=True)
class AnalysisConfig:
    model: str = "gemini-2.5-flash"
    language: str = "English"
    api_key: str = ""


@dataclass(frozen=True)
class JournalConfig:
    enabled: bool = True
    path: str = "data/trades.jsonl"
    echo_stdout: bool = False


@dataclass(frozen=True)
class AlertingConfig:
    structured_logs: bool = True
    webhook_url: str = ""


@dataclass(frozen=True)
class AppConfig:
    mode: str = "mock"
    symbol: str = "AAPL"
    range: TimeRange = TimeRange.DAY
    cash_symbol: str = DEFAULT_CASH_SYMBOL
    cash_policy: CashPolicy = CashPolicy.UNCONSTRAINED
    portfolio_path: str = ""
    data: DataConfig = field(default_factory=DataConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    journal: JournalConfig = field(default_factory=JournalConfig)
    alerting: AlertingConfig = field(default_factory=AlertingConfig)

    @property
    def mock_mode(self) -> bool:
        return self.mode == "mock"

    @property
    def real_data_available(self) -> bool:
        return _looks_configured(self.data.api_key) and _looks_configured(self.data.api_secret)

    @property
    def real_analysis_available(self) -> bool:
        return _looks_configured(self.analysis.api_key)


def _env_secrets() -> dict[str, str]:
    return {
        "api_key": os.environ.get("APCA_API_KEY_ID", ""),
        "api_secret": os.environ.get("APCA_API_SECRET_KEY", ""),
        "gemini_key": os.environ.get("GEMINI_API_KEY", "") or os.environ.get("GOOGLE_API_KEY", ""),
    }


def _build_config(raw: dict) -> AppConfig:
    secrets = _env_secrets()

    mode = str(raw.get("mode", "mock")).strip().lower()
    if mode not in MODES:
        raise ValueError(f"Config 'mode' must be one of {MODES}, got {mode!r}")

    data_raw = raw.get("data") or {}
    data_cfg = DataConfig(
        source=data_raw.get("source", "alpaca"),
        feed=str(data_raw.get("feed", "iex")),
        api_key=secrets["api_key"],
        api_secret=secrets["api_secret"],
    )

    an_raw = raw.get("analysis") or {}
    an_cfg = AnalysisConfig(
        model=str(an_raw.get("model", "gemini-2.5-flash")),
        language=str(an_raw.get("language", "English")),
        api_key=secrets["gemini_key"],
    )

    j_raw = raw.get("journal") or {}
    j_cfg = JournalConfig(
        enabled=bool(j_raw.get("enabled", True)),
        path=j_raw.get("path", "data/trades.jsonl"),
        echo_stdout=bool(j_raw.get("echo_stdout", False)),
    )

    a_raw = raw.get("alerting") or {}
    a_cfg = AlertingConfig(
        structured_logs=bool(a_raw.get("structured_logs", True)),
        webhook_url=str(a_raw.get("webhook_url", "")),
    )

    return AppConfig(
        mode=mode,
        symbol=str(raw.get("symbol", "AAPL")).upper(),
        range=TimeRange(str(raw.get("range", "1D"))),
        cash_symbol=str(raw.get("cash_symbol", DEFAULT_CASH_SYMBOL)),
        cash_policy=CashPolicy(str(raw.get("cash_policy", "unconstrained")).lower()),
        portfolio_path=str(raw.get("portfolio_path", "") or ""),
        data=data_cfg,
        analysis=an_cfg,
        journal=j_cfg,
        alerting=a_cfg,
    )


def default_config() -> AppConfig:
    """Defaults plus env secrets, for callers running without a config file."""
    return _build_config({})


def load_config(path: str | Path = "config.yaml") -> AppConfig:
    """
    Load configuration from a YAML file.

    Secrets are resolved from environment variables:
      - APCA_API_KEY_ID / APCA_API_SECRET_KEY (Alpaca market data)
      - GEMINI_API_KEY, or GOOGLE_API_KEY (Gemini analysis)
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    return _build_config(raw)
