"""
Configuration loaders.

App config:      reads config.yaml, resolves env vars for secrets.
Seed portfolio:  reads portfolio.default.json (or override), validates against JSON Schema.
"""

from config.loader import (
    AlertingConfig,
    AnalysisConfig,
    AppConfig,
    DataConfig,
    JournalConfig,
    default_config,
    load_config,
)
from config.portfolio import (
    PortfolioConfigError,
    PortfolioSeed,
    load_portfolio,
)

__all__ = [
    # App config (YAML)
    "AlertingConfig",
    "AnalysisConfig",
    "AppConfig",
    "DataConfig",
    "JournalConfig",
    "default_config",
    "load_config",
    # Seed portfolio (JSON + schema)
    "PortfolioConfigError",
    "PortfolioSeed",
    "load_portfolio",
]
