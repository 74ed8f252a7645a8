"""
Seed portfolio loader: JSON file -> PortfolioSeed, validated against JSON Schema.

Default values: docs/config/portfolio.default.json
Schema:         docs/config/portfolio.schema.json

The seed holds the starting cash balance, the starting positions and any
historic trades shown in the trade log. The cash symbol itself comes from
the app config so one seed works for any settlement currency.

Usage:
    from config.portfolio import load_portfolio
    seed = load_portfolio()                    # loads default
    seed = load_portfolio("my_portfolio.json") # loads custom file
    ledger = seed.to_ledger("USD")
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema

from portfolio_core.contracts import AssetKind, Position, TradeRecord
from portfolio_core.ledger import CashPolicy, Ledger

logger = logging.getLogger("papertrade.config")

# ---------------------------------------------------------------------------
# Project root detection (walk up from this file to find pyproject.toml)
# ---------------------------------------------------------------------------


def _find_project_root() -> Path:
    """Walk up from this file looking for pyproject.toml.

    When running from source, finds the repo root. When installed as a
    package, pyproject.toml won't exist; fall back to CWD.
    """
    candidate = Path(__file__).resolve().parent
    for _ in range(10):
        if (candidate / "pyproject.toml").exists():
            return candidate
        parent = candidate.parent
        if parent == candidate:
            break
        candidate = parent
    return Path.cwd()


_PROJECT_ROOT = _find_project_root()

DEFAULT_PORTFOLIO_PATH = _PROJECT_ROOT / "docs" / "config" / "portfolio.default.json"
DEFAULT_SCHEMA_PATH = _PROJECT_ROOT / "docs" / "config" / "portfolio.schema.json"


class PortfolioConfigError(Exception):
    """Raised when seed portfolio loading or validation fails."""


@dataclass(frozen=True)
class PortfolioSeed:
    cash: float
    cash_name: str
    positions: tuple[Position, ...]
    trades: tuple[TradeRecord, ...]

    def to_ledger(
        self,
        cash_symbol: str,
        cash_policy: CashPolicy | str = CashPolicy.UNCONSTRAINED,
    ) -> Ledger:
        """Fresh ledger holding the seed cash, positions and trade history."""
        for p in self.positions:
            if p.symbol == cash_symbol:
                raise PortfolioConfigError(
                    f"Seed position {p.symbol!r} clashes with the cash symbol"
                )
        cash = Position(cash_symbol, self.cash, 1.0, kind=AssetKind.CASH, name=self.cash_name)
        try:
            return Ledger(
                (cash, *self.positions),
                self.trades,
                cash_symbol=cash_symbol,
                cash_policy=cash_policy,
            )
        except ValueError as exc:
            raise PortfolioConfigError(str(exc)) from exc


def _validate_schema(data: dict[str, Any], schema_path: Path) -> None:
    """Validate *data* against the JSON Schema at *schema_path*."""
    if not schema_path.exists():
        raise PortfolioConfigError(f"Schema file not found: {schema_path}")
    with open(schema_path) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as exc:
        raise PortfolioConfigError(f"Portfolio validation failed: {exc.message}") from exc


def _build_seed(data: dict[str, Any]) -> PortfolioSeed:
    """Convert a raw dict (already validated) into a PortfolioSeed."""
    positions = tuple(
        Position(
            symbol=p["symbol"],
            quantity=float(p["quantity"]),
            average_cost=float(p["average_cost"]),
            kind=AssetKind(p.get("kind", "Stock")),
            name=p.get("name"),
        )
        for p in data["positions"]
    )
    try:
        trades = tuple(TradeRecord.from_dict(t) for t in data.get("trades", []))
    except ValueError as exc:
        raise PortfolioConfigError(f"Bad seed trade: {exc}") from exc
    return PortfolioSeed(
        cash=float(data["cash"]["quantity"]),
        cash_name=data["cash"].get("name", "Cash"),
        positions=positions,
        trades=trades,
    )


def load_portfolio(
    portfolio_path: str | Path | None = None,
    schema_path: str | Path | None = None,
) -> PortfolioSeed:
    """Load and validate the seed portfolio.

    Parameters
    ----------
    portfolio_path:
        Path to a portfolio JSON file. Defaults to ``docs/config/portfolio.default.json``.
    schema_path:
        Path to the JSON Schema file. Defaults to ``docs/config/portfolio.schema.json``.

    Raises
    ------
    PortfolioConfigError
        If the file is missing, unparseable, or fails schema validation.
    """
    pf_path = Path(portfolio_path) if portfolio_path else DEFAULT_PORTFOLIO_PATH
    sch_path = Path(schema_path) if schema_path else DEFAULT_SCHEMA_PATH

    if not pf_path.exists():
        raise PortfolioConfigError(f"Portfolio file not found: {pf_path}")

    try:
        with open(pf_path) as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise PortfolioConfigError(f"Portfolio file is not valid JSON: {exc}") from exc

    _validate_schema(data, sch_path)
    seed = _build_seed(data)
    logger.debug(
        "Loaded seed portfolio %s: %d positions, %d trades",
        pf_path.name, len(seed.positions), len(seed.trades),
    )
    return seed
