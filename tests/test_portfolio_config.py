"""Tests for the seed portfolio loader: JSON Schema validation and ledger building."""

import json
from pathlib import Path

import pytest

from config.portfolio import (
    DEFAULT_PORTFOLIO_PATH,
    DEFAULT_SCHEMA_PATH,
    PortfolioConfigError,
    load_portfolio,
)
from portfolio_core import AssetKind, CashPolicy


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "portfolio.json"
    path.write_text(json.dumps(data))
    return path


def _minimal(**overrides) -> dict:
    data = {
        "version": "1.0",
        "cash": {"quantity": 1000},
        "positions": [{"symbol": "AAPL", "quantity": 10, "average_cost": 100.0}],
    }
    data.update(overrides)
    return data


class TestDefaultSeed:
    def test_default_files_exist(self) -> None:
        assert DEFAULT_PORTFOLIO_PATH.exists()
        assert DEFAULT_SCHEMA_PATH.exists()

    def test_default_seed_contents(self) -> None:
        seed = load_portfolio()
        assert seed.cash == 50_000.0
        assert seed.cash_name == "Cash"
        assert [p.symbol for p in seed.positions] == ["AAPL", "TSLA", "NVDA"]
        aapl = seed.positions[0]
        assert aapl.quantity == 150
        assert aapl.average_cost == 145.20
        assert aapl.display_name == "Apple Inc."
        assert [t.id for t in seed.trades] == ["t1", "t2", "t3"]

    def test_default_seed_to_ledger(self) -> None:
        ledger = load_portfolio().to_ledger("USD")
        assert ledger.cash_balance == 50_000.0
        assert ledger.position("USD").kind is AssetKind.CASH
        assert ledger.position("USD").display_name == "Cash"
        assert [t.id for t in ledger.trades] == ["t3", "t2", "t1"]
        assert ledger.cash_policy is CashPolicy.UNCONSTRAINED


class TestCustomSeed:
    def test_minimal_file(self, tmp_path: Path) -> None:
        seed = load_portfolio(_write(tmp_path, _minimal()))
        assert seed.cash_name == "Cash"
        assert seed.trades == ()
        assert seed.positions[0].kind is AssetKind.STOCK

    def test_cash_symbol_comes_from_caller(self, tmp_path: Path) -> None:
        ledger = load_portfolio(_write(tmp_path, _minimal())).to_ledger("EUR", "require_funds")
        assert ledger.cash_symbol == "EUR"
        assert ledger.cash_balance == 1000
        assert ledger.cash_policy is CashPolicy.REQUIRE_FUNDS

    def test_position_clashing_with_cash_symbol(self, tmp_path: Path) -> None:
        data = _minimal(positions=[{"symbol": "USD", "quantity": 1, "average_cost": 1}])
        seed = load_portfolio(_write(tmp_path, data))
        with pytest.raises(PortfolioConfigError):
            seed.to_ledger("USD")

    def test_duplicate_positions(self, tmp_path: Path) -> None:
        pos = {"symbol": "AAPL", "quantity": 1, "average_cost": 1}
        seed = load_portfolio(_write(tmp_path, _minimal(positions=[pos, pos])))
        with pytest.raises(PortfolioConfigError, match="Duplicate"):
            seed.to_ledger("USD")


class TestValidationErrors:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PortfolioConfigError, match="not found"):
            load_portfolio(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "portfolio.json"
        path.write_text("{not json")
        with pytest.raises(PortfolioConfigError, match="not valid JSON"):
            load_portfolio(path)

    def test_missing_schema(self, tmp_path: Path) -> None:
        with pytest.raises(PortfolioConfigError, match="Schema file not found"):
            load_portfolio(_write(tmp_path, _minimal()), schema_path=tmp_path / "missing.json")

    @pytest.mark.parametrize(
        "overrides",
        [
            {"positions": [{"symbol": "AAPL", "quantity": 0, "average_cost": 1}]},
            {"positions": [{"symbol": "AAPL", "quantity": -5, "average_cost": 1}]},
            {"positions": [{"symbol": "", "quantity": 1, "average_cost": 1}]},
            {"positions": [{"symbol": "AAPL", "quantity": 1, "average_cost": 1, "kind": "Cash"}]},
            {"positions": [{"symbol": "AAPL", "quantity": 1, "average_cost": 1, "extra": True}]},
            {"cash": {"quantity": "lots"}},
            {"trades": [{"id": "t", "symbol": "AAPL", "action": "HOLD", "price": 1, "quantity": 1,
                         "timestamp": "2026-01-01T00:00:00Z"}]},
            {"unexpected": 1},
        ],
    )
    def test_schema_rejects(self, tmp_path: Path, overrides: dict) -> None:
        with pytest.raises(PortfolioConfigError, match="validation failed"):
            load_portfolio(_write(tmp_path, _minimal(**overrides)))

    def test_bad_trade_timestamp(self, tmp_path: Path) -> None:
        trade = {"id": "t", "symbol": "AAPL", "action": "BUY", "price": 1, "quantity": 1, "timestamp": "yesterday"}
        with pytest.raises(PortfolioConfigError, match="Bad seed trade"):
            load_portfolio(_write(tmp_path, _minimal(trades=[trade])))
