"""Tests for portfolio_core contracts: enums, records, quotes."""

from datetime import datetime, timezone

import pytest

from portfolio_core import AssetKind, Candle, Position, Quote, TradeAction, TradeRecord


@pytest.mark.parametrize("raw", ["buy", "BUY", " Buy ", TradeAction.BUY])
def test_trade_action_parse_buy(raw) -> None:
    assert TradeAction.parse(raw) is TradeAction.BUY


@pytest.mark.parametrize("raw", ["hold", "", None, 1])
def test_trade_action_parse_rejects_unknown(raw) -> None:
    with pytest.raises(ValueError):
        TradeAction.parse(raw)


def test_trade_record_dict_roundtrip_recomputes_total() -> None:
    ts = datetime(2026, 9, 16, 14, 0, tzinfo=timezone.utc)
    rec = TradeRecord("t2", "TSLA", TradeAction.SELL, 220.0, 5.0, ts)
    raw = rec.to_dict()
    assert raw["total"] == 1100.0
    raw["total"] = 1.0
    assert TradeRecord.from_dict(raw) == rec


def test_trade_record_from_dict_naive_and_zulu_timestamps() -> None:
    base = {"id": "x", "symbol": "AAPL", "action": "buy", "price": 1, "quantity": 2}
    zulu = TradeRecord.from_dict({**base, "timestamp": "2026-09-01T10:00:00Z"})
    naive = TradeRecord.from_dict({**base, "timestamp": "2026-09-01T10:00:00"})
    assert zulu.timestamp == naive.timestamp
    assert zulu.timestamp.tzinfo is not None
    assert zulu.action is TradeAction.BUY


def test_position_display_name_and_value() -> None:
    p = Position("NVDA", 20, 450.0)
    assert p.display_name == "NVDA"
    assert p.cost_value == 9_000.0
    assert p.to_dict()["kind"] == AssetKind.STOCK.value


def test_flat_quote() -> None:
    q = Quote.at_price(12.5)
    assert q.price == q.high == q.low == q.open == q.previous_close == 12.5
    assert q.change == 0.0


def test_candle_direction() -> None:
    t = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert Candle(t, 10, 11, 9, 10.5, 100).is_up()
    assert not Candle(t, 10, 11, 9, 9.5, 100).is_up()
