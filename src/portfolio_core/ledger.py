"""
Portfolio ledger: one Position per symbol plus a newest-first trade log.

apply_trade is the single settlement operation and the only mutator. It
validates, builds the next position map off to the side, and commits the map
and the log together, so a rejected trade leaves no trace. It never performs
I/O; the caller captures the quote before settling.

Buy:  avg_cost' = (qty * avg_cost + price * q) / (qty + q), cash -= price * q
Sell: qty' = qty - q (position removed at exactly 0), avg_cost unchanged,
      cash += price * q
"""

import math
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from enum import Enum
from numbers import Real
from typing import Any, Callable, Iterable, Mapping

from portfolio_core.contracts import AssetKind, Position, TradeAction, TradeRecord

DEFAULT_CASH_SYMBOL = "USD"


class CashPolicy(str, Enum):
    """Whether a Buy may take the cash position below the trade total.

    UNCONSTRAINED treats cash as unlimited margin (cash may go negative).
    REQUIRE_FUNDS rejects a Buy whose total exceeds available cash.
    """

    UNCONSTRAINED = "unconstrained"
    REQUIRE_FUNDS = "require_funds"


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------


class TradeRejected(Exception):
    """Base for recoverable settlement failures. The ledger is unchanged."""

    code = "rejected"


class InvalidSymbol(TradeRejected):
    code = "invalid_symbol"


class InvalidQuantity(TradeRejected):
    code = "invalid_quantity"


class InvalidPrice(TradeRejected):
    code = "invalid_price"


class InsufficientHoldings(TradeRejected):
    code = "insufficient_holdings"


class InsufficientCash(TradeRejected):
    code = "insufficient_cash"


def _is_positive_real(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    v = float(value)
    return math.isfinite(v) and v > 0


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class Ledger:
    """
    Authoritative in-memory store of positions and trade history.

    Not thread-safe: callers that share one ledger across handlers must
    serialise apply_trade (TradingSession holds a lock for this).
    """

    def __init__(
        self,
        positions: Iterable[Position] = (),
        trades: Iterable[TradeRecord] = (),
        *,
        cash_symbol: str = DEFAULT_CASH_SYMBOL,
        cash_policy: CashPolicy | str = CashPolicy.UNCONSTRAINED,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._cash_symbol = cash_symbol
        self._cash_policy = CashPolicy(cash_policy)
        self._clock = clock or _utc_now
        seeded: dict[str, Position] = {}
        for p in positions:
            if p.symbol in seeded:
                raise ValueError(f"Duplicate position for symbol {p.symbol!r}")
            if p.symbol != cash_symbol and p.quantity < 0:
                raise ValueError(f"Negative quantity for {p.symbol!r}: {p.quantity}")
            seeded[p.symbol] = p
        self._positions = seeded
        self._trades: tuple[TradeRecord, ...] = tuple(
            sorted(trades, key=lambda t: t.timestamp, reverse=True)
        )

    # -- read side ---------------------------------------------------------

    @property
    def cash_symbol(self) -> str:
        return self._cash_symbol

    @property
    def cash_policy(self) -> CashPolicy:
        return self._cash_policy

    @property
    def positions(self) -> tuple[Position, ...]:
        return tuple(self._positions.values())

    @property
    def holdings(self) -> tuple[Position, ...]:
        """All positions except cash."""
        return tuple(p for p in self._positions.values() if p.symbol != self._cash_symbol)

    @property
    def trades(self) -> tuple[TradeRecord, ...]:
        """Trade log, most recent first."""
        return self._trades

    @property
    def cash_balance(self) -> float:
        cash = self._positions.get(self._cash_symbol)
        return cash.quantity if cash else 0.0

    def position(self, symbol: str) -> Position | None:
        return self._positions.get(symbol)

    def total_cost_value(self) -> float:
        """Sum of quantity * average cost over every position, cash included."""
        return sum(p.cost_value for p in self._positions.values())

    def market_value(self, prices: Mapping[str, float]) -> float:
        """Value positions at live prices where known, else at average cost."""
        total = 0.0
        for p in self._positions.values():
            if p.symbol == self._cash_symbol:
                total += p.quantity
            else:
                total += p.quantity * prices.get(p.symbol, p.average_cost)
        return total

    def allocation(self) -> list[tuple[str, float]]:
        """(symbol, cost value) pairs, largest first."""
        pairs = [(p.symbol, p.cost_value) for p in self._positions.values()]
        return sorted(pairs, key=lambda pair: pair[1], reverse=True)

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict view of the full state."""
        return {
            "cash_symbol": self._cash_symbol,
            "positions": [p.to_dict() for p in self._positions.values()],
            "trades": [t.to_dict() for t in self._trades],
        }

    # -- settlement --------------------------------------------------------

    def _validate(
        self, symbol: Any, action: TradeAction | str, quantity: Any, price: Any, cash_symbol: str | None,
    ) -> TradeAction:
        if not isinstance(symbol, str) or not symbol.strip():
            raise InvalidSymbol(f"Symbol must be a non-empty string, got {symbol!r}")
        if cash_symbol is not None and cash_symbol != self._cash_symbol:
            raise InvalidSymbol(f"Ledger settles in {self._cash_symbol!r}, not {cash_symbol!r}")
        if symbol == self._cash_symbol:
            raise InvalidSymbol(f"Cannot trade the cash symbol {self._cash_symbol!r}")
        action = TradeAction.parse(action)
        if not _is_positive_real(quantity):
            raise InvalidQuantity(f"Quantity must be a positive number, got {quantity!r}")
        if not _is_positive_real(price):
            raise InvalidPrice(f"Price must be a positive number, got {price!r}")
        return action

    def _next_timestamp(self, requested: datetime | None) -> datetime:
        ts = requested or self._clock()
        if self._trades and ts < self._trades[0].timestamp:
            return self._trades[0].timestamp
        return ts

    def apply_trade(
        self,
        symbol: str,
        action: TradeAction | str,
        quantity: float,
        price: float,
        *,
        cash_symbol: str | None = None,
        kind: AssetKind = AssetKind.STOCK,
        name: str | None = None,
        trade_id: str | None = None,
        timestamp: datetime | None = None,
    ) -> TradeRecord:
        """Settle one trade at *price*. Returns the new TradeRecord.

        Raises a TradeRejected subclass (ledger untouched) on invalid input,
        an oversell, or a Buy the cash policy cannot fund. A *cash_symbol*
        other than the ledger's own is an InvalidSymbol.
        """
        action = self._validate(symbol, action, quantity, price, cash_symbol)
        cash_sym = self._cash_symbol

        qty = float(quantity)
        px = float(price)
        total = px * qty

        positions = dict(self._positions)
        existing = positions.get(symbol)
        cash = positions.get(cash_sym)
        cash_qty = cash.quantity if cash else 0.0

        if action is TradeAction.BUY:
            if self._cash_policy is CashPolicy.REQUIRE_FUNDS and cash_qty < total:
                raise InsufficientCash(
                    f"Buy {qty:g} {symbol} needs {total:,.2f} {cash_sym}, have {cash_qty:,.2f}"
                )
            if existing:
                new_qty = existing.quantity + qty
                new_avg = (existing.quantity * existing.average_cost + total) / new_qty
                positions[symbol] = replace(existing, quantity=new_qty, average_cost=new_avg)
            else:
                positions[symbol] = Position(symbol, qty, px, kind=kind, name=name)
            cash_qty -= total
        else:
            held = existing.quantity if existing else 0.0
            if held < qty:
                raise InsufficientHoldings(f"Sell {qty:g} {symbol} but only {held:g} held")
            remaining = held - qty
            if remaining == 0:
                del positions[symbol]
            else:
                positions[symbol] = replace(existing, quantity=remaining)
            cash_qty += total

        if cash:
            positions[cash_sym] = replace(cash, quantity=cash_qty)
        else:
            positions[cash_sym] = Position(cash_sym, cash_qty, 1.0, kind=AssetKind.CASH)

        record = TradeRecord(
            id=trade_id or uuid.uuid4().hex,
            symbol=symbol,
            action=action,
            price=px,
            quantity=qty,
            timestamp=self._next_timestamp(timestamp),
        )
        self._positions, self._trades = positions, (record,) + self._trades
        return record

    def replay(self, records: Iterable[TradeRecord], *, strict: bool = True) -> list[TradeRecord]:
        """Re-settle journaled trades (oldest first), keeping ids and timestamps.

        With strict=False, records the ledger rejects are skipped and returned.
        """
        skipped: list[TradeRecord] = []
        for r in records:
            try:
                self.apply_trade(
                    r.symbol, r.action, r.quantity, r.price,
                    trade_id=r.id, timestamp=r.timestamp,
                )
            except TradeRejected:
                if strict:
                    raise
                skipped.append(r)
        return skipped


def apply_trade(
    ledger: Ledger,
    symbol: str,
    action: TradeAction | str,
    quantity: float,
    price: float,
    cash_symbol: str | None = None,
) -> TradeRecord:
    """Functional entry point; see Ledger.apply_trade."""
    return ledger.apply_trade(symbol, action, quantity, price, cash_symbol=cash_symbol)
