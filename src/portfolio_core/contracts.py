"""
Data contracts for portfolio-core: Position, TradeRecord, Quote, Candle.

The ledger consumes only Quote.price; Quote and Candle are here so providers,
the CLI and the dashboard share one vocabulary. No I/O; plain dataclasses.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AssetKind(str, Enum):
    """What a position holds. Informational only; settlement ignores it."""

    STOCK = "Stock"
    CASH = "Cash"
    CRYPTO = "Crypto"
    OTHER = "Other"


class TradeAction(str, Enum):
    """Closed two-variant trade tag."""

    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def parse(cls, value: "TradeAction | str") -> "TradeAction":
        """Accept an enum member or a case-insensitive 'buy'/'sell' string."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Unknown trade action {value!r} (expected 'buy' or 'sell')")


class TimeRange(str, Enum):
    """Candle history window shown on the chart."""

    DAY = "1D"
    MONTH = "1M"
    YEAR = "1Y"


# ---------------------------------------------------------------------------
# Portfolio models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Position:
    """One held instrument or the cash balance.

    For the cash position, quantity is currency units and average_cost is 1.
    """

    symbol: str
    quantity: float
    average_cost: float
    kind: AssetKind = AssetKind.STOCK
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.symbol

    @property
    def cost_value(self) -> float:
        """Book value at average cost."""
        return self.quantity * self.average_cost

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.display_name,
            "quantity": self.quantity,
            "average_cost": self.average_cost,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class TradeRecord:
    """Immutable historical fact: one settled trade."""

    id: str
    symbol: str
    action: TradeAction
    price: float
    quantity: float
    timestamp: datetime

    @property
    def total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "action": self.action.value,
            "price": self.price,
            "quantity": self.quantity,
            "timestamp": self.timestamp.isoformat(),
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "TradeRecord":
        """Inverse of to_dict; 'total' is recomputed, never trusted."""
        ts = datetime.fromisoformat(str(raw["timestamp"]).replace("Z", "+00:00"))
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return cls(
            id=str(raw["id"]),
            symbol=str(raw["symbol"]),
            action=TradeAction.parse(raw["action"]),
            price=float(raw["price"]),
            quantity=float(raw["quantity"]),
            timestamp=ts,
        )


# ---------------------------------------------------------------------------
# Market data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Quote:
    """Current quote for a symbol. Only price feeds settlement."""

    price: float
    change: float
    percent_change: float
    high: float
    low: float
    open: float
    previous_close: float

    @classmethod
    def at_price(cls, price: float) -> "Quote":
        """A flat quote: no change, every level equal to *price*."""
        return cls(price, 0.0, 0.0, price, price, price, price)


@dataclass(frozen=True)
class Candle:
    """OHLCV candle; time in UTC."""

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int

    def is_up(self) -> bool:
        return self.close >= self.open
