"""Pytest fixtures: ledgers and quotes for deterministic tests."""

from datetime import datetime, timedelta, timezone

import pytest

from portfolio_core import AssetKind, Ledger, Position, Quote


def _ts(year: int, month: int, day: int, hour: int = 9, minute: int = 30) -> datetime:
    return datetime(year, month, day, hour, minute, 0, tzinfo=timezone.utc)


class StepClock:
    """Deterministic clock: each call returns the next minute."""

    def __init__(self, start: datetime | None = None) -> None:
        self._next = start or _ts(2026, 10, 1)

    def __call__(self) -> datetime:
        now = self._next
        self._next = now + timedelta(minutes=1)
        return now


@pytest.fixture(autouse=True)
def _no_provider_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests never see real credentials from the developer's shell or .env."""
    for name in ("APCA_API_KEY_ID", "APCA_API_SECRET_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def cash() -> Position:
    return Position("USD", 50_000.0, 1.0, kind=AssetKind.CASH, name="Cash")


@pytest.fixture
def ledger(cash: Position, clock: StepClock) -> Ledger:
    """Cash 50,000 plus 150 AAPL at 145.20."""
    return Ledger(
        [cash, Position("AAPL", 150.0, 145.20, name="Apple Inc.")],
        cash_symbol="USD",
        clock=clock,
    )


@pytest.fixture
def empty_ledger(cash: Position, clock: StepClock) -> Ledger:
    return Ledger([cash], cash_symbol="USD", clock=clock)


@pytest.fixture
def quote() -> Quote:
    return Quote(
        price=160.0, change=2.5, percent_change=1.59,
        high=161.0, low=157.0, open=158.0, previous_close=157.5,
    )
