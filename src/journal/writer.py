"""
Trade journal: append-only JSON lines. One settled trade or rejection per line.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from portfolio_core.contracts import TradeRecord

logger = logging.getLogger("papertrade.journal")


class JournalWriter:
    """Append-only journal. Each line is a JSON object with event type and payload."""

    def __init__(self, path: str | Path, *, echo_stdout: bool = False) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._echo = echo_stdout

    @property
    def path(self) -> Path:
        return self._path

    def _write(self, event_type: str, payload: dict) -> None:
        record = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event_type, **payload}
        line = json.dumps(record) + "\n"
        with open(self._path, "a") as f:
            f.write(line)
        if self._echo:
            print(line.rstrip())

    def trade(self, record: TradeRecord, **extra: Any) -> None:
        self._write("trade", {**record.to_dict(), **extra})

    def rejection(self, symbol: str, action: str, quantity: Any, reason: str, code: str, **extra: Any) -> None:
        self._write(
            "rejection",
            {"symbol": symbol, "action": action, "quantity": quantity, "reason": reason, "code": code, **extra},
        )


def read_trades(path: str | Path) -> list[TradeRecord]:
    """Settled trades from a journal, oldest first. Other events and bad lines are skipped."""
    p = Path(path)
    if not p.exists():
        return []
    trades: list[TradeRecord] = []
    with open(p) as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
                if not isinstance(obj, dict) or obj.get("event") != "trade":
                    continue
                trades.append(TradeRecord.from_dict(obj))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping journal line %d in %s: %s", lineno, p.name, exc)
    return trades
