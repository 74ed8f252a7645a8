"""
Structured JSON event logger for trading activity.

One JSON object per line (stderr by default), tagged with the surface that
produced it ("cli" or "dashboard") and the current data mode, so a log
aggregator can tell real-data trades from mock ones.

Optional webhook: settlement events (trade_executed, trade_rejected, error)
are also POSTed to the configured URL. A failed POST is logged and dropped.
"""

from __future__ import annotations

import json
import logging
import sys
import urllib.request
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("papertrade.events")

ALERT_EVENTS = frozenset({"trade_executed", "trade_rejected", "error"})
WEBHOOK_TIMEOUT_S = 5


class StructuredEventLogger:
    """Session-scoped event sink: JSON lines plus optional webhook alerts."""

    def __init__(
        self,
        *,
        source: str = "cli",
        enabled: bool = True,
        webhook_url: str = "",
        stream: Any = None,
    ) -> None:
        self._source = source
        self._mode = "mock"
        self._enabled = enabled
        self._webhook_url = webhook_url.strip()
        self._stream = stream or sys.stderr

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "source": self._source,
            "mode": self._mode,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record) + "\n")
            self._stream.flush()
        if self._webhook_url and event_type in ALERT_EVENTS:
            self._alert(record)
        return record

    def _alert(self, record: dict) -> None:
        body = json.dumps(record).encode("utf-8")
        req = urllib.request.Request(
            self._webhook_url, data=body, headers={"Content-Type": "application/json"}, method="POST"
        )
        try:
            urllib.request.urlopen(req, timeout=WEBHOOK_TIMEOUT_S)
        except Exception as exc:
            logger.warning("Webhook POST failed for %s: %s", record["event"], exc)

    # -- trades ------------------------------------------------------------

    def trade_executed(
        self,
        symbol: str,
        action: str,
        quantity: float,
        price: float,
        total: float,
        trade_id: str,
    ) -> dict:
        return self._emit(
            "trade_executed",
            symbol=symbol,
            action=action,
            quantity=quantity,
            price=price,
            total=total,
            trade_id=trade_id,
        )

    def trade_rejected(self, symbol: str, action: str, quantity: Any, code: str, reason: str) -> dict:
        return self._emit("trade_rejected", symbol=symbol, action=action, quantity=quantity, code=code, reason=reason)

    # -- providers and session ---------------------------------------------

    def provider_fallback(self, provider: str, symbol: str, detail: str = "") -> dict:
        return self._emit("provider_fallback", provider=provider, symbol=symbol, detail=detail)

    def set_mode(self, mock_mode: bool) -> None:
        """Tag later events with the data mode, without emitting one."""
        self._mode = "mock" if mock_mode else "real"

    def mode_changed(self, mock_mode: bool) -> dict:
        self.set_mode(mock_mode)
        return self._emit("mode_changed")

    def analysis_generated(self, symbol: str, chars: int) -> dict:
        return self._emit("analysis_generated", symbol=symbol, chars=chars)

    def error(self, message: str, detail: str = "") -> dict:
        return self._emit("error", message=message, detail=detail)
