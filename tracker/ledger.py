"""
Trade ledger: append-only JSON file of trades in recorded order.

Trades are validated before they are written; the reconciler only ever sees
what this store returns. The whole ledger can be cleared, single trades cannot.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from folio_core.errors import MalformedRecord
from folio_core.trade import Trade
from folio_core.validation import validate_trade

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def _trade_from_record(record: Any) -> Trade:
    if not isinstance(record, dict):
        raise MalformedRecord(f"ledger record must be an object, got {record!r}")
    quantity = record.get("quantity", record.get("qty"))
    return Trade(
        symbol=record.get("symbol"),
        quantity=quantity,
        price=record.get("price"),
        timestamp=record.get("timestamp", 0),
    )


def _trade_to_record(trade: Trade) -> dict[str, Any]:
    return {
        "symbol": trade.symbol,
        "quantity": trade.quantity,
        "price": trade.price,
        "timestamp": trade.timestamp,
    }


class TradeLedger:
    """
    File-backed trade log.

    load() returns trades in the order they were appended. A missing file is
    an empty ledger; an unreadable one is logged and treated as empty.
    """

    def __init__(self, path: str | Path, *, clock: Callable[[], int] = _now_ms) -> None:
        self.path = Path(path)
        self._clock = clock

    def _read(self) -> tuple[Trade, ...]:
        if not self.path.exists():
            return ()
        with self.path.open(encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise MalformedRecord("ledger root must be a list")
        return tuple(_trade_from_record(r) for r in records)

    def load(self) -> tuple[Trade, ...]:
        try:
            return self._read()
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Trade ledger %s is unreadable, treating as empty: %s", self.path, exc)
            return ()

    def append(
        self,
        symbol: str,
        quantity: float,
        price: float,
        *,
        timestamp: int | None = None,
    ) -> Trade:
        """
        Validate and record a trade. Raises InvalidTrade / MalformedRecord on bad input.
        An unreadable ledger file is not overwritten; its read error propagates.
        """
        trade = validate_trade(
            Trade(
                symbol=symbol,
                quantity=quantity,
                price=price,
                timestamp=self._clock() if timestamp is None else timestamp,
            )
        )
        trades = self._read() + (trade,)
        self._write(trades)
        logger.info("Recorded trade %s %+g @ %g", trade.symbol, trade.quantity, trade.price)
        return trade

    def clear(self) -> None:
        """Remove every trade."""
        if self.path.exists():
            self.path.unlink()
        logger.info("Cleared trade ledger %s", self.path)

    def _write(self, trades: tuple[Trade, ...]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump([_trade_to_record(t) for t in trades], fh, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def __iter__(self) -> Iterator[Trade]:
        return iter(self.load())

    def __len__(self) -> int:
        return len(self.load())
