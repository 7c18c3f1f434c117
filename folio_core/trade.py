"""
Trade: one user-entered buy or sell.

Immutable and append-only. Positive quantity buys, negative quantity sells.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Integral

from folio_core.errors import MalformedRecord
from folio_core.validation import normalize_symbol, require_number


@dataclass(frozen=True)
class Trade:
    """A ledger entry. Timestamp is epoch milliseconds; ordering comes from the ledger."""

    symbol: str
    quantity: float
    price: float
    timestamp: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        object.__setattr__(self, "quantity", require_number(self.quantity, "quantity"))
        object.__setattr__(self, "price", require_number(self.price, "price"))
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, Integral):
            raise MalformedRecord(f"timestamp must be an integer, got {self.timestamp!r}")
        object.__setattr__(self, "timestamp", int(self.timestamp))

    @property
    def is_buy(self) -> bool:
        return self.quantity > 0

    @property
    def is_sell(self) -> bool:
        return self.quantity < 0
