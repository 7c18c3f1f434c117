"""
Holding: a starting position loaded from baseline data.

Immutable. One per symbol; trades are replayed on top of it by the reconciler.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from folio_core.errors import InvalidHolding
from folio_core.validation import normalize_symbol, require_number


class Market(Enum):
    US = "US"
    HK = "HK"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: "Market | str | None", default: "Market | None" = None) -> "Market":
        """Case-insensitive lookup. Unknown or empty values map to default (OTHER if None)."""
        if isinstance(value, Market):
            return value
        fallback = default if default is not None else cls.OTHER
        if value is None:
            return fallback
        key = str(value).strip().upper()
        if not key:
            return fallback
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


DEFAULT_CATEGORY = "other"


@dataclass(frozen=True)
class Holding:
    """Baseline position before trade replay."""

    symbol: str
    name: str = ""
    market: Market = Market.US
    category: str = DEFAULT_CATEGORY
    quantity: float = 0.0
    cost_basis: float = 0.0

    def __post_init__(self) -> None:
        symbol = normalize_symbol(self.symbol)
        if not symbol:
            raise InvalidHolding("holding symbol must not be empty")
        quantity = require_number(self.quantity, "quantity")
        cost_basis = require_number(self.cost_basis, "cost_basis")
        if quantity < 0:
            raise InvalidHolding(f"{symbol}: quantity must be >= 0, got {quantity}")
        if cost_basis < 0:
            raise InvalidHolding(f"{symbol}: cost_basis must be >= 0, got {cost_basis}")
        object.__setattr__(self, "symbol", symbol)
        object.__setattr__(self, "name", self.name or symbol)
        object.__setattr__(self, "market", Market.parse(self.market, Market.US))
        object.__setattr__(self, "category", self.category or DEFAULT_CATEGORY)
        object.__setattr__(self, "quantity", quantity)
        object.__setattr__(self, "cost_basis", cost_basis)
