"""
Position: current state of one symbol, derived from a Holding plus trades.

Not persisted. Recomputed from scratch on every reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from folio_core.holding import DEFAULT_CATEGORY, Holding, Market


@dataclass(frozen=True)
class Position:
    """
    Quantity and weighted-average cost for one symbol.

    quantity >= 0 always; cost_basis is treated as 0 when quantity is 0.
    price is None until a quote is attached (see with_price).
    """

    symbol: str
    name: str
    market: Market
    category: str
    quantity: float = 0.0
    cost_basis: float = 0.0
    price: float | None = None

    @classmethod
    def from_holding(cls, holding: Holding) -> "Position":
        return cls(
            symbol=holding.symbol,
            name=holding.name,
            market=holding.market,
            category=holding.category,
            quantity=holding.quantity,
            cost_basis=holding.cost_basis,
        )

    @classmethod
    def synthetic(cls, symbol: str, cost_basis: float) -> "Position":
        """Position for a traded symbol that is not in the base holdings."""
        return cls(
            symbol=symbol,
            name=symbol,
            market=Market.OTHER,
            category=DEFAULT_CATEGORY,
            quantity=0.0,
            cost_basis=cost_basis,
        )

    @property
    def is_flat(self) -> bool:
        return self.quantity == 0

    @property
    def cost_value(self) -> float:
        """Total cost of the position (quantity * cost_basis)."""
        return self.quantity * self.cost_basis

    @property
    def market_value(self) -> float | None:
        """quantity * price, or None when no price is attached."""
        if self.price is None:
            return None
        return self.quantity * self.price

    def with_price(self, price: float | None) -> "Position":
        return replace(self, price=price)
