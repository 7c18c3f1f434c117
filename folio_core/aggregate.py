"""
Portfolio aggregator: per-position and total value, cost and P&L.

Flat positions are skipped entirely. Positions without a usable price are
listed (price None) and counted as failed, but never enter the totals.
Percentages are ratios (0.25 == 25%) and are 0.0 when the cost is 0.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from folio_core.holding import Market
from folio_core.position import Position
from folio_core.validation import is_valid_price, normalize_symbol

PriceMap = Mapping[str, "float | None"]


def lookup_price(price_map: PriceMap, symbol: str) -> float | None:
    """Price for symbol, or None if absent or unusable (fetch failure)."""
    price = price_map.get(normalize_symbol(symbol))
    if not is_valid_price(price):
        return None
    return float(price)


def normalize_prices(price_map: PriceMap) -> dict[str, "float | None"]:
    """Copy of price_map keyed by uppercase symbol."""
    return {normalize_symbol(symbol): price for symbol, price in price_map.items()}


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / denominator


@dataclass(frozen=True)
class PositionRow:
    """One listing line. Monetary fields are None when the price is missing."""

    symbol: str
    name: str
    market: Market
    category: str
    quantity: float
    cost_basis: float
    price: float | None
    cost_value: float
    market_value: float | None
    pnl: float | None
    pnl_pct: float | None

    @property
    def is_priced(self) -> bool:
        return self.price is not None


@dataclass(frozen=True)
class Totals:
    total_value: float = 0.0
    total_cost: float = 0.0
    total_pnl: float = 0.0
    total_pnl_pct: float = 0.0


@dataclass(frozen=True)
class PortfolioSummary:
    """Rows for every open position, totals over the priced ones."""

    rows: tuple[PositionRow, ...] = ()
    totals: Totals = field(default_factory=Totals)
    failed_symbols: tuple[str, ...] = ()

    @property
    def failed_count(self) -> int:
        return len(self.failed_symbols)

    @property
    def holding_count(self) -> int:
        return len(self.rows)

    @property
    def priced_rows(self) -> tuple[PositionRow, ...]:
        return tuple(r for r in self.rows if r.is_priced)


def _row(position: Position, price: float | None) -> PositionRow:
    cost_value = position.cost_value
    if price is None:
        market_value = pnl = pnl_pct = None
    else:
        market_value = position.quantity * price
        pnl = market_value - cost_value
        pnl_pct = safe_ratio(pnl, cost_value)
    return PositionRow(
        symbol=position.symbol,
        name=position.name,
        market=position.market,
        category=position.category,
        quantity=position.quantity,
        cost_basis=position.cost_basis,
        price=price,
        cost_value=cost_value,
        market_value=market_value,
        pnl=pnl,
        pnl_pct=pnl_pct,
    )


def aggregate(positions: Iterable[Position] | Mapping[str, Position], price_map: PriceMap) -> PortfolioSummary:
    """
    Compute the listing and totals for a position set.

    Parameters
    ----------
    positions : iterable of Position, or mapping symbol -> Position
        Output of reconcile(). Any price attached to a Position is ignored;
        price_map is the single source of prices.
    price_map : mapping symbol -> price or None
        Fetched quotes. Missing, None, non-finite or non-positive entries are failures.

    Returns
    -------
    PortfolioSummary
        rows (symbol order), totals, failed_symbols.
    """
    if isinstance(positions, Mapping):
        positions = positions.values()
    price_map = normalize_prices(price_map)

    rows: list[PositionRow] = []
    failed: list[str] = []
    total_value = 0.0
    total_cost = 0.0
    for position in sorted(positions, key=lambda p: p.symbol):
        if position.quantity <= 0:
            continue
        price = lookup_price(price_map, position.symbol)
        row = _row(position, price)
        rows.append(row)
        if row.market_value is None:
            failed.append(position.symbol)
            continue
        total_value += row.market_value
        total_cost += row.cost_value

    total_pnl = total_value - total_cost
    totals = Totals(
        total_value=total_value,
        total_cost=total_cost,
        total_pnl=total_pnl,
        total_pnl_pct=safe_ratio(total_pnl, total_cost),
    )
    return PortfolioSummary(rows=tuple(rows), totals=totals, failed_symbols=tuple(failed))
