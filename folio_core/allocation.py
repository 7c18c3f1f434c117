"""
Allocation grouper: market value by category, market or symbol as % of total.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

import numpy as np

from folio_core.aggregate import PriceMap, lookup_price, normalize_prices
from folio_core.position import Position

# Emitted when nothing has value, so a chart still has something to draw.
PLACEHOLDER_KEY = "unallocated"


@dataclass(frozen=True)
class AllocationGroup:
    """One slice. percent_of_total is on a 0-100 scale."""

    key: str
    value: float
    percent_of_total: float


KeyFn = Callable[[Position], str]


def by_symbol(position: Position) -> str:
    return position.symbol


def by_market(position: Position) -> str:
    return position.market.value


def by_category(position: Position) -> str:
    return position.category


KEY_FUNCTIONS: dict[str, KeyFn] = {
    "symbol": by_symbol,
    "market": by_market,
    "category": by_category,
}


def group(
    positions: Iterable[Position] | Mapping[str, Position],
    price_map: PriceMap,
    key_fn: KeyFn = by_category,
    *,
    placeholder: bool = True,
) -> list[AllocationGroup]:
    """
    Sum market value per key and express each group as a share of the total.

    Unpriced and flat positions contribute nothing. Zero-value groups are
    dropped; if none remain and placeholder is True, a single
    PLACEHOLDER_KEY group of value 1 with 0% is returned.
    Result is ordered by value (largest first), then key.
    """
    if isinstance(positions, Mapping):
        positions = positions.values()
    price_map = normalize_prices(price_map)

    sums: dict[str, float] = {}
    for position in sorted(positions, key=lambda p: p.symbol):
        price = lookup_price(price_map, position.symbol)
        value = position.quantity * price if price is not None and position.quantity > 0 else 0.0
        key = key_fn(position)
        sums[key] = sums.get(key, 0.0) + value

    keys = [k for k, v in sums.items() if v > 0]
    if not keys:
        return [AllocationGroup(key=PLACEHOLDER_KEY, value=1.0, percent_of_total=0.0)] if placeholder else []

    values = np.array([sums[k] for k in keys], dtype=float)
    total = float(values.sum())
    percents = values / total * 100.0
    groups = [
        AllocationGroup(key=k, value=float(v), percent_of_total=float(p))
        for k, v, p in zip(keys, values, percents)
    ]
    groups.sort(key=lambda g: (-g.value, g.key))
    return groups
