"""
Static quote source: serves prices from an in-memory dict.

No network. Used for offline runs, examples and tests.
"""

from __future__ import annotations

from collections.abc import Mapping

from folio_core.errors import QuoteError
from folio_core.holding import Market
from folio_core.quotes.base import QuoteSource
from folio_core.validation import is_valid_price, normalize_symbol


class StaticQuoteSource(QuoteSource):
    """Looks prices up in a symbol -> price mapping. Missing or invalid prices raise QuoteError."""

    def __init__(self, prices: Mapping[str, float] | None = None) -> None:
        self._prices = {normalize_symbol(s): p for s, p in (prices or {}).items()}

    def set_price(self, symbol: str, price: float) -> None:
        self._prices[normalize_symbol(symbol)] = price

    def get_price(self, symbol: str, market: Market = Market.US) -> float:
        key = normalize_symbol(symbol)
        price = self._prices.get(key)
        if not is_valid_price(price):
            raise QuoteError(f"No price for {key}")
        return float(price)
