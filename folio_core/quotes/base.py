"""
Quote source abstraction.

QuoteSource ABC: get_price(symbol, market). Static (in-memory) and HTTP
adapters implement it; the core only ever sees the resulting price map.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from folio_core.holding import Market


class QuoteSource(ABC):
    """
    Abstract price provider. Implementations: StaticQuoteSource, TwelveDataQuoteSource,
    YahooQuoteSource, MarketRouter.
    """

    @abstractmethod
    def get_price(self, symbol: str, market: Market = Market.US) -> float:
        """
        Return the latest price for symbol on market.
        Raise QuoteError if no usable price is available.
        """
        ...

    def close(self) -> None:
        """Release any resources (HTTP clients). No-op by default."""

    def __enter__(self) -> "QuoteSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
