"""
Market router: pick a quote source per market.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from folio_core.holding import Market
from folio_core.quotes.base import QuoteSource

logger = logging.getLogger(__name__)


class MarketRouter(QuoteSource):
    """
    Dispatch get_price to routes[market], falling back to default.
    E.g. HK -> YahooQuoteSource, everything else -> TwelveDataQuoteSource.
    """

    def __init__(self, routes: Mapping[Market, QuoteSource], default: QuoteSource) -> None:
        self._routes = dict(routes)
        self._default = default

    def source_for(self, market: Market) -> QuoteSource:
        return self._routes.get(market, self._default)

    def get_price(self, symbol: str, market: Market = Market.US) -> float:
        source = self.source_for(market)
        logger.debug("Routing %s (%s) to %s", symbol, market.value, type(source).__name__)
        return source.get_price(symbol, market)

    def close(self) -> None:
        """Close every routed source and the default, each once."""
        sources: list[QuoteSource] = []
        for source in [*self._routes.values(), self._default]:
            if not any(source is seen for seen in sources):
                sources.append(source)
        for source in sources:
            source.close()
