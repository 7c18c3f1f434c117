"""
Quote layer: source abstraction plus static and HTTP adapters.

QuoteSource interface; StaticQuoteSource for offline use; TwelveData (US) and
Yahoo (HK) over httpx; MarketRouter to pick one per market.
"""

from folio_core.quotes.base import QuoteSource
from folio_core.quotes.providers import HttpQuoteSource, TwelveDataQuoteSource, YahooQuoteSource
from folio_core.quotes.router import MarketRouter
from folio_core.quotes.static import StaticQuoteSource

__all__ = [
    "QuoteSource",
    "HttpQuoteSource",
    "StaticQuoteSource",
    "TwelveDataQuoteSource",
    "YahooQuoteSource",
    "MarketRouter",
]
