"""
HTTP quote providers: TwelveData for US listings, Yahoo Finance for HK.

One request per symbol, no retry. Every failure (transport, HTTP status,
unexpected payload) surfaces as QuoteError so callers can count it and move on.
Pass an httpx.Client to control transport and timeouts (tests use MockTransport).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from folio_core.errors import QuoteError
from folio_core.holding import Market
from folio_core.quotes.base import QuoteSource
from folio_core.validation import is_valid_price, normalize_symbol

logger = logging.getLogger(__name__)

TWELVE_DATA_PRICE_URL = "https://api.twelvedata.com/price"
YAHOO_QUOTE_URL = "https://query1.finance.yahoo.com/v7/finance/quote"
DEFAULT_TIMEOUT = 10.0


class HttpQuoteSource(QuoteSource):
    """Shared plumbing: owns (or borrows) an httpx.Client and turns errors into QuoteError."""

    def __init__(self, client: httpx.Client | None = None, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def _get_json(self, url: str, params: dict[str, str], symbol: str) -> Any:
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise QuoteError(f"{type(self).__name__}: request for {symbol} failed: {exc}") from exc
        except ValueError as exc:
            raise QuoteError(f"{type(self).__name__}: invalid JSON for {symbol}") from exc

    def _as_price(self, raw: Any, symbol: str) -> float:
        try:
            price = float(raw)
        except (TypeError, ValueError) as exc:
            raise QuoteError(f"{type(self).__name__}: no price for {symbol}") from exc
        if not is_valid_price(price):
            raise QuoteError(f"{type(self).__name__}: invalid price {raw!r} for {symbol}")
        return price

    def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            self._client.close()


class TwelveDataQuoteSource(HttpQuoteSource):
    """
    TwelveData /price endpoint. Response: {"price": "123.45"}; errors come back
    as {"code": ..., "message": ...} with no price field.
    """

    def __init__(
        self,
        api_key: str,
        client: httpx.Client | None = None,
        *,
        base_url: str = TWELVE_DATA_PRICE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if not api_key:
            raise ValueError("TwelveData API key is required")
        super().__init__(client, timeout=timeout)
        self._api_key = api_key
        self._base_url = base_url

    def get_price(self, symbol: str, market: Market = Market.US) -> float:
        key = normalize_symbol(symbol)
        payload = self._get_json(self._base_url, {"symbol": key, "apikey": self._api_key}, key)
        if not isinstance(payload, dict) or not payload.get("price"):
            message = payload.get("message") if isinstance(payload, dict) else None
            raise QuoteError(f"TwelveData: no price for {key}" + (f" ({message})" if message else ""))
        return self._as_price(payload["price"], key)


class YahooQuoteSource(HttpQuoteSource):
    """
    Yahoo Finance v7 quote endpoint. Symbols get an exchange suffix (".HK" by default).
    Reads quoteResponse.result[0].regularMarketPrice.
    """

    def __init__(
        self,
        suffix: str = ".HK",
        client: httpx.Client | None = None,
        *,
        base_url: str = YAHOO_QUOTE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__(client, timeout=timeout)
        self._suffix = suffix
        self._base_url = base_url

    def _yahoo_symbol(self, symbol: str) -> str:
        if self._suffix and not symbol.endswith(self._suffix.upper()):
            return f"{symbol}{self._suffix.upper()}"
        return symbol

    def get_price(self, symbol: str, market: Market = Market.HK) -> float:
        key = normalize_symbol(symbol)
        payload = self._get_json(self._base_url, {"symbols": self._yahoo_symbol(key)}, key)
        try:
            quote = payload["quoteResponse"]["result"][0]
        except (KeyError, IndexError, TypeError) as exc:
            raise QuoteError(f"Yahoo: no quote for {key}") from exc
        raw = quote.get("regularMarketPrice") if isinstance(quote, dict) else None
        if raw is None:
            raise QuoteError(f"Yahoo: no regularMarketPrice for {key}")
        return self._as_price(raw, key)
