"""
Tests for the quote layer: StaticQuoteSource, HTTP providers, MarketRouter, fetch_prices.
"""

import httpx
import pytest

from folio_core import Holding, Market, QuoteError
from folio_core.quotes import (
    MarketRouter,
    QuoteSource,
    StaticQuoteSource,
    TwelveDataQuoteSource,
    YahooQuoteSource,
)
from tracker.prices import fetch_prices


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class RecordingSource(QuoteSource):
    """Static prices; records every (symbol, market) asked for."""

    def __init__(self, prices):
        self.prices = prices
        self.calls = []

    def get_price(self, symbol, market=Market.US):
        self.calls.append((symbol, market))
        if symbol not in self.prices:
            raise QuoteError(f"no {symbol}")
        return self.prices[symbol]


# --- StaticQuoteSource ---


def test_static_source_returns_price():
    source = StaticQuoteSource({"aapl": 190.5})
    assert source.get_price("AAPL") == 190.5
    source.set_price("msft", 400)
    assert source.get_price("MSFT", Market.US) == 400.0


def test_static_source_missing_or_invalid_raises():
    source = StaticQuoteSource({"BAD": 0.0})
    with pytest.raises(QuoteError):
        source.get_price("AAPL")
    with pytest.raises(QuoteError):
        source.get_price("BAD")


# --- TwelveDataQuoteSource ---


def test_twelve_data_parses_price():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={"price": "189.91000"})

    source = TwelveDataQuoteSource("key123", client=_client(handler))
    assert source.get_price("aapl") == pytest.approx(189.91)
    assert seen["url"].params["symbol"] == "AAPL"
    assert seen["url"].params["apikey"] == "key123"
    assert seen["url"].host == "api.twelvedata.com"


def test_twelve_data_error_payload_raises():
    def handler(request):
        return httpx.Response(200, json={"code": 400, "message": "symbol not found", "status": "error"})

    source = TwelveDataQuoteSource("k", client=_client(handler))
    with pytest.raises(QuoteError, match="symbol not found"):
        source.get_price("ZZZZ")


def test_twelve_data_http_error_raises():
    source = TwelveDataQuoteSource("k", client=_client(lambda r: httpx.Response(429)))
    with pytest.raises(QuoteError):
        source.get_price("AAPL")


def test_twelve_data_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    source = TwelveDataQuoteSource("k", client=_client(handler))
    with pytest.raises(QuoteError):
        source.get_price("AAPL")


def test_twelve_data_requires_key():
    with pytest.raises(ValueError):
        TwelveDataQuoteSource("")


# --- YahooQuoteSource ---


def test_yahoo_parses_hk_quote():
    seen = {}

    def handler(request):
        seen["symbols"] = request.url.params["symbols"]
        return httpx.Response(200, json={"quoteResponse": {"result": [{"regularMarketPrice": 385.2}]}})

    source = YahooQuoteSource(client=_client(handler))
    assert source.get_price("0700", Market.HK) == pytest.approx(385.2)
    assert seen["symbols"] == "0700.HK"


def test_yahoo_empty_result_raises():
    def handler(request):
        return httpx.Response(200, json={"quoteResponse": {"result": []}})

    with pytest.raises(QuoteError):
        YahooQuoteSource(client=_client(handler)).get_price("9999")


def test_yahoo_invalid_json_raises():
    source = YahooQuoteSource(client=_client(lambda r: httpx.Response(200, text="<html>")))
    with pytest.raises(QuoteError):
        source.get_price("0700")


# --- MarketRouter ---


def test_router_dispatches_by_market():
    us = RecordingSource({"AAPL": 100.0})
    hk = RecordingSource({"0700": 300.0})
    router = MarketRouter({Market.HK: hk}, default=us)
    assert router.get_price("0700", Market.HK) == 300.0
    assert router.get_price("AAPL", Market.US) == 100.0
    assert router.source_for(Market.OTHER) is us
    assert hk.calls == [("0700", Market.HK)]
    assert us.calls == [("AAPL", Market.US)]


# --- fetch_prices ---


def test_fetch_prices_batches_and_failures():
    holdings = [Holding(symbol=s) for s in ("A", "B", "C", "D", "E")]
    source = RecordingSource({"A": 1.0, "B": 2.0, "D": 4.0, "E": 5.0})
    pauses = []
    result = fetch_prices(holdings, source, batch_size=2, pause=1.5, sleep=pauses.append)
    assert result.prices == {"A": 1.0, "B": 2.0, "C": None, "D": 4.0, "E": 5.0}
    assert list(result.prices) == ["A", "B", "C", "D", "E"]
    assert result.failed == ("C",)
    assert result.failed_count == 1
    assert pauses == [1.5, 1.5]


def test_fetch_prices_dedupes_symbols():
    source = RecordingSource({"A": 1.0})
    result = fetch_prices([Holding(symbol="A"), Holding(symbol="a")], source, sleep=lambda s: None)
    assert result.prices == {"A": 1.0}
    assert len(source.calls) == 1


def test_fetch_prices_passes_market():
    source = RecordingSource({"0700": 300.0})
    fetch_prices([Holding(symbol="0700", market=Market.HK)], source, sleep=lambda s: None)
    assert source.calls == [("0700", Market.HK)]


def test_fetch_prices_empty():
    result = fetch_prices([], StaticQuoteSource(), sleep=lambda s: None)
    assert result.prices == {}
    assert result.failed == ()


def test_fetch_prices_rejects_bad_batch_size():
    with pytest.raises(ValueError):
        fetch_prices([], StaticQuoteSource(), batch_size=0)


def test_fetch_prices_unexpected_error_counts_as_failure():
    class BrokenForB(RecordingSource):
        def get_price(self, symbol, market=Market.US):
            if symbol == "B":
                raise httpx.InvalidURL("bad url")
            return super().get_price(symbol, market)

    source = BrokenForB({"A": 1.0, "C": 3.0})
    result = fetch_prices([Holding(symbol=s) for s in "ABC"], source, sleep=lambda s: None)
    assert result.prices == {"A": 1.0, "B": None, "C": 3.0}
    assert result.failed == ("B",)


def test_http_source_invalid_url_raises_quote_error():
    def handler(request):
        raise httpx.InvalidURL("Invalid port")

    source = TwelveDataQuoteSource("k", client=_client(handler))
    with pytest.raises(QuoteError):
        source.get_price("AAPL")


# --- closing ---


class ClosingSource(StaticQuoteSource):
    def __init__(self):
        super().__init__({})
        self.closed = 0

    def close(self):
        self.closed += 1


def test_router_closes_each_source_once():
    hk = ClosingSource()
    us = ClosingSource()
    router = MarketRouter({Market.HK: hk, Market.OTHER: us}, default=us)
    with router:
        pass
    assert hk.closed == 1
    assert us.closed == 1


def test_http_source_closes_only_owned_client():
    borrowed = _client(lambda r: httpx.Response(200, json={"price": "1"}))
    TwelveDataQuoteSource("k", client=borrowed).close()
    assert not borrowed.is_closed
    owned = YahooQuoteSource()
    owned.close()
    assert owned._client.is_closed
