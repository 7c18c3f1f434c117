"""
Batched price loading through a QuoteSource.

Symbols are fetched in batches (concurrently within a batch) with a pause
between batches to stay under provider rate limits. A failed quote is logged
and recorded as None; it never aborts the run.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Protocol

from folio_core.errors import QuoteError
from folio_core.holding import Market
from folio_core.quotes.base import QuoteSource

logger = logging.getLogger(__name__)


class Quotable(Protocol):
    """Anything with a symbol and a market (Holding, Position)."""

    symbol: str
    market: Market


@dataclass(frozen=True)
class PriceFetch:
    """Result of a fetch run: symbol -> price (None on failure), plus the failed symbols."""

    prices: dict[str, float | None] = field(default_factory=dict)
    failed: tuple[str, ...] = ()

    @property
    def failed_count(self) -> int:
        return len(self.failed)


def _fetch_one(source: QuoteSource, item: Quotable) -> float | None:
    try:
        return source.get_price(item.symbol, item.market)
    except QuoteError as exc:
        logger.warning("Price fetch failed for %s: %s", item.symbol, exc)
        return None
    except Exception:
        # A broken source must not abort the other symbols of the run.
        logger.exception("Unexpected error fetching price for %s", item.symbol)
        return None


def fetch_prices(
    items: Iterable[Quotable],
    source: QuoteSource,
    *,
    batch_size: int = 6,
    pause: float = 1.5,
    sleep: Callable[[float], None] = time.sleep,
) -> PriceFetch:
    """
    Fetch a price for every distinct symbol in items.

    Parameters
    ----------
    items : iterable of Holding or Position
        Symbols to quote; duplicates are fetched once (first market wins).
    source : QuoteSource
        Provider (e.g. MarketRouter).
    batch_size : int
        Max concurrent requests per batch (default 6).
    pause : float
        Seconds to wait between batches (default 1.5). Not applied after the last batch.
    sleep : callable
        Injected for tests.

    Returns
    -------
    PriceFetch
        prices in input order and the symbols that failed.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    unique: dict[str, Quotable] = {}
    for item in items:
        unique.setdefault(item.symbol, item)
    pending = list(unique.values())

    prices: dict[str, float | None] = {}
    with ThreadPoolExecutor(max_workers=batch_size) as pool:
        for start in range(0, len(pending), batch_size):
            if start > 0 and pause > 0:
                sleep(pause)
            batch = pending[start : start + batch_size]
            logger.info("Loading prices %d/%d", start, len(pending))
            results = pool.map(lambda item: _fetch_one(source, item), batch)
            for item, price in zip(batch, results):
                prices[item.symbol] = price

    failed = tuple(symbol for symbol, price in prices.items() if price is None)
    logger.info("Loaded %d prices, %d failed", len(prices) - len(failed), len(failed))
    return PriceFetch(prices=prices, failed=failed)
