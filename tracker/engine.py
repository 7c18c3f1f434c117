"""
Tracker engine: one refresh of the portfolio.

Loads holdings → loads ledger → reconcile → fetch prices for open positions
→ aggregate → group. Everything after the loads is the pure folio_core pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from folio_core import Holding, PortfolioSummary, Position, Trade, aggregate, group, reconcile
from folio_core.allocation import KEY_FUNCTIONS, AllocationGroup
from folio_core.quotes.base import QuoteSource

from tracker.config import Settings, build_quote_source
from tracker.ledger import TradeLedger
from tracker.loader import load_holdings
from tracker.prices import fetch_prices

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Everything one refresh produced. Plain data for presentation consumers."""

    positions: dict[str, Position]
    prices: dict[str, float | None]
    summary: PortfolioSummary
    allocation: list[AllocationGroup] = field(default_factory=list)
    failed: tuple[str, ...] = ()

    @property
    def priced_positions(self) -> dict[str, Position]:
        """Positions with their fetched price attached (None when the fetch failed)."""
        return {s: p.with_price(self.prices.get(s)) for s, p in self.positions.items()}


class PortfolioTracker:
    """
    Wires holdings, the trade ledger and a quote source into refresh().
    """

    def __init__(
        self,
        holdings_loader: Callable[[], Sequence[Holding]],
        ledger: TradeLedger,
        quote_source: QuoteSource,
        *,
        batch_size: int = 6,
        pause: float = 1.5,
        group_key: str = "symbol",
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        if group_key not in KEY_FUNCTIONS:
            raise ValueError(f"group_key must be one of {sorted(KEY_FUNCTIONS)}, got {group_key!r}")
        self.holdings_loader = holdings_loader
        self.ledger = ledger
        self.quote_source = quote_source
        self.batch_size = batch_size
        self.pause = pause
        self.group_key = group_key
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "PortfolioTracker":
        holdings_path = Path(settings.holdings_path)
        return cls(
            lambda: load_holdings(holdings_path),
            TradeLedger(settings.ledger_path),
            build_quote_source(settings),
            batch_size=settings.batch_size,
            pause=settings.batch_pause,
            **kwargs,
        )

    def record_trade(self, symbol: str, quantity: float, price: float) -> Trade:
        """Append a validated trade; it shows up on the next refresh()."""
        return self.ledger.append(symbol, quantity, price)

    def clear_trades(self) -> None:
        self.ledger.clear()

    def close(self) -> None:
        """Close the quote source (and its HTTP clients)."""
        self.quote_source.close()

    def __enter__(self) -> "PortfolioTracker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def refresh(self) -> Snapshot:
        base = list(self.holdings_loader())
        trades = self.ledger.load()
        positions = reconcile(base, trades)
        logger.info("Reconciled %d holdings and %d trades into %d positions", len(base), len(trades), len(positions))

        open_positions = [p for p in positions.values() if p.quantity > 0]
        fetch_kwargs = {"batch_size": self.batch_size, "pause": self.pause}
        if self._sleep is not None:
            fetch_kwargs["sleep"] = self._sleep
        fetched = fetch_prices(open_positions, self.quote_source, **fetch_kwargs)

        summary = aggregate(positions, fetched.prices)
        allocation = group(positions, fetched.prices, KEY_FUNCTIONS[self.group_key])
        if summary.failed_count:
            logger.warning("%d symbols failed to price: %s", summary.failed_count, ", ".join(summary.failed_symbols))
        return Snapshot(
            positions=positions,
            prices=fetched.prices,
            summary=summary,
            allocation=allocation,
            failed=fetched.failed,
        )
