"""
folio-core: Deterministic position reconciliation for a personal portfolio.

Base holdings + trade ledger -> positions (weighted-average cost) -> P&L and
allocation. Pure functions over immutable records; quotes come in as a price map.
"""

__version__ = "0.1.0"

from folio_core.errors import InvalidHolding, InvalidTrade, MalformedRecord, PortfolioError, QuoteError
from folio_core.holding import Holding, Market
from folio_core.trade import Trade
from folio_core.position import Position
from folio_core.validation import validate_trade
from folio_core.reconcile import apply_trade, reconcile, replay
from folio_core.aggregate import PortfolioSummary, PositionRow, Totals, aggregate
from folio_core.allocation import AllocationGroup, by_category, by_market, by_symbol, group

__all__ = [
    "PortfolioError",
    "MalformedRecord",
    "InvalidHolding",
    "InvalidTrade",
    "QuoteError",
    "Holding",
    "Market",
    "Trade",
    "Position",
    "validate_trade",
    "apply_trade",
    "reconcile",
    "replay",
    "aggregate",
    "PortfolioSummary",
    "PositionRow",
    "Totals",
    "group",
    "AllocationGroup",
    "by_category",
    "by_market",
    "by_symbol",
]
