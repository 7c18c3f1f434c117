"""
Portfolio tracker on top of folio-core.

Loads holdings and the trade ledger, fetches quotes in batches, runs the
reconcile → aggregate → group pipeline and reports the result.
"""

from tracker.config import Settings, build_quote_source, load_settings
from tracker.engine import PortfolioTracker, Snapshot
from tracker.ledger import TradeLedger
from tracker.loader import holdings_from_frame, load_holdings
from tracker.prices import PriceFetch, fetch_prices
from tracker.report import allocation_frame, format_money, format_pct, positions_frame, print_report

__all__ = [
    "Settings",
    "load_settings",
    "build_quote_source",
    "PortfolioTracker",
    "Snapshot",
    "TradeLedger",
    "load_holdings",
    "holdings_from_frame",
    "PriceFetch",
    "fetch_prices",
    "format_money",
    "format_pct",
    "positions_frame",
    "allocation_frame",
    "print_report",
]
