"""
Offline portfolio summary: sample holdings + a few trades + fixed prices.

Demonstrates: load holdings → record trades → reconcile → aggregate → group → report.
No network; swap StaticQuoteSource for build_quote_source(load_settings()) to go live.
"""

import logging
import tempfile
from pathlib import Path

from folio_core.quotes import StaticQuoteSource
from tracker import PortfolioTracker, TradeLedger, load_holdings, print_report


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    holdings_path = Path(__file__).resolve().parent / "data" / "data.json"

    # Fixed prices; 0941 is left out to show a failed quote
    prices = StaticQuoteSource({
        "AAPL": 228.5,
        "MSFT": 415.0,
        "XOM": 112.3,
        "0700": 385.2,
        "NVDA": 131.4,
    })

    with tempfile.TemporaryDirectory() as tmp:
        ledger = TradeLedger(Path(tmp) / "portfolio_trades_v2.json")
        tracker = PortfolioTracker(
            lambda: load_holdings(holdings_path),
            ledger,
            prices,
            pause=0.0,
            group_key="category",
        )

        tracker.record_trade("AAPL", 10, 210.0)   # average up
        tracker.record_trade("XOM", -15, 118.0)   # close out
        tracker.record_trade("nvda", 25, 120.0)   # not in holdings: synthetic position

        snapshot = tracker.refresh()
        print_report(snapshot)


if __name__ == "__main__":
    main()
