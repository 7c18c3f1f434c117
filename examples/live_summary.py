"""
Live portfolio summary: quotes from TwelveData (US) and Yahoo (HK).

Set FOLIO_TWELVE_DATA_API_KEY; optionally FOLIO_HOLDINGS_PATH / FOLIO_LEDGER_PATH.
Quotes are fetched in batches (FOLIO_QUOTE_BATCH_SIZE, default 6) with a pause in between.
"""

import logging

from tracker import PortfolioTracker, load_settings, print_report


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = load_settings()
    with PortfolioTracker.from_settings(settings, group_key="symbol") as tracker:
        snapshot = tracker.refresh()
    print_report(snapshot)


if __name__ == "__main__":
    main()
