"""
Input checks shared by the data model and the ledger boundary.

Shape checks (is it a number, is it a string) raise MalformedRecord.
Business checks on a trade submission raise InvalidTrade.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import TYPE_CHECKING, Any

from folio_core.errors import InvalidTrade, MalformedRecord

if TYPE_CHECKING:
    from folio_core.trade import Trade


def normalize_symbol(symbol: Any) -> str:
    """Strip and uppercase. Symbols are case-insensitive keys."""
    if not isinstance(symbol, str):
        raise MalformedRecord(f"symbol must be a string, got {type(symbol).__name__}")
    return symbol.strip().upper()


def require_number(value: Any, field_name: str) -> float:
    """Return value as float. Bools and non-numeric values are malformed."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedRecord(f"{field_name} must be numeric, got {value!r}")
    return float(value)


def is_valid_price(price: Any) -> bool:
    """True for a finite, positive number. Anything else counts as a missing quote."""
    if price is None or isinstance(price, bool) or not isinstance(price, Real):
        return False
    return math.isfinite(price) and price > 0


def validate_trade(trade: "Trade") -> "Trade":
    """
    Reject a trade before it enters the ledger.

    Returns the trade unchanged so calls can be chained.
    """
    if not trade.symbol:
        raise InvalidTrade("trade symbol must not be empty")
    if not math.isfinite(trade.quantity):
        raise InvalidTrade(f"{trade.symbol}: quantity must be finite, got {trade.quantity}")
    if trade.quantity == 0:
        raise InvalidTrade(f"{trade.symbol}: quantity must be nonzero")
    if not is_valid_price(trade.price):
        raise InvalidTrade(f"{trade.symbol}: price must be finite and > 0, got {trade.price}")
    return trade
