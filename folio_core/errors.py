"""
Error taxonomy for the core.

Only structural problems are errors. Missing prices, unknown symbols and
oversells are normal states and show up in the outputs instead.
"""


class PortfolioError(Exception):
    """Base class for all folio_core errors."""


class MalformedRecord(PortfolioError, TypeError):
    """A record has the wrong shape (e.g. non-numeric quantity or price)."""


class InvalidHolding(PortfolioError, ValueError):
    """A base holding is unusable: empty symbol, negative amounts, duplicate symbol."""


class InvalidTrade(PortfolioError, ValueError):
    """A trade is rejected at submission: zero quantity, bad price or empty symbol."""


class QuoteError(PortfolioError):
    """A quote source could not produce a price for a symbol."""
