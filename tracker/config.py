"""
Settings from environment variables.

All names are prefixed FOLIO_. The TwelveData key has no default; without it
only HK quotes (Yahoo) are fetched live and US symbols come back as failures.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from folio_core.holding import Market
from folio_core.quotes import MarketRouter, QuoteSource, StaticQuoteSource, TwelveDataQuoteSource, YahooQuoteSource

logger = logging.getLogger(__name__)

API_KEY_ENV = "FOLIO_TWELVE_DATA_API_KEY"
HOLDINGS_PATH_ENV = "FOLIO_HOLDINGS_PATH"
LEDGER_PATH_ENV = "FOLIO_LEDGER_PATH"
BATCH_SIZE_ENV = "FOLIO_QUOTE_BATCH_SIZE"
BATCH_PAUSE_ENV = "FOLIO_QUOTE_BATCH_PAUSE"

# Ledger namespace; also the default ledger file stem.
TRADE_LEDGER_KEY = "portfolio_trades_v2"


@dataclass(frozen=True)
class Settings:
    twelve_data_api_key: str | None = None
    holdings_path: Path = Path("data.json")
    ledger_path: Path = Path(f"{TRADE_LEDGER_KEY}.json")
    batch_size: int = 6
    batch_pause: float = 1.5


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read Settings from environ (default: os.environ)."""
    env = os.environ if environ is None else environ
    defaults = Settings()
    return Settings(
        twelve_data_api_key=env.get(API_KEY_ENV) or None,
        holdings_path=Path(env.get(HOLDINGS_PATH_ENV) or defaults.holdings_path),
        ledger_path=Path(env.get(LEDGER_PATH_ENV) or defaults.ledger_path),
        batch_size=_int_env(env, BATCH_SIZE_ENV, defaults.batch_size),
        batch_pause=_float_env(env, BATCH_PAUSE_ENV, defaults.batch_pause),
    )


def build_quote_source(settings: Settings) -> QuoteSource:
    """HK -> Yahoo; everything else -> TwelveData (or an empty source when no key is set)."""
    if settings.twelve_data_api_key:
        default: QuoteSource = TwelveDataQuoteSource(settings.twelve_data_api_key)
    else:
        logger.warning("%s is not set; non-HK quotes will fail", API_KEY_ENV)
        default = StaticQuoteSource()
    return MarketRouter({Market.HK: YahooQuoteSource()}, default=default)
