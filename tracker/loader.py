"""
Load base holdings from a JSON or CSV file.

Expects one record per symbol with symbol, name, market, category, quantity,
cost_basis. Column names are case-insensitive and common aliases are accepted.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pandas as pd

from folio_core.errors import InvalidHolding, MalformedRecord
from folio_core.holding import DEFAULT_CATEGORY, Holding, Market

COLUMNS = ("symbol", "name", "market", "category", "quantity", "cost_basis")
NUMERIC = ("quantity", "cost_basis")


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Lowercase column names; map aliases (qty, cost, ticker, ...) to canonical names."""
    out = df.copy()
    out.columns = [str(c).lower().strip() for c in out.columns]
    renames = {
        "ticker": "symbol",
        "code": "symbol",
        "qty": "quantity",
        "shares": "quantity",
        "cost": "cost_basis",
        "costbasis": "cost_basis",
        "avg_cost": "cost_basis",
        "sector": "category",
    }
    out = out.rename(columns={k: v for k, v in renames.items() if k in out.columns and v not in out.columns})
    return out


def _text(value: Any) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _numeric(series: pd.Series, column: str) -> pd.Series:
    """Coerce to float; blanks become 0, anything unparseable is malformed."""
    blank = series.isna() | (series.astype(str).str.strip() == "")
    values = pd.to_numeric(series.where(~blank), errors="coerce")
    bad = values.isna() & ~blank
    if bad.any():
        raw = series[bad].iloc[0]
        raise MalformedRecord(f"{column} must be numeric, got {raw!r}")
    return values.fillna(0.0).astype(float)


def holdings_from_frame(df: pd.DataFrame) -> list[Holding]:
    """
    Build Holding records from a DataFrame.

    Missing optional fields default to name=symbol, market=US, category=other,
    quantity=0, cost_basis=0. Duplicate symbols raise InvalidHolding.
    """
    out = _normalize_columns(df)
    if "symbol" not in out.columns:
        raise MalformedRecord("holdings data has no symbol column")
    for col in NUMERIC:
        out[col] = _numeric(out[col], col) if col in out.columns else 0.0

    holdings: list[Holding] = []
    seen: set[str] = set()
    for record in out.to_dict(orient="records"):
        holding = Holding(
            symbol=_text(record.get("symbol")),
            name=_text(record.get("name")),
            market=Market.parse(_text(record.get("market")), Market.US),
            category=_text(record.get("category")) or DEFAULT_CATEGORY,
            quantity=float(record["quantity"]),
            cost_basis=float(record["cost_basis"]),
        )
        if holding.symbol in seen:
            raise InvalidHolding(f"duplicate holding for symbol {holding.symbol}")
        seen.add(holding.symbol)
        holdings.append(holding)
    return holdings


def load_holdings(path: str | Path) -> list[Holding]:
    """
    Load holdings from a .json (list of records) or .csv file.

    Parameters
    ----------
    path : str or Path
        Holdings file. Suffix selects the parser.

    Returns
    -------
    list of Holding
        In file order.
    """
    path = Path(path)
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, dtype=str)
    else:
        with path.open(encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise MalformedRecord(f"{path}: expected a JSON list of holdings")
        df = pd.DataFrame.from_records(records)
    if df.empty:
        return []
    return holdings_from_frame(df)
