"""
Portfolio report: print the summary and expose it as DataFrames.
"""

from __future__ import annotations

import math

import pandas as pd

from folio_core.aggregate import PortfolioSummary
from folio_core.allocation import AllocationGroup

from tracker.engine import Snapshot

POSITION_COLUMNS = [
    "symbol",
    "name",
    "market",
    "category",
    "quantity",
    "cost_basis",
    "price",
    "cost_value",
    "market_value",
    "pnl",
    "pnl_pct",
]


def format_money(value: float | None) -> str:
    """Two decimals with thousands separators; '--' when missing or not finite."""
    if value is None or not math.isfinite(value):
        return "--"
    return f"{value:,.2f}"


def format_pct(ratio: float | None) -> str:
    """Ratio as percentage (0.1234 -> '12.34%'); '0.00%' when missing or not finite."""
    if ratio is None or not math.isfinite(ratio):
        return "0.00%"
    return f"{ratio * 100:.2f}%"


def positions_frame(summary: PortfolioSummary) -> pd.DataFrame:
    """One row per open position; unpriced positions have NaN monetary columns."""
    records = [
        {
            "symbol": r.symbol,
            "name": r.name,
            "market": r.market.value,
            "category": r.category,
            "quantity": r.quantity,
            "cost_basis": r.cost_basis,
            "price": r.price,
            "cost_value": r.cost_value,
            "market_value": r.market_value,
            "pnl": r.pnl,
            "pnl_pct": r.pnl_pct,
        }
        for r in summary.rows
    ]
    df = pd.DataFrame.from_records(records, columns=POSITION_COLUMNS)
    numeric = POSITION_COLUMNS[4:]
    df[numeric] = df[numeric].astype(float)
    return df.set_index("symbol")


def allocation_frame(groups: list[AllocationGroup]) -> pd.DataFrame:
    df = pd.DataFrame.from_records(
        [{"key": g.key, "value": g.value, "percent_of_total": g.percent_of_total} for g in groups],
        columns=["key", "value", "percent_of_total"],
    )
    return df.set_index("key")


def print_report(snapshot: Snapshot) -> PortfolioSummary:
    """
    Print positions, totals and allocation for a refresh.

    Returns
    -------
    PortfolioSummary
        The summary that was printed (e.g. for programmatic use).
    """
    summary = snapshot.summary
    totals = summary.totals
    print("--- Positions ---")
    for r in summary.rows:
        print(
            f"{r.symbol:<8} {r.name[:20]:<20} qty {r.quantity:>10g}  cost {format_money(r.cost_basis):>12}"
            f"  price {format_money(r.price):>12}  value {format_money(r.market_value):>14}"
            f"  pnl {format_money(r.pnl):>12} ({format_pct(r.pnl_pct)})"
        )
    print("--- Portfolio Summary ---")
    print(f"Total value:     {format_money(totals.total_value)}")
    print(f"Total cost:      {format_money(totals.total_cost)}")
    print(f"Total PnL:       {format_money(totals.total_pnl)}")
    print(f"Total return:    {format_pct(totals.total_pnl_pct)}")
    print(f"Holdings:        {summary.holding_count}")
    print(f"Failed quotes:   {summary.failed_count}")
    print("--- Allocation ---")
    for g in snapshot.allocation:
        print(f"{g.key:<12} {format_money(g.value):>14}  {g.percent_of_total:6.2f}%")
    print("-------------------------")
    return summary
