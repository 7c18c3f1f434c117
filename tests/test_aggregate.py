"""
Tests for folio_core aggregation and allocation: aggregate, group.
"""

import math
import random

import pytest

from folio_core import Holding, Market, Position, Trade, aggregate, by_category, by_market, by_symbol, group, reconcile
from folio_core.aggregate import lookup_price, safe_ratio
from folio_core.allocation import KEY_FUNCTIONS, PLACEHOLDER_KEY


def _position(symbol: str, quantity: float, cost_basis: float, **kwargs) -> Position:
    return Position.from_holding(Holding(symbol=symbol, quantity=quantity, cost_basis=cost_basis, **kwargs))


# --- helpers ---


def test_safe_ratio_zero_denominator():
    assert safe_ratio(5.0, 0.0) == 0.0
    assert safe_ratio(5.0, 2.0) == 2.5


def test_lookup_price_treats_bad_values_as_missing():
    prices = {"AAPL": 100.0, "BAD": math.nan, "ZERO": 0.0, "NONE": None}
    assert lookup_price(prices, "aapl") == 100.0
    assert lookup_price(prices, "BAD") is None
    assert lookup_price(prices, "ZERO") is None
    assert lookup_price(prices, "NONE") is None
    assert lookup_price(prices, "MISSING") is None


# --- aggregate ---


def test_aggregate_per_position_and_totals():
    positions = [_position("AAPL", 20, 150), _position("MSFT", 10, 300)]
    summary = aggregate(positions, {"AAPL": 200.0, "MSFT": 250.0})
    aapl, msft = summary.rows
    assert aapl.symbol == "AAPL"
    assert aapl.market_value == pytest.approx(4000.0)
    assert aapl.cost_value == pytest.approx(3000.0)
    assert aapl.pnl == pytest.approx(1000.0)
    assert aapl.pnl_pct == pytest.approx(1000.0 / 3000.0)
    assert msft.pnl == pytest.approx(-500.0)
    totals = summary.totals
    assert totals.total_value == pytest.approx(6500.0)
    assert totals.total_cost == pytest.approx(6000.0)
    assert totals.total_pnl == pytest.approx(500.0)
    assert totals.total_pnl_pct == pytest.approx(500.0 / 6000.0)
    assert summary.failed_count == 0


def test_aggregate_accepts_mapping():
    positions = reconcile([Holding(symbol="AAPL", quantity=1, cost_basis=10)], [])
    summary = aggregate(positions, {"AAPL": 12.0})
    assert summary.totals.total_value == pytest.approx(12.0)


def test_flat_position_excluded():
    base = [Holding(symbol="AAPL", quantity=20, cost_basis=150), Holding(symbol="MSFT", quantity=1, cost_basis=10)]
    positions = reconcile(base, [Trade(symbol="AAPL", quantity=-20, price=300)])
    summary = aggregate(positions, {"AAPL": 300.0, "MSFT": 10.0})
    assert [r.symbol for r in summary.rows] == ["MSFT"]
    assert summary.totals.total_value == pytest.approx(10.0)
    assert "AAPL" in positions


def test_missing_price_counted_as_failed():
    positions = [_position("AAPL", 10, 100), _position("MSFT", 5, 200)]
    summary = aggregate(positions, {"MSFT": 220.0})
    assert summary.failed_symbols == ("AAPL",)
    assert summary.failed_count == 1
    assert summary.totals.total_value == pytest.approx(1100.0)
    assert summary.totals.total_cost == pytest.approx(1000.0)
    aapl = summary.rows[0]
    assert aapl.price is None
    assert aapl.market_value is None
    assert aapl.pnl is None
    assert aapl.pnl_pct is None
    assert aapl.cost_value == pytest.approx(1000.0)
    assert [r.symbol for r in summary.priced_rows] == ["MSFT"]
    assert summary.holding_count == 2


def test_zero_total_cost_gives_zero_pct():
    summary = aggregate([_position("AAPL", 0, 0)], {"AAPL": 100.0})
    assert summary.rows == ()
    assert summary.totals.total_cost == 0.0
    assert summary.totals.total_pnl_pct == 0.0


def test_zero_cost_position_pct_is_zero():
    summary = aggregate([_position("GIFT", 10, 0)], {"GIFT": 5.0})
    row = summary.rows[0]
    assert row.pnl == pytest.approx(50.0)
    assert row.pnl_pct == 0.0
    assert summary.totals.total_pnl_pct == 0.0


def test_empty_portfolio():
    summary = aggregate([], {})
    assert summary.rows == ()
    assert summary.totals.total_value == 0.0
    assert summary.totals.total_pnl_pct == 0.0


def test_aggregate_price_keys_case_insensitive():
    summary = aggregate([_position("AAPL", 2, 10)], {"aapl": 15.0})
    assert summary.failed_count == 0
    assert summary.totals.total_value == pytest.approx(30.0)
    assert group([_position("AAPL", 2, 10)], {"aapl": 15.0}, by_symbol)[0].value == pytest.approx(30.0)


def test_aggregate_ignores_attached_price():
    p = _position("AAPL", 1, 10).with_price(999.0)
    summary = aggregate([p], {"AAPL": 20.0})
    assert summary.rows[0].price == 20.0


@pytest.mark.parametrize("seed", range(10))
def test_percentages_always_finite(seed):
    rng = random.Random(seed)
    positions = [
        _position(f"S{i}", rng.choice([0, 0, rng.uniform(0, 100)]), rng.choice([0, rng.uniform(0, 100)]))
        for i in range(8)
    ]
    prices = {f"S{i}": rng.choice([None, 0.0, rng.uniform(1, 100)]) for i in range(8)}
    summary = aggregate(positions, prices)
    assert math.isfinite(summary.totals.total_pnl_pct)
    for row in summary.priced_rows:
        assert math.isfinite(row.pnl_pct)


# --- group ---


def test_group_by_category():
    positions = [
        _position("AAPL", 10, 100, category="tech"),
        _position("MSFT", 10, 100, category="tech"),
        _position("XOM", 10, 100, category="energy"),
    ]
    groups = group(positions, {"AAPL": 10.0, "MSFT": 20.0, "XOM": 10.0}, by_category)
    assert [g.key for g in groups] == ["tech", "energy"]
    assert groups[0].value == pytest.approx(300.0)
    assert groups[0].percent_of_total == pytest.approx(75.0)
    assert groups[1].percent_of_total == pytest.approx(25.0)


def test_group_by_market_and_symbol():
    positions = [
        _position("AAPL", 1, 1, market=Market.US),
        _position("0700", 1, 1, market=Market.HK),
    ]
    prices = {"AAPL": 100.0, "0700": 300.0}
    assert [g.key for g in group(positions, prices, by_market)] == ["HK", "US"]
    assert [g.key for g in group(positions, prices, by_symbol)] == ["0700", "AAPL"]
    assert KEY_FUNCTIONS["market"] is by_market


def test_group_omits_zero_value_groups():
    positions = [_position("AAPL", 10, 1), _position("MSFT", 0, 0), _position("NOPX", 5, 1)]
    groups = group(positions, {"AAPL": 10.0, "MSFT": 10.0}, by_symbol)
    assert [g.key for g in groups] == ["AAPL"]
    assert groups[0].percent_of_total == pytest.approx(100.0)


def test_group_placeholder_when_empty():
    groups = group([_position("AAPL", 10, 1)], {}, by_symbol)
    assert len(groups) == 1
    assert groups[0].key == PLACEHOLDER_KEY
    assert groups[0].value == 1.0
    assert groups[0].percent_of_total == 0.0


def test_group_without_placeholder():
    assert group([], {}, by_symbol, placeholder=False) == []


def test_group_ties_ordered_by_key():
    positions = [_position("BBB", 1, 1), _position("AAA", 1, 1)]
    groups = group(positions, {"AAA": 5.0, "BBB": 5.0}, by_symbol)
    assert [g.key for g in groups] == ["AAA", "BBB"]


@pytest.mark.parametrize("seed", range(10))
def test_group_percentages_sum_to_100(seed):
    rng = random.Random(seed)
    positions = [
        _position(f"S{i}", rng.uniform(0.1, 100), 1, category=rng.choice(["a", "b", "c"]))
        for i in range(12)
    ]
    prices = {f"S{i}": rng.uniform(0.5, 500) for i in range(12)}
    for key_fn in (by_symbol, by_category, by_market):
        groups = group(positions, prices, key_fn)
        assert sum(g.percent_of_total for g in groups) == pytest.approx(100.0, abs=0.1)
