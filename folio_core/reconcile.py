"""
Position reconciler: base holdings + ordered trades -> current positions.

Pure and deterministic. Weighted-average cost on buys; sells reduce quantity,
clamp at zero, and reset cost basis when the position goes flat.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace

from folio_core.errors import InvalidHolding
from folio_core.holding import Holding
from folio_core.position import Position
from folio_core.trade import Trade

# Quantities closer to zero than this are float leftovers of a full sell.
QUANTITY_EPSILON = 1e-9


def _snap(quantity: float) -> float:
    return 0.0 if abs(quantity) < QUANTITY_EPSILON else quantity


def apply_trade(position: Position, trade: Trade) -> Position:
    """Return the position after one trade. Never mutates its inputs."""
    if trade.quantity > 0:
        new_quantity = _snap(position.quantity + trade.quantity)
        if new_quantity == 0:
            return replace(position, quantity=new_quantity)
        total_cost = position.quantity * position.cost_basis + trade.quantity * trade.price
        return replace(position, quantity=new_quantity, cost_basis=total_cost / new_quantity)

    if trade.quantity < 0:
        new_quantity = max(_snap(position.quantity + trade.quantity), 0.0)
        if new_quantity == 0:
            return replace(position, quantity=0.0, cost_basis=0.0)
        return replace(position, quantity=new_quantity)

    # Zero quantity is rejected at the ledger; ignore it here.
    return position


def _seed(base: Iterable[Holding]) -> dict[str, Position]:
    positions: dict[str, Position] = {}
    for holding in base:
        if holding.symbol in positions:
            raise InvalidHolding(f"duplicate holding for symbol {holding.symbol}")
        positions[holding.symbol] = Position.from_holding(holding)
    return positions


def _step(positions: dict[str, Position], trade: Trade) -> None:
    current = positions.get(trade.symbol)
    if current is None:
        current = Position.synthetic(trade.symbol, cost_basis=trade.price)
    positions[trade.symbol] = apply_trade(current, trade)


def _sorted(positions: dict[str, Position]) -> dict[str, Position]:
    return {symbol: positions[symbol] for symbol in sorted(positions)}


def reconcile(base: Iterable[Holding], trades: Iterable[Trade]) -> dict[str, Position]:
    """
    Replay trades, in recorded order, on top of the base holdings.

    Parameters
    ----------
    base : iterable of Holding
        Starting positions, one per symbol.
    trades : iterable of Trade
        Ledger entries in the order they were recorded.

    Returns
    -------
    dict[str, Position]
        Positions keyed by uppercase symbol, in symbol order. Flat positions
        are kept so later trades can reopen them. No prices are attached.
    """
    positions = _seed(base)
    for trade in trades:
        _step(positions, trade)
    return _sorted(positions)


def replay(base: Iterable[Holding], trades: Iterable[Trade]) -> Iterator[tuple[Trade, dict[str, Position]]]:
    """
    Yield (trade, positions after that trade) for each trade.

    Useful for auditing a ledger; the last state equals reconcile(base, trades).
    """
    positions = _seed(base)
    for trade in trades:
        _step(positions, trade)
        yield trade, _sorted(positions)
