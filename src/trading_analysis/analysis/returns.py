"""Bar-by-bar arithmetic returns of positions and trading records.

A position's return at a bar is the change of its cash-flow value since
the previous bar, ``value / previous - 1``, starting from the entry value
``1``. NaN values are skipped. A closed position that saw no bars
contributes its single gross return.
"""

from decimal import Decimal

from trading_analysis.core.numbers import ONE
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord


def position_returns(position: Position) -> list[Decimal]:
    """Return the per-bar arithmetic returns of ``position``, oldest first."""
    if position.entry is None:
        return []
    values = [value for _, value in position.cash_flow if not value.is_nan()]
    if not values and position.is_closed:
        values = [position.gross_return]
    factory = position.num_factory
    returns: list[Decimal] = []
    previous = ONE
    for value in values:
        ratio = factory.divide(value, previous)
        if not ratio.is_nan():
            returns.append(factory.subtract(ratio, ONE))
        previous = value
    return returns


def record_returns(record: TradingRecord) -> list[Decimal]:
    """Return the per-bar returns of every closed position in ``record``."""
    return [r for position in record.positions if position.is_closed for r in position_returns(position)]
