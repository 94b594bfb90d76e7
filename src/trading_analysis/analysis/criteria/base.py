"""Shared pieces of the analysis criteria.

Every criterion satisfies the ``AnalysisCriterion`` protocol. Most only
look at closed positions; those that also account for the open position
say so in their docstring.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal
from enum import Enum

from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord


class PositionFilter(Enum):
    """Which closed positions a counting criterion looks at."""

    PROFIT = "PROFIT"
    LOSS = "LOSS"

    def matches(self, position: Position) -> bool:
        """Return whether ``position`` passes this filter."""
        return position.has_profit() if self is PositionFilter.PROFIT else position.has_loss()


class Criterion(ABC):
    """Base class for criteria where a higher value is better.

    Subclasses implement ``calculate_position`` and, when the record-level
    value is not the sum of the per-position values, override ``calculate``.
    """

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the sum of ``calculate_position`` over the closed positions."""
        return record.num_factory.total(self.calculate_position(p) for p in record.positions)

    @abstractmethod
    def calculate_position(self, position: Position) -> Decimal:
        """Return the metric for a single position."""

    def better_than(self, first: Decimal, second: Decimal) -> bool:
        """Return whether ``first`` is strictly greater than ``second``."""
        return first > second

    def __repr__(self) -> str:
        """Return the criterion class name."""
        return f"{type(self).__name__}()"


class LowerIsBetterCriterion(Criterion):
    """Base class for criteria where a lower value is better (costs, losses of time)."""

    def better_than(self, first: Decimal, second: Decimal) -> bool:
        """Return whether ``first`` is strictly lower than ``second``."""
        return first < second


def closed_positions(record: TradingRecord) -> list[Position]:
    """Return the record's positions that are closed."""
    return [p for p in record.positions if p.is_closed]


def filtered(positions: Iterable[Position], position_filter: PositionFilter) -> list[Position]:
    """Return the positions passing ``position_filter``."""
    return [p for p in positions if position_filter.matches(p)]
