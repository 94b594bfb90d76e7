"""Profit and loss criteria.

All of them ignore the still-open position.
"""

from datetime import timedelta
from decimal import Decimal

from trading_analysis.analysis.criteria.base import Criterion, closed_positions
from trading_analysis.analysis.criteria.time import TimeInTradeCriterion
from trading_analysis.core.numbers import HUNDRED, ONE, ZERO, NumFactory
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord


class ReturnCriterion(Criterion):
    """Compounded gross return of the closed positions.

    The record value is the product of each position's gross return. With
    ``add_base=True`` (default) the result is a ratio (``1`` means break-even,
    the value of an empty record); with ``add_base=False`` the base is
    subtracted so break-even is ``0``.
    """

    def __init__(self, *, add_base: bool = True) -> None:
        """Initialize the criterion."""
        self._add_base = add_base

    def _adjust(self, value: Decimal, num_factory: NumFactory) -> Decimal:
        return value if self._add_base else num_factory.subtract(value, ONE)

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the compounded return of all closed positions."""
        factory = record.num_factory
        total = ONE
        for position in closed_positions(record):
            total = factory.multiply(total, position.gross_return)
        return self._adjust(total, factory)

    def calculate_position(self, position: Position) -> Decimal:
        """Return the gross return of a closed position, break-even otherwise."""
        return self._adjust(position.gross_return if position.is_closed else ONE, position.num_factory)


class ProfitLossCriterion(Criterion):
    """Sum of net profit (negative for losses) across closed positions."""

    def calculate_position(self, position: Position) -> Decimal:
        """Return the net profit of ``position`` (zero unless closed)."""
        return position.profit


class ProfitCriterion(Criterion):
    """Sum of the profits of the winning positions.

    With ``exclude_costs=True`` gross profit is used both to pick winners
    and to sum them.
    """

    def __init__(self, *, exclude_costs: bool = False) -> None:
        """Initialize the criterion."""
        self._exclude_costs = exclude_costs

    def calculate_position(self, position: Position) -> Decimal:
        """Return the position's profit if positive, otherwise zero."""
        if not position.is_closed:
            return ZERO
        profit = position.gross_profit if self._exclude_costs else position.profit
        return profit if profit > ZERO else ZERO


class LossCriterion(Criterion):
    """Sum of the (negative) losses of the losing positions.

    With ``exclude_costs=True`` gross profit is used both to pick losers
    and to sum them.
    """

    def __init__(self, *, exclude_costs: bool = False) -> None:
        """Initialize the criterion."""
        self._exclude_costs = exclude_costs

    def calculate_position(self, position: Position) -> Decimal:
        """Return the position's loss if negative, otherwise zero."""
        if not position.is_closed:
            return ZERO
        profit = position.gross_profit if self._exclude_costs else position.profit
        return profit if profit < ZERO else ZERO


class AverageProfitCriterion(Criterion):
    """Average net profit of the winning positions, ``0`` without winners."""

    def __init__(self, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion."""
        self._num_factory = num_factory or NumFactory()

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return total profit divided by the number of winning positions."""
        winners = [p for p in closed_positions(record) if p.has_profit()]
        total = self._num_factory.total(p.profit for p in winners)
        return self._num_factory.divide(total, Decimal(len(winners)), default=ZERO)

    def calculate_position(self, position: Position) -> Decimal:
        """Return the position's profit if it is a winner, otherwise zero."""
        return position.profit if position.has_profit() else ZERO


class AverageLossCriterion(Criterion):
    """Average net loss (negative) of the losing positions, ``0`` without losers."""

    def __init__(self, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion."""
        self._num_factory = num_factory or NumFactory()

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return total loss divided by the number of losing positions."""
        losers = [p for p in closed_positions(record) if p.has_loss()]
        total = self._num_factory.total(p.profit for p in losers)
        return self._num_factory.divide(total, Decimal(len(losers)), default=ZERO)

    def calculate_position(self, position: Position) -> Decimal:
        """Return the position's loss if it is a loser, otherwise zero."""
        return position.profit if position.has_loss() else ZERO


class ProfitLossRatioCriterion(Criterion):
    """Average profit divided by the magnitude of the average loss.

    ``1`` when there are profits but no losses, ``0`` when there are no profits.
    """

    def __init__(self, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion."""
        self._num_factory = num_factory or NumFactory()
        self._average_profit = AverageProfitCriterion(self._num_factory)
        self._average_loss = AverageLossCriterion(self._num_factory)

    def _ratio(self, average_profit: Decimal, average_loss: Decimal) -> Decimal:
        if average_loss == ZERO:
            return ONE if average_profit > ZERO else ZERO
        return self._num_factory.divide(average_profit, abs(average_loss))

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the profit/loss ratio over the closed positions."""
        return self._ratio(self._average_profit.calculate(record), self._average_loss.calculate(record))

    def calculate_position(self, position: Position) -> Decimal:
        """Return ``1`` for a winner and ``0`` otherwise."""
        return self._ratio(
            self._average_profit.calculate_position(position),
            self._average_loss.calculate_position(position),
        )


class ProfitLossPercentageCriterion(Criterion):
    """Net profit as a percentage of the capital invested at entry."""

    def __init__(self, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion."""
        self._num_factory = num_factory or NumFactory()

    def _percentage(self, profit: Decimal, invested: Decimal) -> Decimal:
        return self._num_factory.multiply(self._num_factory.divide(profit, invested, default=ZERO), HUNDRED)

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return total profit over total entry value, in percent."""
        positions = closed_positions(record)
        invested = self._num_factory.total(p.entry.value for p in positions if p.entry is not None)
        profit = self._num_factory.total(p.profit for p in positions)
        return self._percentage(profit, invested)

    def calculate_position(self, position: Position) -> Decimal:
        """Return the position's profit over its entry value, in percent."""
        if not position.is_closed or position.entry is None:
            return ZERO
        return self._percentage(position.profit, position.entry.value)



class AverageReturnPerBarCriterion(Criterion):
    """Geometric mean return per time unit: ``gross return ** (1 / units)``.

    Units are whole ``unit`` intervals spent in closed positions (one day by
    default), so the result compounds back to the gross return. ``1`` when
    no time was spent in a position.
    """

    def __init__(self, unit: timedelta = timedelta(days=1), num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion.

        Raises:
            ConfigurationError: If ``unit`` is not positive.

        """
        self._num_factory = num_factory or NumFactory()
        self._gross_return = ReturnCriterion()
        self._time_in_trade = TimeInTradeCriterion(unit)

    def _per_unit(self, gross_return: Decimal, units: Decimal) -> Decimal:
        if units == ZERO:
            return ONE
        return self._num_factory.power(gross_return, self._num_factory.divide(ONE, units))

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the compounded return per unit over all closed positions."""
        return self._per_unit(self._gross_return.calculate(record), self._time_in_trade.calculate(record))

    def calculate_position(self, position: Position) -> Decimal:
        """Return the return per unit of a single closed position."""
        return self._per_unit(
            self._gross_return.calculate_position(position),
            self._time_in_trade.calculate_position(position),
        )
