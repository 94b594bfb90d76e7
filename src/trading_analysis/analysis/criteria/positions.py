"""Counting criteria over closed positions, plus expectancy and SQN."""

from decimal import Decimal

from trading_analysis.analysis.criteria.base import (
    Criterion,
    LowerIsBetterCriterion,
    PositionFilter,
    closed_positions,
    filtered,
)
from trading_analysis.analysis.criteria.pnl import ProfitLossCriterion, ProfitLossRatioCriterion
from trading_analysis.analysis.criteria.statistics import mean, population_variance
from trading_analysis.core.numbers import ONE, ZERO, NumFactory
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord

SQN_POSITION_CAP = 100


def _count(value: int) -> Decimal:
    return Decimal(value)


class NumberOfPositionsCriterion(LowerIsBetterCriterion):
    """Number of closed positions; fewer is better."""

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the number of closed positions."""
        return _count(len(closed_positions(record)))

    def calculate_position(self, position: Position) -> Decimal:  # noqa: ARG002
        """Return ``1``."""
        return ONE


class NumberOfWinningPositionsCriterion(Criterion):
    """Number of positions with a strictly positive net profit."""

    def calculate_position(self, position: Position) -> Decimal:
        """Return ``1`` for a winner, ``0`` otherwise."""
        return ONE if position.has_profit() else ZERO


class NumberOfLosingPositionsCriterion(LowerIsBetterCriterion):
    """Number of positions with a strictly negative net profit."""

    def calculate_position(self, position: Position) -> Decimal:
        """Return ``1`` for a loser, ``0`` otherwise."""
        return ONE if position.has_loss() else ZERO


class NumberOfBreakEvenPositionsCriterion(LowerIsBetterCriterion):
    """Number of closed positions with exactly zero net profit."""

    def calculate_position(self, position: Position) -> Decimal:
        """Return ``1`` for a closed break-even position, ``0`` otherwise."""
        return ONE if position.is_closed and position.profit == ZERO else ZERO


class NumberOfConsecutivePositionsCriterion(Criterion):
    """Longest streak of consecutive winning (or losing) positions.

    A longer winning streak is better; a shorter losing streak is better.
    """

    def __init__(self, position_filter: PositionFilter) -> None:
        """Initialize the criterion for winning or losing streaks."""
        self._filter = position_filter

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the length of the longest streak."""
        longest = 0
        current = 0
        for position in closed_positions(record):
            current = current + 1 if self._filter.matches(position) else 0
            longest = max(longest, current)
        return _count(longest)

    def calculate_position(self, position: Position) -> Decimal:
        """Return ``1`` if the position matches the filter, ``0`` otherwise."""
        return ONE if position.is_closed and self._filter.matches(position) else ZERO

    def better_than(self, first: Decimal, second: Decimal) -> bool:
        """Prefer longer winning streaks and shorter losing streaks."""
        return first > second if self._filter is PositionFilter.PROFIT else first < second


class PositionsRatioCriterion(Criterion):
    """Share of closed positions that are winners (or losers), ``0`` when empty."""

    def __init__(self, position_filter: PositionFilter, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion for the winning or losing share."""
        self._filter = position_filter
        self._num_factory = num_factory or NumFactory()

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return matching positions divided by all closed positions."""
        positions = closed_positions(record)
        matching = filtered(positions, self._filter)
        return self._num_factory.divide(_count(len(matching)), _count(len(positions)), default=ZERO)

    def calculate_position(self, position: Position) -> Decimal:
        """Return ``1`` if the position matches the filter, ``0`` otherwise."""
        return ONE if position.is_closed and self._filter.matches(position) else ZERO

    def better_than(self, first: Decimal, second: Decimal) -> bool:
        """Prefer a higher winning share and a lower losing share."""
        return first > second if self._filter is PositionFilter.PROFIT else first < second


class ExpectancyCriterion(Criterion):
    """Expected return per unit risked: ``(1 + profit/loss ratio) * win rate - 1``.

    ``0`` when there are no positions or the profit/loss ratio is zero.
    """

    def __init__(self, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion."""
        self._num_factory = num_factory or NumFactory()
        self._ratio = ProfitLossRatioCriterion(self._num_factory)
        self._winners = NumberOfWinningPositionsCriterion()
        self._positions = NumberOfPositionsCriterion()

    def _expectancy(self, ratio: Decimal, winners: Decimal, total: Decimal) -> Decimal:
        if total == ZERO or ratio == ZERO:
            return ZERO
        win_rate = self._num_factory.divide(winners, total)
        with self._num_factory.calculating():
            return (ONE + ratio) * win_rate - ONE

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the expectancy over the closed positions."""
        return self._expectancy(
            self._ratio.calculate(record),
            self._winners.calculate(record),
            self._positions.calculate(record),
        )

    def calculate_position(self, position: Position) -> Decimal:
        """Return the expectancy of a single closed position."""
        if not position.is_closed:
            return ZERO
        return self._expectancy(
            self._ratio.calculate_position(position),
            self._winners.calculate_position(position),
            ONE,
        )


class SqnCriterion(Criterion):
    """System Quality Number: ``mean(P&L) / stdev(P&L) * sqrt(N)``.

    Uses the population standard deviation of the per-position values of
    ``criterion`` (net profit by default). ``0`` when there are no positions
    or the deviation is zero. When more than 100 positions were taken and
    ``n_positions`` is given, ``N`` is capped at ``n_positions``.
    """

    def __init__(
        self,
        criterion: Criterion | None = None,
        n_positions: int | None = None,
        num_factory: NumFactory | None = None,
    ) -> None:
        """Initialize the criterion."""
        self._criterion = criterion or ProfitLossCriterion()
        self._n_positions = n_positions
        self._num_factory = num_factory or NumFactory()

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the SQN over the closed positions."""
        positions = closed_positions(record)
        if not positions:
            return ZERO
        values = [self._criterion.calculate_position(p) for p in positions]
        average = mean(values, self._num_factory)
        deviation = self._num_factory.sqrt(population_variance(values, self._num_factory))
        if deviation.is_nan() or deviation == ZERO:
            return ZERO
        count = _count(len(values))
        if self._n_positions is not None and len(values) > SQN_POSITION_CAP:
            count = _count(self._n_positions)
        return self._num_factory.multiply(self._num_factory.divide(average, deviation), self._num_factory.sqrt(count))

    def calculate_position(self, position: Position) -> Decimal:  # noqa: ARG002
        """Return ``0``; a single value has no deviation."""
        return ZERO
