"""Statistics of another criterion's per-position values.

Each criterion here wraps an inner criterion, evaluates it on every closed
position and summarises the values. An empty record gives ``0``. By default
a higher value is better, except for the standard error; pass
``lower_is_better`` to flip the ordering.
"""

from collections.abc import Sequence
from decimal import Decimal

from trading_analysis.analysis.criteria.base import Criterion, closed_positions
from trading_analysis.core.numbers import ZERO, NumFactory
from trading_analysis.core.protocols import AnalysisCriterion
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord


def mean(values: Sequence[Decimal], num_factory: NumFactory) -> Decimal:
    """Return the arithmetic mean of ``values``, ``0`` when empty."""
    return num_factory.divide(num_factory.total(values), Decimal(len(values)), default=ZERO)


def population_variance(values: Sequence[Decimal], num_factory: NumFactory) -> Decimal:
    """Return the population variance of ``values``, ``0`` when empty."""
    average = mean(values, num_factory)
    squares: list[Decimal] = []
    for value in values:
        deviation = num_factory.subtract(value, average)
        squares.append(num_factory.multiply(deviation, deviation))
    return mean(squares, num_factory)


class _PositionStatistic(Criterion):
    """Summarise the values of ``criterion`` over the closed positions."""

    def __init__(
        self,
        criterion: AnalysisCriterion,
        *,
        lower_is_better: bool = False,
        num_factory: NumFactory | None = None,
    ) -> None:
        """Initialize the statistic over the values of ``criterion``."""
        self._criterion = criterion
        self._lower_is_better = lower_is_better
        self._num_factory = num_factory or NumFactory()

    def _values(self, record: TradingRecord) -> list[Decimal]:
        return [self._criterion.calculate_position(p) for p in closed_positions(record)]

    def better_than(self, first: Decimal, second: Decimal) -> bool:
        """Compare in the configured direction."""
        return first < second if self._lower_is_better else first > second

    def __repr__(self) -> str:
        """Return the class name and the wrapped criterion."""
        return f"{type(self).__name__}({self._criterion!r})"


class AverageCriterion(_PositionStatistic):
    """Mean of the inner criterion over the closed positions."""

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the mean per-position value."""
        return mean(self._values(record), self._num_factory)

    def calculate_position(self, position: Position) -> Decimal:
        """Return the inner value of a single position."""
        return self._criterion.calculate_position(position)


class VarianceCriterion(_PositionStatistic):
    """Population variance of the inner criterion over the closed positions."""

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the variance of the per-position values."""
        return population_variance(self._values(record), self._num_factory)

    def calculate_position(self, position: Position) -> Decimal:  # noqa: ARG002
        """Return ``0``; a single value does not vary."""
        return ZERO


class StandardDeviationCriterion(_PositionStatistic):
    """Population standard deviation of the inner criterion over the closed positions."""

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the square root of the variance."""
        return self._num_factory.sqrt(population_variance(self._values(record), self._num_factory))

    def calculate_position(self, position: Position) -> Decimal:  # noqa: ARG002
        """Return ``0``; a single value does not vary."""
        return ZERO


class StandardErrorCriterion(_PositionStatistic):
    """Standard error of the mean: ``stdev / sqrt(n)``. Lower is better by default."""

    def __init__(
        self,
        criterion: AnalysisCriterion,
        *,
        lower_is_better: bool = True,
        num_factory: NumFactory | None = None,
    ) -> None:
        """Initialize the criterion."""
        super().__init__(criterion, lower_is_better=lower_is_better, num_factory=num_factory)

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the standard deviation divided by the square root of the position count."""
        values = self._values(record)
        if not values:
            return ZERO
        deviation = self._num_factory.sqrt(population_variance(values, self._num_factory))
        return self._num_factory.divide(deviation, self._num_factory.sqrt(Decimal(len(values))))

    def calculate_position(self, position: Position) -> Decimal:  # noqa: ARG002
        """Return ``0``; a single value has no error."""
        return ZERO
