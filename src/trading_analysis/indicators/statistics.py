"""Rolling dispersion statistics.

Each statistic spans ``bar_count`` bars (lag ``input_lag + bar_count - 1``)
and uses the population form (divide by N), matching how Bollinger bands
and z-scores are usually computed.
"""

from decimal import Decimal

from trading_analysis.core.numbers import NAN, ZERO, any_nan
from trading_analysis.indicators.base import CachedIndicator, check_bar_count


class _RollingStatistic(CachedIndicator):
    def __init__(self, indicator: CachedIndicator, bar_count: int) -> None:
        check_bar_count(bar_count)
        super().__init__(indicator.series, indicator.lag + bar_count - 1)
        self._indicator = indicator
        self._bar_count = bar_count
        self._count = Decimal(bar_count)

    def _window(self, index: int) -> list[Decimal] | None:
        values = [self._indicator.value(i) for i in range(index - self._bar_count + 1, index + 1)]
        if any_nan(*values):
            return None
        return values

    def _mean(self, values: list[Decimal]) -> Decimal:
        return self.num_factory.divide(sum(values, ZERO), self._count)


class VarianceIndicator(_RollingStatistic):
    """Population variance of the last ``bar_count`` values."""

    def _calculate(self, index: int) -> Decimal:
        values = self._window(index)
        if values is None:
            return NAN
        mean = self._mean(values)
        return self.num_factory.divide(sum(((v - mean) ** 2 for v in values), ZERO), self._count)


class StandardDeviationIndicator(_RollingStatistic):
    """Population standard deviation of the last ``bar_count`` values."""

    def __init__(self, indicator: CachedIndicator, bar_count: int) -> None:
        """Initialize the standard deviation over ``bar_count`` bars."""
        super().__init__(indicator, bar_count)
        self._variance = VarianceIndicator(indicator, bar_count)

    def _calculate(self, index: int) -> Decimal:
        return self.num_factory.sqrt(self._variance.value(index))


class MeanDeviationIndicator(_RollingStatistic):
    """Mean absolute deviation from the window mean."""

    def _calculate(self, index: int) -> Decimal:
        values = self._window(index)
        if values is None:
            return NAN
        mean = self._mean(values)
        return self._mean([abs(v - mean) for v in values])
