"""Moving averages over any indicator.

All averages here span ``bar_count`` bars of their input, so their lag is
``input_lag + bar_count - 1``. The exponential variants are seeded with
the simple average of their first window, then updated recursively with
``avg = prev + k * (value - prev)``:

- EMA uses ``k = 2 / (bar_count + 1)``;
- MMA (Wilder's modified moving average) uses ``k = 1 / bar_count``.

A NaN anywhere in the averaged window yields NaN.
"""

from abc import abstractmethod
from decimal import Decimal

from trading_analysis.core.numbers import NAN, ONE, TWO, ZERO, any_nan
from trading_analysis.indicators.base import CachedIndicator, RecursiveIndicator, check_bar_count


def _window_values(indicator: CachedIndicator, index: int, bar_count: int) -> list[Decimal]:
    return [indicator.value(i) for i in range(index - bar_count + 1, index + 1)]


class SMAIndicator(CachedIndicator):
    """Simple moving average: arithmetic mean of the last ``bar_count`` values."""

    def __init__(self, indicator: CachedIndicator, bar_count: int) -> None:
        """Initialize the SMA.

        Raises:
            ConfigurationError: If ``bar_count`` is not positive.

        """
        check_bar_count(bar_count)
        super().__init__(indicator.series, indicator.lag + bar_count - 1)
        self._indicator = indicator
        self._bar_count = bar_count

    @property
    def bar_count(self) -> int:
        """Return the window length."""
        return self._bar_count

    def _calculate(self, index: int) -> Decimal:
        values = _window_values(self._indicator, index, self._bar_count)
        if any_nan(*values):
            return NAN
        return self.num_factory.divide(sum(values, ZERO), Decimal(self._bar_count))

    def __repr__(self) -> str:
        """Return ``SMA(bar_count)``."""
        return f"SMA({self._bar_count})"


class _SmoothedAverage(RecursiveIndicator):
    """Exponentially smoothed average seeded with the SMA of its first window."""

    def __init__(self, indicator: CachedIndicator, bar_count: int) -> None:
        check_bar_count(bar_count)
        super().__init__(indicator.series, indicator.lag + bar_count - 1)
        self._indicator = indicator
        self._bar_count = bar_count
        self._multiplier = self._smoothing_factor()

    @property
    def bar_count(self) -> int:
        """Return the smoothing period."""
        return self._bar_count

    @abstractmethod
    def _smoothing_factor(self) -> Decimal:
        """Return the weight given to the newest value."""

    def _calculate(self, index: int) -> Decimal:
        if index == self._lag:
            seed = _window_values(self._indicator, index, self._bar_count)
            if any_nan(*seed):
                return NAN
            return self.num_factory.divide(sum(seed, ZERO), Decimal(self._bar_count))
        previous = self.value(index - 1)
        current = self._indicator.value(index)
        if any_nan(previous, current):
            return NAN
        return previous + self._multiplier * (current - previous)


class EMAIndicator(_SmoothedAverage):
    """Exponential moving average with ``k = 2 / (bar_count + 1)``."""

    def _smoothing_factor(self) -> Decimal:
        return self.num_factory.divide(TWO, Decimal(self._bar_count) + ONE)

    def __repr__(self) -> str:
        """Return ``EMA(bar_count)``."""
        return f"EMA({self._bar_count})"


class MMAIndicator(_SmoothedAverage):
    """Wilder's modified moving average with ``k = 1 / bar_count``."""

    def _smoothing_factor(self) -> Decimal:
        return self.num_factory.divide(ONE, Decimal(self._bar_count))

    def __repr__(self) -> str:
        """Return ``MMA(bar_count)``."""
        return f"MMA({self._bar_count})"


class WMAIndicator(CachedIndicator):
    """Weighted moving average; the newest value weighs ``bar_count``, the oldest ``1``."""

    def __init__(self, indicator: CachedIndicator, bar_count: int) -> None:
        """Initialize the WMA.

        Raises:
            ConfigurationError: If ``bar_count`` is not positive.

        """
        check_bar_count(bar_count)
        super().__init__(indicator.series, indicator.lag + bar_count - 1)
        self._indicator = indicator
        self._bar_count = bar_count
        self._weight_total = Decimal(bar_count * (bar_count + 1) // 2)

    def _calculate(self, index: int) -> Decimal:
        values = _window_values(self._indicator, index, self._bar_count)
        if any_nan(*values):
            return NAN
        weighted = sum((Decimal(weight) * v for weight, v in enumerate(values, start=1)), ZERO)
        return self.num_factory.divide(weighted, self._weight_total)

    def __repr__(self) -> str:
        """Return ``WMA(bar_count)``."""
        return f"WMA({self._bar_count})"
