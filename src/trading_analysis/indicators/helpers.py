"""Building-block indicators: shifts, differences, extremes, totals, crosses."""

from abc import abstractmethod
from decimal import Decimal

from trading_analysis.core.numbers import NAN, ONE, ZERO, any_nan
from trading_analysis.indicators.base import CachedIndicator, RecursiveIndicator, check_bar_count


class PreviousValueIndicator(CachedIndicator):
    """Value of an indicator ``bars`` bars earlier.

    Lag is ``input_lag + bars``.
    """

    def __init__(self, indicator: CachedIndicator, bars: int = 1) -> None:
        """Initialize the shifted indicator.

        Raises:
            ConfigurationError: If ``bars`` is not positive.

        """
        check_bar_count(bars, "bars")
        super().__init__(indicator.series, indicator.lag + bars)
        self._indicator = indicator
        self._bars = bars

    def _calculate(self, index: int) -> Decimal:
        return self._indicator.value(index - self._bars)


class DifferenceIndicator(CachedIndicator):
    """One-bar change of an indicator: ``x[i] - x[i - 1]``. Lag is ``input_lag + 1``."""

    def __init__(self, indicator: CachedIndicator) -> None:
        """Initialize the difference indicator."""
        super().__init__(indicator.series, indicator.lag + 1)
        self._indicator = indicator

    def _calculate(self, index: int) -> Decimal:
        current = self._indicator.value(index)
        previous = self._indicator.value(index - 1)
        if any_nan(current, previous):
            return NAN
        return current - previous


class GainIndicator(DifferenceIndicator):
    """Positive part of the one-bar change, ``0`` on a decline."""

    def _calculate(self, index: int) -> Decimal:
        change = super()._calculate(index)
        if change.is_nan():
            return NAN
        return max(change, ZERO)


class LossIndicator(DifferenceIndicator):
    """Magnitude of a one-bar decline, ``0`` on a rise."""

    def _calculate(self, index: int) -> Decimal:
        change = super()._calculate(index)
        if change.is_nan():
            return NAN
        return max(-change, ZERO)


class _WindowIndicator(CachedIndicator):
    """Aggregate over the last ``bar_count`` values; lag ``input_lag + bar_count - 1``."""

    def __init__(self, indicator: CachedIndicator, bar_count: int) -> None:
        check_bar_count(bar_count)
        super().__init__(indicator.series, indicator.lag + bar_count - 1)
        self._indicator = indicator
        self._bar_count = bar_count

    @property
    def bar_count(self) -> int:
        """Return the window length."""
        return self._bar_count

    def _window(self, index: int) -> list[Decimal]:
        start = index - self._bar_count + 1
        return [self._indicator.value(i) for i in range(start, index + 1)]


class HighestValueIndicator(_WindowIndicator):
    """Highest value over the last ``bar_count`` bars."""

    def _calculate(self, index: int) -> Decimal:
        values = self._window(index)
        if any_nan(*values):
            return NAN
        return max(values)


class LowestValueIndicator(_WindowIndicator):
    """Lowest value over the last ``bar_count`` bars."""

    def _calculate(self, index: int) -> Decimal:
        values = self._window(index)
        if any_nan(*values):
            return NAN
        return min(values)


class RunningTotalIndicator(RecursiveIndicator):
    """Cumulative sum of an indicator from its first meaningful bar.

    Lag equals the input lag.
    """

    def __init__(self, indicator: CachedIndicator) -> None:
        """Initialize the running total."""
        super().__init__(indicator.series, indicator.lag)
        self._indicator = indicator

    def _calculate(self, index: int) -> Decimal:
        current = self._indicator.value(index)
        if index == self._lag:
            return current
        return self.value(index - 1) + current


class CrossIndicator(CachedIndicator):
    """``1`` on the bar where ``first`` crosses ``second``, ``0`` otherwise.

    Lag is one more than the larger input lag, since a cross compares two
    consecutive bars. NaN on either side at either bar yields NaN.
    """

    def __init__(self, first: CachedIndicator, second: CachedIndicator) -> None:
        """Initialize the cross indicator."""
        super().__init__(first.series, max(first.lag, second.lag) + 1)
        self._first = first
        self._second = second

    def crossed(self, index: int | None = None) -> bool:
        """Return whether the cross happened at ``index``."""
        return self.value(index) == ONE

    def _calculate(self, index: int) -> Decimal:
        values = (
            self._first.value(index - 1),
            self._second.value(index - 1),
            self._first.value(index),
            self._second.value(index),
        )
        if any_nan(*values):
            return NAN
        return ONE if self._is_cross(*values) else ZERO

    @abstractmethod
    def _is_cross(self, prev_first: Decimal, prev_second: Decimal, first: Decimal, second: Decimal) -> bool:
        """Return whether the previous and current values form a cross."""


class CrossUpIndicator(CrossIndicator):
    """``first`` moves from at-or-below ``second`` to strictly above it."""

    def _is_cross(self, prev_first: Decimal, prev_second: Decimal, first: Decimal, second: Decimal) -> bool:
        return prev_first <= prev_second and first > second


class CrossDownIndicator(CrossIndicator):
    """``first`` moves from at-or-above ``second`` to strictly below it."""

    def _is_cross(self, prev_first: Decimal, prev_second: Decimal, first: Decimal, second: Decimal) -> bool:
        return prev_first >= prev_second and first < second


class MovingSumIndicator(_WindowIndicator):
    """Sum of the last ``bar_count`` values."""

    def _calculate(self, index: int) -> Decimal:
        values = self._window(index)
        if any_nan(*values):
            return NAN
        return sum(values, ZERO)
