"""Tests for the cached indicator base classes and composition."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from trading_analysis.core.exceptions import ConfigurationError, OutOfBoundsError
from trading_analysis.core.models import Bar
from trading_analysis.core.numbers import NumFactory
from trading_analysis.indicators.averages import SMAIndicator, _SmoothedAverage  # pyright: ignore[reportPrivateUsage]
from trading_analysis.indicators.base import CachedIndicator, Constant, RecursiveIndicator
from trading_analysis.indicators.helpers import CrossIndicator
from trading_analysis.indicators.prices import BarFieldIndicator, ClosePriceIndicator
from trading_analysis.series.bar_series import BarSeries

COUNTING_LAG = 2
WIDE_PRECISION = 40
WIDE = "1.000000000000000000000000000000000001"
EXPECTED_RUNNING_TOTAL = Decimal(15)


class CountingIndicator(CachedIndicator):
    """Close price with lag that records every computed index."""

    def __init__(self, series: BarSeries, lag: int) -> None:
        """Initialize with an empty call log."""
        super().__init__(series, lag)
        self.calls: list[int] = []

    def _calculate(self, index: int) -> Decimal:
        self.calls.append(index)
        return self._series.get(index).close


class CountingTotal(RecursiveIndicator):
    """Running total of closes that records every computed index."""

    def __init__(self, series: BarSeries) -> None:
        """Initialize with an empty call log."""
        super().__init__(series, 0)
        self.calls: list[int] = []

    def _calculate(self, index: int) -> Decimal:
        self.calls.append(index)
        close = self._series.get(index).close
        return close if index == 0 else self.value(index - 1) + close


class TestCachedIndicator:
    """Tests for CachedIndicator."""

    def test_value_is_memoized(self, series_factory: Callable[..., BarSeries]) -> None:
        """Each index is computed at most once."""
        indicator = CountingIndicator(series_factory([1, 2, 3, 4]), COUNTING_LAG)
        assert indicator.value(3) == Decimal(4)
        assert indicator.value(3) == Decimal(4)
        assert indicator.calls == [3]

    def test_below_lag_is_nan_without_calculation(self, series_factory: Callable[..., BarSeries]) -> None:
        """Indices below the lag resolve to NaN and never run the formula."""
        indicator = CountingIndicator(series_factory([1, 2, 3]), COUNTING_LAG)
        assert indicator.value(0).is_nan()
        assert indicator.value(1).is_nan()
        assert indicator.calls == []

    def test_default_index_is_current(self, series_factory: Callable[..., BarSeries]) -> None:
        """``value()`` reads the series' current index."""
        series = series_factory([1, 2, 3])
        assert ClosePriceIndicator(series).value() == Decimal(3)

    def test_out_of_bounds(self, series_factory: Callable[..., BarSeries]) -> None:
        """Indices outside the series raise."""
        indicator = ClosePriceIndicator(series_factory([1]))
        with pytest.raises(OutOfBoundsError):
            indicator.value(1)

    def test_stability_follows_current_index(
        self, bar_factory: Callable[..., Bar], series_factory: Callable[..., BarSeries]
    ) -> None:
        """The indicator becomes stable once the current index reaches the lag."""
        series = series_factory([1, 2])
        indicator = CountingIndicator(series, COUNTING_LAG)
        assert not indicator.is_stable
        series.append(bar_factory(2, 3))
        assert indicator.is_stable

    def test_empty_series_is_unstable(self) -> None:
        """Even a lag-0 indicator is unstable before any bar exists."""
        assert not ClosePriceIndicator(BarSeries()).is_stable

    def test_negative_lag_raises(self) -> None:
        """Reject a negative lag."""
        with pytest.raises(ConfigurationError, match="lag"):
            CountingIndicator(BarSeries(), -1)

    def test_non_positive_bar_count_raises(self) -> None:
        """Window indicators reject a bar count below one."""
        with pytest.raises(ConfigurationError):
            SMAIndicator(ClosePriceIndicator(BarSeries()), 0)


class TestRecursiveIndicator:
    """Tests for RecursiveIndicator."""

    def test_cold_query_fills_forward(self, series_factory: Callable[..., BarSeries]) -> None:
        """A late first query computes earlier indices in increasing order."""
        indicator = CountingTotal(series_factory([1, 2, 3, 4, 5]))
        assert indicator.value(4) == EXPECTED_RUNNING_TOTAL
        assert indicator.calls == [0, 1, 2, 3, 4]


class TestComposition:
    """Tests for arithmetic composition of indicators."""

    def test_arithmetic(self, series_factory: Callable[..., BarSeries]) -> None:
        """Operators combine values pointwise, with numbers as constants."""
        close = ClosePriceIndicator(series_factory([2, 4, 9]))
        assert (close + 1).value(0) == Decimal(3)
        assert (10 - close).value(1) == Decimal(6)
        assert (close * close).value(2) == Decimal(81)
        assert (close / 2).value(1) == Decimal(2)
        assert (-close).value(0) == Decimal(-2)
        assert close.sqrt().value(2) == Decimal(3)
        assert close.min(3).value(2) == Decimal(3)
        assert close.max(3).value(0) == Decimal(3)

    def test_arithmetic_uses_series_precision(self, bar_factory: Callable[..., Bar]) -> None:
        """Composed and windowed values keep the series' precision beyond 28 digits."""
        series = BarSeries("wide", num_factory=NumFactory(WIDE_PRECISION))
        series.append(bar_factory(0, 1))
        wide = Constant(series, WIDE)
        assert (wide + 0).value(0) == series.num_factory.num(WIDE)
        assert (wide - 1).value(0) == Decimal("1E-36")
        assert (wide * 1).value(0) == series.num_factory.num(WIDE)
        assert SMAIndicator(wide, 1).value(0) == series.num_factory.num(WIDE)

    def test_degenerate_arithmetic_is_nan(self, series_factory: Callable[..., BarSeries]) -> None:
        """Division by zero and square roots of negatives resolve to NaN."""
        series = series_factory([2])
        close = ClosePriceIndicator(series)
        assert (close / Constant(series, 0)).value(0).is_nan()
        assert (-close).sqrt().value(0).is_nan()
        assert abs(-close).value(0) == Decimal(2)

    def test_lag_is_max_of_inputs(self, series_factory: Callable[..., BarSeries]) -> None:
        """A binary operation is as unstable as its least stable input."""
        close = ClosePriceIndicator(series_factory([1, 2, 3, 4, 5]))
        combined = close.sma(3) + close.sma(5)
        assert combined.lag == close.sma(5).lag
        assert combined.value(3).is_nan()
        assert combined.value(4) == Decimal(4) + Decimal(3)

    def test_nan_propagates(self, series_factory: Callable[..., BarSeries]) -> None:
        """NaN in any operand makes the result NaN."""
        close = ClosePriceIndicator(series_factory([1, 2, 3]))
        assert (close.sma(3) * 2).value(1).is_nan()

    def test_previous_and_averages(self, series_factory: Callable[..., BarSeries]) -> None:
        """The wrapping helpers shift and smooth the indicator."""
        close = ClosePriceIndicator(series_factory([1, 2, 3, 4, 5]))
        assert close.previous(2).value(4) == Decimal(3)
        assert close.sma(3).value(4) == Decimal(4)
        assert close.ema(3).value(4) == Decimal(4)


class TestAbstractHooks:
    """Base indicators with an unimplemented hook cannot be constructed."""

    def test_incomplete_subclasses_raise(self, series_factory: Callable[..., BarSeries]) -> None:
        """Each extension point must be implemented before use."""
        close = ClosePriceIndicator(series_factory([1, 2, 3]))
        with pytest.raises(TypeError, match="_is_cross"):
            CrossIndicator(close, close)  # pyright: ignore[reportAbstractUsage]
        with pytest.raises(TypeError, match="_from_bar"):
            BarFieldIndicator(close.series)  # pyright: ignore[reportAbstractUsage]
        with pytest.raises(TypeError, match="_smoothing_factor"):
            _SmoothedAverage(close, 3)  # pyright: ignore[reportAbstractUsage]

    def test_implemented_hook_constructs(self, series_factory: Callable[..., BarSeries]) -> None:
        """A subclass implementing the hook works like the built-in ones."""

        class MidpointIndicator(BarFieldIndicator):
            def _from_bar(self, bar: Bar) -> Decimal:
                return (bar.high + bar.low) / 2

        series = series_factory([1, 3], highs=[2, 5], lows=[0, 1])
        assert MidpointIndicator(series).value(1) == Decimal(3)
