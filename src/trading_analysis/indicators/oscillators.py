"""Bounded momentum oscillators.

Degenerate windows never raise; each indicator documents its sentinel:

- RSI is ``100`` when the average loss is zero;
- stochastic %K is ``50`` when the high/low range is zero;
- Williams %R is ``0`` when the high/low range is zero;
- CCI is ``0`` when the mean deviation is zero.
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from trading_analysis.core.numbers import HUNDRED, NAN, ONE, ZERO, any_nan
from trading_analysis.indicators.averages import MMAIndicator, SMAIndicator
from trading_analysis.indicators.base import CachedIndicator, check_bar_count
from trading_analysis.indicators.helpers import (
    GainIndicator,
    HighestValueIndicator,
    LossIndicator,
    LowestValueIndicator,
)
from trading_analysis.indicators.prices import (
    ClosePriceIndicator,
    HighPriceIndicator,
    LowPriceIndicator,
    TypicalPriceIndicator,
)
from trading_analysis.indicators.statistics import MeanDeviationIndicator

if TYPE_CHECKING:
    from trading_analysis.series.bar_series import BarSeries

FIFTY = Decimal(50)
MINUS_HUNDRED = Decimal(-100)
CCI_FACTOR = Decimal("0.015")


class RSIIndicator(CachedIndicator):
    """Relative Strength Index using Wilder's smoothing.

    Average gain and loss are MMAs of the one-bar gains and losses, so the
    lag is ``input_lag + bar_count``. The value is
    ``100 - 100 / (1 + avg_gain / avg_loss)``.
    """

    def __init__(self, indicator: CachedIndicator, bar_count: int = 14) -> None:
        """Initialize the RSI.

        Raises:
            ConfigurationError: If ``bar_count`` is not positive.

        """
        check_bar_count(bar_count)
        self._average_gain = MMAIndicator(GainIndicator(indicator), bar_count)
        self._average_loss = MMAIndicator(LossIndicator(indicator), bar_count)
        super().__init__(indicator.series, indicator.lag + bar_count)
        self._bar_count = bar_count

    def _calculate(self, index: int) -> Decimal:
        average_gain = self._average_gain.value(index)
        average_loss = self._average_loss.value(index)
        if any_nan(average_gain, average_loss):
            return NAN
        if average_loss == ZERO:
            return HUNDRED
        relative_strength = self.num_factory.divide(average_gain, average_loss)
        return HUNDRED - self.num_factory.divide(HUNDRED, ONE + relative_strength)

    def __repr__(self) -> str:
        """Return ``RSI(bar_count)``."""
        return f"RSI({self._bar_count})"


class StochasticOscillatorKIndicator(CachedIndicator):
    """Stochastic %K: where the close sits inside the ``bar_count`` high/low range, in percent."""

    def __init__(
        self,
        series: "BarSeries",
        bar_count: int = 14,
        indicator: CachedIndicator | None = None,
    ) -> None:
        """Initialize %K over ``bar_count`` bars.

        Args:
            series: Bar series providing high and low prices.
            bar_count: Look-back window.
            indicator: Value positioned in the range; defaults to the close.

        """
        check_bar_count(bar_count)
        self._indicator = indicator or ClosePriceIndicator(series)
        self._highest = HighestValueIndicator(HighPriceIndicator(series), bar_count)
        self._lowest = LowestValueIndicator(LowPriceIndicator(series), bar_count)
        super().__init__(series, max(self._indicator.lag, self._highest.lag, self._lowest.lag))

    def _calculate(self, index: int) -> Decimal:
        value = self._indicator.value(index)
        highest = self._highest.value(index)
        lowest = self._lowest.value(index)
        if any_nan(value, highest, lowest):
            return NAN
        height = highest - lowest
        if height == ZERO:
            return FIFTY
        return self.num_factory.divide(value - lowest, height) * HUNDRED


class WilliamsRIndicator(CachedIndicator):
    """Williams %R: distance of the close below the ``bar_count`` high, from ``-100`` to ``0``."""

    def __init__(self, series: "BarSeries", bar_count: int = 14) -> None:
        """Initialize %R over ``bar_count`` bars."""
        check_bar_count(bar_count)
        self._close = ClosePriceIndicator(series)
        self._highest = HighestValueIndicator(HighPriceIndicator(series), bar_count)
        self._lowest = LowestValueIndicator(LowPriceIndicator(series), bar_count)
        super().__init__(series, bar_count - 1)

    def _calculate(self, index: int) -> Decimal:
        highest = self._highest.value(index)
        lowest = self._lowest.value(index)
        close = self._close.value(index)
        if any_nan(highest, lowest, close):
            return NAN
        spread = highest - lowest
        if spread == ZERO:
            return ZERO
        return self.num_factory.divide(highest - close, spread) * MINUS_HUNDRED


class CCIIndicator(CachedIndicator):
    """Commodity Channel Index over the typical price.

    ``(typical - SMA(typical)) / (0.015 * mean_deviation(typical))``.
    """

    def __init__(self, series: "BarSeries", bar_count: int = 20) -> None:
        """Initialize the CCI over ``bar_count`` bars."""
        check_bar_count(bar_count)
        self._typical = TypicalPriceIndicator(series)
        self._sma = SMAIndicator(self._typical, bar_count)
        self._mean_deviation = MeanDeviationIndicator(self._typical, bar_count)
        super().__init__(series, bar_count - 1)

    def _calculate(self, index: int) -> Decimal:
        mean_deviation = self._mean_deviation.value(index)
        typical = self._typical.value(index)
        average = self._sma.value(index)
        if any_nan(mean_deviation, typical, average):
            return NAN
        if mean_deviation == ZERO:
            return ZERO
        return self.num_factory.divide(typical - average, mean_deviation * CCI_FACTOR)
