"""Volume-weighted indicators.

Zero-volume windows resolve to sentinels: Chaikin money flow is ``0``,
VWAP is NaN (there is no traded price to average).
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from trading_analysis.core.models import Bar
from trading_analysis.core.numbers import NAN, ZERO, any_nan
from trading_analysis.indicators.base import CachedIndicator, check_bar_count
from trading_analysis.indicators.helpers import MovingSumIndicator
from trading_analysis.indicators.prices import BarFieldIndicator, TypicalPriceIndicator, VolumeIndicator

if TYPE_CHECKING:
    from trading_analysis.series.bar_series import BarSeries


class CloseLocationValueIndicator(BarFieldIndicator):
    """Position of the close inside the bar range, from ``-1`` (low) to ``1`` (high).

    ``((close - low) - (high - close)) / (high - low)``; ``0`` for a zero range.
    """

    def _from_bar(self, bar: Bar) -> Decimal:
        return self.num_factory.divide(
            (bar.close - bar.low) - (bar.high - bar.close),
            bar.high - bar.low,
            default=ZERO,
        )


class ChaikinMoneyFlowIndicator(CachedIndicator):
    """Chaikin money flow: sum of CLV-weighted volume over summed volume, lag ``bar_count - 1``."""

    def __init__(self, series: "BarSeries", bar_count: int = 20) -> None:
        """Initialize the CMF over ``bar_count`` bars."""
        check_bar_count(bar_count)
        volume = VolumeIndicator(series)
        self._money_flow_volume = MovingSumIndicator(CloseLocationValueIndicator(series) * volume, bar_count)
        self._volume = MovingSumIndicator(volume, bar_count)
        super().__init__(series, bar_count - 1)

    def _calculate(self, index: int) -> Decimal:
        return self.num_factory.divide(
            self._money_flow_volume.value(index),
            self._volume.value(index),
            default=ZERO,
        )


class VWAPIndicator(CachedIndicator):
    """Volume-weighted average typical price over ``bar_count`` bars, lag ``bar_count - 1``."""

    def __init__(self, series: "BarSeries", bar_count: int = 20) -> None:
        """Initialize the VWAP over ``bar_count`` bars."""
        check_bar_count(bar_count)
        volume = VolumeIndicator(series)
        self._price_volume = MovingSumIndicator(TypicalPriceIndicator(series) * volume, bar_count)
        self._volume = MovingSumIndicator(volume, bar_count)
        super().__init__(series, bar_count - 1)

    def _calculate(self, index: int) -> Decimal:
        price_volume = self._price_volume.value(index)
        volume = self._volume.value(index)
        if any_nan(price_volume, volume):
            return NAN
        return self.num_factory.divide(price_volume, volume)
