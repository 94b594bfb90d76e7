"""Indicators that read a field straight off each bar.

All of them have lag 0: the value is meaningful from the first bar.
"""

from abc import abstractmethod
from decimal import Decimal

from trading_analysis.core.models import Bar
from trading_analysis.core.numbers import THREE, TWO
from trading_analysis.indicators.base import CachedIndicator


class BarFieldIndicator(CachedIndicator):
    """Base for indicators computed from a single bar."""

    def _calculate(self, index: int) -> Decimal:
        return self._from_bar(self._series.get(index))

    @abstractmethod
    def _from_bar(self, bar: Bar) -> Decimal:
        """Return the value read from ``bar``."""


class OpenPriceIndicator(BarFieldIndicator):
    """Open price of each bar."""

    def _from_bar(self, bar: Bar) -> Decimal:
        return bar.open


class HighPriceIndicator(BarFieldIndicator):
    """High price of each bar."""

    def _from_bar(self, bar: Bar) -> Decimal:
        return bar.high


class LowPriceIndicator(BarFieldIndicator):
    """Low price of each bar."""

    def _from_bar(self, bar: Bar) -> Decimal:
        return bar.low


class ClosePriceIndicator(BarFieldIndicator):
    """Close price of each bar."""

    def _from_bar(self, bar: Bar) -> Decimal:
        return bar.close


class VolumeIndicator(BarFieldIndicator):
    """Traded volume of each bar."""

    def _from_bar(self, bar: Bar) -> Decimal:
        return bar.volume


class MedianPriceIndicator(BarFieldIndicator):
    """Midpoint of the bar range: ``(high + low) / 2``."""

    def _from_bar(self, bar: Bar) -> Decimal:
        return self.num_factory.divide(bar.high + bar.low, TWO)


class TypicalPriceIndicator(BarFieldIndicator):
    """Typical price: ``(high + low + close) / 3``."""

    def _from_bar(self, bar: Bar) -> Decimal:
        return self.num_factory.divide(bar.high + bar.low + bar.close, THREE)
