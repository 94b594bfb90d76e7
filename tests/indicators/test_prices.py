"""Tests for bar field indicators."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from trading_analysis.core.models import Bar
from trading_analysis.core.numbers import NumFactory
from trading_analysis.indicators.prices import (
    ClosePriceIndicator,
    HighPriceIndicator,
    LowPriceIndicator,
    MedianPriceIndicator,
    OpenPriceIndicator,
    TypicalPriceIndicator,
    VolumeIndicator,
)
from trading_analysis.series.bar_series import BarSeries


@pytest.fixture
def series(bar_factory: Callable[..., Bar]) -> BarSeries:
    """Return a single-bar series with distinct OHLCV fields."""
    result = BarSeries("prices")
    result.append(bar_factory(0, 12, open_=10, high=14, low=8, volume=5))
    return result


class TestPriceIndicators:
    """Tests for the OHLCV indicators."""

    def test_fields(self, series: BarSeries) -> None:
        """Each indicator reads its field with lag 0."""
        assert OpenPriceIndicator(series).value(0) == Decimal(10)
        assert HighPriceIndicator(series).value(0) == Decimal(14)
        assert LowPriceIndicator(series).value(0) == Decimal(8)
        assert ClosePriceIndicator(series).value(0) == Decimal(12)
        assert VolumeIndicator(series).value(0) == Decimal(5)
        assert ClosePriceIndicator(series).lag == 0

    def test_median_price(self, series: BarSeries) -> None:
        """Median price is the middle of the high/low range."""
        assert MedianPriceIndicator(series).value(0) == Decimal(11)

    def test_typical_price(self, series: BarSeries) -> None:
        """Typical price averages high, low and close."""
        expected = NumFactory().divide(Decimal(34), Decimal(3))
        assert TypicalPriceIndicator(series).value(0) == expected
