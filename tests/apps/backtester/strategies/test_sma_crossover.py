"""Tests for the SMA crossover strategy."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from trading_analysis.apps.backtester.executor import BacktestExecutor
from trading_analysis.apps.backtester.strategies.sma_crossover import (
    CROSS_UP,
    LONG_SMA,
    SmaCrossoverStrategy,
)
from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.models import Bar
from trading_analysis.core.protocols import Strategy
from trading_analysis.series.bar_series import BarSeries

CLOSES = [10, 9, 8, 9, 11, 13, 12, 9, 7]
EXPECTED_UNSTABLE_BARS = 3


class TestSmaCrossoverStrategy:
    """Tests for SmaCrossoverStrategy."""

    def test_invalid_periods(self) -> None:
        """The short period must be below the long one."""
        with pytest.raises(ConfigurationError, match="short_period"):
            SmaCrossoverStrategy(BarSeries(), short_period=20, long_period=10)

    def test_name_and_warm_up(self) -> None:
        """Expose the name, the warm-up and the registered indicators."""
        strategy = SmaCrossoverStrategy(BarSeries(), short_period=2, long_period=3)
        assert isinstance(strategy, Strategy)
        assert strategy.name == "sma_crossover_2_3"
        assert strategy.unstable_bars == EXPECTED_UNSTABLE_BARS
        assert LONG_SMA in strategy.context
        assert CROSS_UP in strategy.context

    def test_backtest(self, bar_factory: Callable[..., Bar]) -> None:
        """Enter on the cross above and exit on the cross below."""
        series = BarSeries("sma")
        strategy = SmaCrossoverStrategy(series, short_period=2, long_period=3)
        result = BacktestExecutor(series, strategy).run(bar_factory(i, c) for i, c in enumerate(CLOSES))

        assert result.record.position_count == 1
        position = result.record.positions[0]
        assert position.entry.price == Decimal(11)  # type: ignore[union-attr]
        assert position.exit.price == Decimal(9)  # type: ignore[union-attr]
        assert result.metrics["net_profit"] == Decimal(-2)
        assert strategy.context.is_stable
