"""Simple Moving Average (SMA) crossover strategy.

How it works:
    A "short" SMA reacts quickly to new closes and a "long" SMA moves
    slowly. When the short line crosses above the long line the strategy
    enters; when it crosses back below, it exits.

Params:
    short_period: Number of bars for the fast-moving average (default 10).
    long_period:  Number of bars for the slow-moving average (default 20).
"""

from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.indicators.averages import SMAIndicator
from trading_analysis.indicators.context import IndicatorContext
from trading_analysis.indicators.helpers import CrossDownIndicator, CrossUpIndicator
from trading_analysis.indicators.prices import ClosePriceIndicator
from trading_analysis.series.bar_series import BarSeries
from trading_analysis.trading.record import TradingRecord

SHORT_SMA = "short_sma"
LONG_SMA = "long_sma"
CROSS_UP = "cross_up"
CROSS_DOWN = "cross_down"


class SmaCrossoverStrategy:
    """Enter when the short SMA crosses above the long SMA, exit when it crosses below.

    The indicators live in an ``IndicatorContext`` subscribed to ``series``,
    so they are evaluated as each bar is appended.
    """

    def __init__(self, series: BarSeries, short_period: int = 10, long_period: int = 20) -> None:
        """Initialize the strategy and register its indicators.

        Raises:
            ConfigurationError: If ``short_period`` is not below ``long_period``.

        """
        if short_period >= long_period:
            msg = f"short_period ({short_period}) must be < long_period ({long_period})"
            raise ConfigurationError(msg)
        self._short_period = short_period
        self._long_period = long_period

        close = ClosePriceIndicator(series)
        short_sma = SMAIndicator(close, short_period)
        long_sma = SMAIndicator(close, long_period)
        self._cross_up = CrossUpIndicator(short_sma, long_sma)
        self._cross_down = CrossDownIndicator(short_sma, long_sma)

        self._context = IndicatorContext(series)
        self._context.add(short_sma, SHORT_SMA)
        self._context.add(long_sma, LONG_SMA)
        self._context.add(self._cross_up, CROSS_UP)
        self._context.add(self._cross_down, CROSS_DOWN)

    @property
    def name(self) -> str:
        """Return the strategy name including period parameters."""
        return f"sma_crossover_{self._short_period}_{self._long_period}"

    @property
    def context(self) -> IndicatorContext:
        """Return the indicator context the strategy reads from."""
        return self._context

    @property
    def unstable_bars(self) -> int:
        """Return the bars needed before a cross of the two SMAs is meaningful."""
        return self._cross_up.lag

    def should_enter(self, index: int, record: TradingRecord) -> bool:  # noqa: ARG002
        """Return whether the short SMA crossed above the long SMA at ``index``."""
        return self._cross_up.crossed(index)

    def should_exit(self, index: int, record: TradingRecord) -> bool:  # noqa: ARG002
        """Return whether the short SMA crossed below the long SMA at ``index``."""
        return self._cross_down.crossed(index)
