"""Mutable pre-close phase of a bar.

A ``BarBuilder`` accumulates prices and trades for one time bucket and
freezes them into an immutable ``Bar`` when the bucket closes. Only the
builder is ever mutated; once ``build()`` or ``add()`` is called the
resulting bar is a plain value object.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Self

from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.models import Bar, Timeframe
from trading_analysis.core.numbers import ZERO, NumberLike, NumFactory
from trading_analysis.core.timestamps import TimestampLike, to_datetime

if TYPE_CHECKING:
    from trading_analysis.series.bar_series import BarSeries


class BarBuilder:
    """Accumulate OHLCV data for one bar and build it when the period ends."""

    def __init__(
        self,
        begin_time: TimestampLike | None = None,
        timeframe: Timeframe = Timeframe.UNDEFINED,
        num_factory: NumFactory | None = None,
        series: "BarSeries | None" = None,
    ) -> None:
        """Initialize an empty builder.

        Args:
            begin_time: Start of the bar's time bucket (datetime, Unix
                seconds or ISO 8601 string).
            timeframe: Timeframe of the bar. When it has a fixed duration the
                end time defaults to ``begin_time + duration``.
            num_factory: Factory used to convert raw numbers.
            series: Series that ``add()`` publishes the finished bar to.

        """
        self._num_factory = num_factory or (series.num_factory if series else NumFactory())
        self._series = series
        self._timeframe = timeframe
        self._begin_time = to_datetime(begin_time) if begin_time is not None else None
        self._end_time: datetime | None = None
        self._open: Decimal | None = None
        self._high: Decimal | None = None
        self._low: Decimal | None = None
        self._close: Decimal | None = None
        self._volume = ZERO
        self._amount = ZERO
        self._trades = 0

    def begin_time(self, value: TimestampLike) -> Self:
        """Set the start of the time bucket."""
        self._begin_time = to_datetime(value)
        return self

    def end_time(self, value: TimestampLike) -> Self:
        """Set the end of the time bucket."""
        self._end_time = to_datetime(value)
        return self

    def open_price(self, value: NumberLike) -> Self:
        """Set the open price."""
        self._open = self._num_factory.num(value)
        return self

    def high_price(self, value: NumberLike) -> Self:
        """Set the high price."""
        self._high = self._num_factory.num(value)
        return self

    def low_price(self, value: NumberLike) -> Self:
        """Set the low price."""
        self._low = self._num_factory.num(value)
        return self

    def close_price(self, value: NumberLike) -> Self:
        """Set the close price."""
        self._close = self._num_factory.num(value)
        return self

    def volume(self, value: NumberLike) -> Self:
        """Set the traded volume."""
        self._volume = self._num_factory.num(value)
        return self

    def amount(self, value: NumberLike) -> Self:
        """Set the traded amount (volume times price)."""
        self._amount = self._num_factory.num(value)
        return self

    def trades(self, value: int) -> Self:
        """Set the number of trades."""
        self._trades = value
        return self

    def add_price(self, price: NumberLike) -> Self:
        """Record a price observation.

        The first observed price sets the open; every price updates the
        close and widens the high/low range.
        """
        p = self._num_factory.num(price)
        if self._open is None:
            self._open = p
        self._close = p
        self._high = p if self._high is None else max(self._high, p)
        self._low = p if self._low is None else min(self._low, p)
        return self

    def add_trade(self, volume: NumberLike, price: NumberLike) -> Self:
        """Record a trade of ``volume`` units at ``price``."""
        v = self._num_factory.num(volume)
        p = self._num_factory.num(price)
        self.add_price(p)
        self._volume += v
        self._amount += v * p
        self._trades += 1
        return self

    def build(self) -> Bar:
        """Freeze the accumulated data into an immutable ``Bar``.

        Raises:
            ConfigurationError: If no price was recorded or the time bucket
                cannot be determined.
            ValueError: If the accumulated data violates the bar invariants.

        """
        if self._begin_time is None:
            msg = "Cannot build a bar without a begin time"
            raise ConfigurationError(msg)
        end_time = self._end_time
        if end_time is None:
            duration = self._timeframe.duration
            if duration is None:
                msg = "Cannot build a bar without an end time or a fixed timeframe"
                raise ConfigurationError(msg)
            end_time = self._begin_time + duration
        if self._open is None or self._high is None or self._low is None or self._close is None:
            msg = "Cannot build a bar before any price has been recorded"
            raise ConfigurationError(msg)
        return Bar(
            begin_time=self._begin_time,
            end_time=end_time,
            open=self._open,
            high=self._high,
            low=self._low,
            close=self._close,
            volume=self._volume,
            amount=self._amount,
            trades=self._trades,
            timeframe=self._timeframe,
        )

    def add(self) -> Bar:
        """Build the bar and append it to the bound series.

        Raises:
            ConfigurationError: If the builder is not bound to a series.

        """
        if self._series is None:
            msg = "BarBuilder is not bound to a series"
            raise ConfigurationError(msg)
        bar = self.build()
        self._series.append(bar)
        return bar
