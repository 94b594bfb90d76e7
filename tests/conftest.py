"""Shared test configuration and fixtures."""

import os
from collections.abc import Callable, Iterator, Sequence
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest

import trading_analysis.core.config as config_module
from trading_analysis.core.models import Bar, Timeframe, TradeType
from trading_analysis.core.numbers import NumberLike, NumFactory
from trading_analysis.core.protocols import CostModel
from trading_analysis.series.bar_series import BarSeries
from trading_analysis.trading.record import TradingRecord

START = datetime(2024, 1, 1, tzinfo=UTC)
DAY = timedelta(days=1)

_ENV_OVERRIDES = ("TRADING_ANALYSIS_ENV", "TRADING_ANALYSIS_PRECISION", "TRADING_ANALYSIS_LOG_LEVEL")

BarFactory = Callable[..., Bar]
SeriesFactory = Callable[..., BarSeries]
RecordFactory = Callable[..., TradingRecord]


def daily_bar(  # noqa: PLR0913
    index: int,
    close: NumberLike,
    *,
    open_: NumberLike | None = None,
    high: NumberLike | None = None,
    low: NumberLike | None = None,
    volume: NumberLike = 0,
    period: timedelta = DAY,
) -> Bar:
    """Build the ``index``-th bar of a series starting at ``START``.

    Missing open/high/low default to the close, widened to contain it.
    """
    factory = NumFactory()
    c = factory.num(close)
    o = factory.num(open_) if open_ is not None else c
    h = factory.num(high) if high is not None else max(o, c)
    lo = factory.num(low) if low is not None else min(o, c)
    begin = START + period * index
    return Bar(
        begin_time=begin,
        end_time=begin + period,
        open=o,
        high=h,
        low=lo,
        close=c,
        volume=factory.num(volume),
        timeframe=Timeframe.D1 if period == DAY else Timeframe.UNDEFINED,
    )


@pytest.fixture(autouse=True)
def _isolate_config() -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    """Drop env overrides of settings.yaml and reset the config singleton.

    Tests that load the bundled ``settings.yaml`` should see its defaults
    regardless of the developer's shell environment.
    """
    cleared = {k: v for k, v in os.environ.items() if k not in _ENV_OVERRIDES}
    with patch.dict(os.environ, cleared, clear=True):
        config_module._config = None  # pyright: ignore[reportPrivateUsage]
        yield
        config_module._config = None  # pyright: ignore[reportPrivateUsage]


@pytest.fixture
def bar_factory() -> BarFactory:
    """Return a builder of consecutive daily bars."""
    return daily_bar


@pytest.fixture
def series_factory() -> SeriesFactory:
    """Return a builder of daily series from close prices.

    Optional ``highs``, ``lows`` and ``volumes`` sequences must match the
    length of ``closes``.
    """

    def _build(
        closes: Sequence[NumberLike],
        *,
        highs: Sequence[NumberLike] | None = None,
        lows: Sequence[NumberLike] | None = None,
        volumes: Sequence[NumberLike] | None = None,
        name: str = "test",
    ) -> BarSeries:
        series = BarSeries(name, timeframe=Timeframe.D1)
        for i, close in enumerate(closes):
            series.append(
                daily_bar(
                    i,
                    close,
                    high=highs[i] if highs is not None else None,
                    low=lows[i] if lows is not None else None,
                    volume=volumes[i] if volumes is not None else 0,
                )
            )
        return series

    return _build


@pytest.fixture
def record_factory() -> RecordFactory:
    """Return a builder of records from alternating entry and exit prices.

    The i-th price is traded at the end time of ``daily_bar(i)``; an odd
    number of prices leaves the last position open.
    """

    def _build(
        *prices: NumberLike,
        starting_type: TradeType = TradeType.BUY,
        transaction_cost_model: CostModel | None = None,
        holding_cost_model: CostModel | None = None,
        amount: NumberLike = 1,
    ) -> TradingRecord:
        record = TradingRecord(
            starting_type,
            transaction_cost_model=transaction_cost_model,
            holding_cost_model=holding_cost_model,
        )
        for i, price in enumerate(prices):
            record.operate(START + DAY * (i + 1), price, amount)
        return record

    return _build


@pytest.fixture
def bar_record_factory() -> RecordFactory:
    """Return a builder feeding daily closes to a record.

    The record enters at the close of each index in ``entries`` and exits at
    the close of each index in ``exits``; every bar is seen before trading.
    """

    def _build(
        closes: Sequence[NumberLike],
        entries: Sequence[int],
        exits: Sequence[int],
        *,
        starting_type: TradeType = TradeType.BUY,
    ) -> TradingRecord:
        record = TradingRecord(starting_type)
        for i, close in enumerate(closes):
            bar = daily_bar(i, close)
            record.on_bar(bar)
            if i in entries:
                record.enter(bar.end_time, bar.close, 1)
            elif i in exits:
                record.exit(bar.end_time, bar.close, 1)
        return record

    return _build
