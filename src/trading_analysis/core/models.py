"""Core value objects shared across series, indicators, and trading records.

Define the immutable ``Bar`` snapshot that every indicator reads from, the
``Timeframe`` a bar belongs to, and the ``TradeType`` direction used by
positions and trades.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from trading_analysis.core.numbers import ZERO


class TradeType(Enum):
    """Direction of a trade: BUY (go long / cover) or SELL (go short / close a long)."""

    BUY = "BUY"
    SELL = "SELL"

    @property
    def complement(self) -> "TradeType":
        """Return the opposite direction, used for the exit of a position."""
        return TradeType.SELL if self is TradeType.BUY else TradeType.BUY


class Timeframe(Enum):
    """Supported bar timeframes from 1-minute to 1-week."""

    UNDEFINED = "undefined"
    M1 = "1m"
    M5 = "5m"
    M15 = "15m"
    H1 = "1h"
    H4 = "4h"
    D1 = "1d"
    W1 = "1w"

    @property
    def duration(self) -> timedelta | None:
        """Return the length of one bar, or ``None`` for ``UNDEFINED``."""
        return _TIMEFRAME_DURATIONS.get(self)


_TIMEFRAME_DURATIONS = {
    Timeframe.M1: timedelta(minutes=1),
    Timeframe.M5: timedelta(minutes=5),
    Timeframe.M15: timedelta(minutes=15),
    Timeframe.H1: timedelta(hours=1),
    Timeframe.H4: timedelta(hours=4),
    Timeframe.D1: timedelta(days=1),
    Timeframe.W1: timedelta(weeks=1),
}


@dataclass(frozen=True)
class Bar:
    """Immutable OHLCV bar for one time bucket of one timeframe.

    A bar is published once its period has ended and is never mutated
    afterwards; bars still accumulating trades live in a ``BarBuilder``.
    Construction validates ``begin_time < end_time`` and that open and
    close lie within ``[low, high]``.
    """

    begin_time: datetime
    end_time: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = ZERO
    amount: Decimal = ZERO
    trades: int = 0
    timeframe: Timeframe = Timeframe.UNDEFINED

    def __post_init__(self) -> None:
        """Validate the time bucket and the price range."""
        if self.begin_time >= self.end_time:
            msg = f"begin_time ({self.begin_time}) must be before end_time ({self.end_time})"
            raise ValueError(msg)
        if self.low > self.high:
            msg = f"low ({self.low}) must not exceed high ({self.high})"
            raise ValueError(msg)
        for label, price in (("open", self.open), ("close", self.close)):
            if not (self.low <= price <= self.high):
                msg = f"{label} ({price}) must lie within [{self.low}, {self.high}]"
                raise ValueError(msg)

    @property
    def time_period(self) -> timedelta:
        """Return the duration covered by this bar."""
        return self.end_time - self.begin_time

    @property
    def is_bullish(self) -> bool:
        """Return whether the bar closed above its open."""
        return self.open < self.close

    @property
    def is_bearish(self) -> bool:
        """Return whether the bar closed below its open."""
        return self.close < self.open

    def in_period(self, timestamp: datetime) -> bool:
        """Return whether ``timestamp`` falls in ``[begin_time, end_time)``."""
        return self.begin_time <= timestamp < self.end_time
