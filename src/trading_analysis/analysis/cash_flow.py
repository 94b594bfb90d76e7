"""Record-level cash flow: the value ratio of every position over time.

Each position contributes the ``(end time, ratio)`` points of the bars it
was open for. Points of different positions falling on the same timestamp
are summed. Times with no position open have the neutral value ``1``.
"""

from collections.abc import Iterator
from datetime import datetime
from decimal import Decimal

from trading_analysis.core.numbers import ONE, NumFactory
from trading_analysis.trading.position import curve_drawdown
from trading_analysis.trading.record import TradingRecord


class CashFlow:
    """Chronological cash-flow curve of a trading record, including the open position."""

    def __init__(self, record: TradingRecord) -> None:
        """Collect the cash flow of every position in ``record``."""
        self._num_factory: NumFactory = record.num_factory
        values: dict[datetime, Decimal] = {}
        positions = record.positions
        if record.current_position.is_opened:
            positions.append(record.current_position)
        for position in positions:
            for time, ratio in position.cash_flow:
                values[time] = self._num_factory.add(values[time], ratio) if time in values else ratio
        self._values = dict(sorted(values.items()))

    @property
    def times(self) -> list[datetime]:
        """Return the timestamps with a recorded value, oldest first."""
        return list(self._values)

    def value(self, time: datetime) -> Decimal:
        """Return the value at ``time``, ``1`` when no position was open."""
        return self._values.get(time, ONE)

    @property
    def max_drawdown(self) -> Decimal:
        """Return the largest peak-to-trough decline of the curve, as a fraction."""
        return curve_drawdown(self._values.values(), self._num_factory)

    def __iter__(self) -> Iterator[tuple[datetime, Decimal]]:
        """Iterate over ``(time, value)`` pairs, oldest first."""
        return iter(self._values.items())

    def __len__(self) -> int:
        """Return the number of recorded points."""
        return len(self._values)
