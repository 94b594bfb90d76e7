"""Benchmark criteria that compare trading against holding the bar series."""

from decimal import Decimal
from typing import TYPE_CHECKING

from trading_analysis.analysis.criteria.base import Criterion
from trading_analysis.core.models import Bar, TradeType
from trading_analysis.core.numbers import ONE
from trading_analysis.core.protocols import AnalysisCriterion
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord

if TYPE_CHECKING:
    from trading_analysis.series.bar_series import BarSeries

MIN_HOLD_BARS = 2


class EnterAndHoldReturnCriterion(Criterion):
    """Gross return of entering on the first bar and exiting on the last.

    ``1`` for an empty series. The trading record is ignored; it serves as
    the benchmark a strategy's ``ReturnCriterion`` is compared with.
    """

    def __init__(self, series: "BarSeries", trade_type: TradeType = TradeType.BUY) -> None:
        """Initialize the criterion over ``series`` in the ``trade_type`` direction."""
        self._series = series
        self._trade_type = trade_type

    @classmethod
    def buy(cls, series: "BarSeries") -> "EnterAndHoldReturnCriterion":
        """Return the long enter-and-hold benchmark."""
        return cls(series, TradeType.BUY)

    @classmethod
    def sell(cls, series: "BarSeries") -> "EnterAndHoldReturnCriterion":
        """Return the short enter-and-hold benchmark."""
        return cls(series, TradeType.SELL)

    def _hold(self, first_index: int, last_index: int) -> Decimal:
        position = Position(self._trade_type, num_factory=self._series.num_factory)
        first = self._series.get(first_index)
        last = self._series.get(last_index)
        position.operate(first.end_time, first.close, ONE)
        position.operate(last.end_time, last.close, ONE)
        return position.gross_return

    def calculate(self, record: TradingRecord) -> Decimal:  # noqa: ARG002
        """Return the enter-and-hold return over the whole series."""
        if self._series.is_empty:
            return ONE
        return self._hold(self._series.begin_index, self._series.end_index)

    def calculate_position(self, position: Position) -> Decimal:
        """Return the enter-and-hold return from the position's entry to its exit.

        An open position is valued at the last bar it has seen.
        """
        if position.entry is None:
            return ONE
        holder = Position(self._trade_type, num_factory=self._series.num_factory)
        holder.operate(position.entry.time, position.entry.price, ONE)
        if position.exit is not None:
            return holder.gross_return_at(position.exit.price)
        bars = position.bars
        return holder.gross_return_at(bars[-1].close if bars else position.entry.price)


class VersusEnterAndHoldCriterion(Criterion):
    """Ratio of a criterion on the strategy to the same criterion on enter-and-hold.

    The benchmark record enters on the first bar of the series and exits on
    the last (or, per position, on the bars spanning the position), with
    no costs. A value above ``1`` beats holding when ``criterion`` is
    higher-is-better. ``1`` when fewer than two bars span the benchmark or the
    position is not closed; NaN when the benchmark value is zero.
    """

    def __init__(
        self,
        series: "BarSeries",
        criterion: AnalysisCriterion,
        trade_type: TradeType = TradeType.BUY,
    ) -> None:
        """Initialize the criterion comparing ``criterion`` against holding ``series``."""
        self._series = series
        self._criterion = criterion
        self._trade_type = trade_type

    def _hold_record(self, bars: list[Bar]) -> TradingRecord:
        record = TradingRecord(self._trade_type, "enter-and-hold", num_factory=self._series.num_factory)
        first, last = bars[0], bars[-1]
        record.enter(first.end_time, first.close, ONE)
        for bar in bars[1:]:
            record.on_bar(bar)
        record.exit(last.end_time, last.close, ONE)
        return record

    def _versus(self, value: Decimal, benchmark: TradingRecord) -> Decimal:
        return self._series.num_factory.divide(value, self._criterion.calculate(benchmark))

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the criterion on ``record`` over the criterion on holding the whole series."""
        bars = list(self._series)
        if len(bars) < MIN_HOLD_BARS:
            return ONE
        return self._versus(self._criterion.calculate(record), self._hold_record(bars))

    def calculate_position(self, position: Position) -> Decimal:
        """Return the criterion on ``position`` over holding from its entry to its exit."""
        if position.entry is None or position.exit is None:
            return ONE
        start, end = position.entry.time, position.exit.time
        bars = [bar for bar in self._series if start <= bar.end_time <= end]
        if len(bars) < MIN_HOLD_BARS:
            return ONE
        return self._versus(self._criterion.calculate_position(position), self._hold_record(bars))

    def __repr__(self) -> str:
        """Return the class name and the wrapped criterion."""
        return f"{type(self).__name__}({self._criterion!r})"
