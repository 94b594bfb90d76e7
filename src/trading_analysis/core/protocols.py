"""Structural protocols for the pluggable seams of the analysis engine.

Define the interfaces that decouple the bar series, indicator context,
trading record, and backtest executor from concrete implementations. Any
class whose shape matches these protocols can be used without explicit
inheritance (structural subtyping).
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from trading_analysis.core.models import Bar

if TYPE_CHECKING:
    from trading_analysis.trading.position import Position
    from trading_analysis.trading.record import TradingRecord


@runtime_checkable
class BarListener(Protocol):
    """Receiver of newly appended bars.

    A ``BarSeries`` calls ``on_bar`` once per appended bar, after the bar
    is stored and the series' current index has moved to it.
    """

    def on_bar(self, bar: Bar) -> object:
        """Handle a newly appended bar."""
        ...


@runtime_checkable
class NumericIndicator(Protocol):
    """Capability shared by every indicator flavor.

    ``value(index)`` is idempotent per index, ``lag`` is the number of bars
    needed before the value is meaningful, and ``is_stable`` reports whether
    the series' current index has passed that warm-up.
    """

    @property
    def lag(self) -> int:
        """Return the number of warm-up bars."""
        ...

    @property
    def is_stable(self) -> bool:
        """Return whether the indicator has passed its warm-up."""
        ...

    def value(self, index: int | None = None) -> Decimal:
        """Return the value at ``index`` (default: the series' current index)."""
        ...


@runtime_checkable
class CostModel(Protocol):
    """Stateless calculator of transaction and holding costs.

    Transaction cost is charged once per entry and once per exit; holding
    cost is a function of how long a position has been held. The caller
    supplies all context on every call.
    """

    def calculate(self, price: Decimal, amount: Decimal) -> Decimal:
        """Return the transaction cost of trading ``amount`` at ``price``."""
        ...

    def holding_cost(
        self,
        entry_price: Decimal,
        current_price: Decimal,
        amount: Decimal,
        elapsed: timedelta,
    ) -> Decimal:
        """Return the cost of holding ``amount`` units for ``elapsed`` time."""
        ...


@runtime_checkable
class AnalysisCriterion(Protocol):
    """Performance metric computed from a trading record.

    Implementors must return their identity value for an empty record
    rather than failing or dividing by zero.
    """

    def calculate(self, record: "TradingRecord") -> Decimal:
        """Return the metric for the whole record."""
        ...

    def calculate_position(self, position: "Position") -> Decimal:
        """Return the metric for a single position."""
        ...

    def better_than(self, first: Decimal, second: Decimal) -> bool:
        """Return whether ``first`` is a better metric value than ``second``."""
        ...


@runtime_checkable
class Strategy(Protocol):
    """Entry and exit decision maker driven by the backtest executor.

    Strategies read indicator values for the given bar index and inspect
    the trading record; they never mutate either.
    """

    @property
    def name(self) -> str:
        """Return the strategy name."""
        ...

    @property
    def unstable_bars(self) -> int:
        """Return the number of leading bars during which no entry is allowed."""
        ...

    def should_enter(self, index: int, record: "TradingRecord") -> bool:
        """Return whether to open a position at ``index``."""
        ...

    def should_exit(self, index: int, record: "TradingRecord") -> bool:
        """Return whether to close the open position at ``index``."""
        ...


@runtime_checkable
class ContextUpdateListener(Protocol):
    """Receiver of one notification per new bar processed by an indicator context."""

    def on_context_update(self, time: datetime, context: object) -> None:
        """Handle a completed context update for the bar ending at ``time``."""
        ...


@runtime_checkable
class IndicatorChangeListener(Protocol):
    """Receiver of per-indicator notifications after each evaluation."""

    def on_indicator_change(self, time: datetime, name: str, indicator: NumericIndicator) -> None:
        """Handle the evaluation of ``indicator`` for the bar beginning at ``time``."""
        ...
