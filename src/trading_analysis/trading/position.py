"""Position lifecycle: one entry trade, one exit trade, and their costs.

A position moves ``NEW -> OPENED -> CLOSED``. The entry uses the configured
starting direction and the exit its complement; a closed position never
changes again. Profit is always derived from the trades and cost models,
never stored.

Holding cost is a function of the time between entry and exit. For a
closed position it is fully determined by the two trades; for an open
position it runs to the end of the last bar delivered through ``on_bar``.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from trading_analysis.core.exceptions import ProtocolViolationError, TypeMismatchError
from trading_analysis.core.models import Bar, TradeType
from trading_analysis.core.numbers import ONE, TWO, ZERO, NumberLike, NumFactory
from trading_analysis.core.protocols import CostModel
from trading_analysis.trading.costs import ZeroCostModel
from trading_analysis.trading.trade import OrderType, Trade

logger = logging.getLogger(__name__)


class PositionState(Enum):
    """Lifecycle state of a position."""

    NEW = "NEW"
    OPENED = "OPENED"
    CLOSED = "CLOSED"


class Position:
    """A pair of entry and exit trades with cost attribution."""

    def __init__(
        self,
        starting_type: TradeType = TradeType.BUY,
        transaction_cost_model: CostModel | None = None,
        holding_cost_model: CostModel | None = None,
        num_factory: NumFactory | None = None,
    ) -> None:
        """Initialize a NEW position.

        Args:
            starting_type: Direction of the entry trade (BUY for long, SELL for short).
            transaction_cost_model: Cost charged on entry and on exit.
            holding_cost_model: Cost accrued while the position is held.
            num_factory: Factory used to convert prices and amounts.

        """
        self._starting_type = starting_type
        self._transaction_cost_model = transaction_cost_model or ZeroCostModel()
        self._holding_cost_model = holding_cost_model or ZeroCostModel()
        self._num_factory = num_factory or NumFactory()
        self._entry: Trade | None = None
        self._exit: Trade | None = None
        self._bars: list[Bar] = []

    @property
    def starting_type(self) -> TradeType:
        """Return the direction of the entry trade."""
        return self._starting_type

    @property
    def transaction_cost_model(self) -> CostModel:
        """Return the transaction cost model."""
        return self._transaction_cost_model

    @property
    def holding_cost_model(self) -> CostModel:
        """Return the holding cost model."""
        return self._holding_cost_model

    @property
    def num_factory(self) -> NumFactory:
        """Return the numeric factory."""
        return self._num_factory

    @property
    def entry(self) -> Trade | None:
        """Return the entry trade, ``None`` while NEW."""
        return self._entry

    @property
    def exit(self) -> Trade | None:
        """Return the exit trade, ``None`` unless CLOSED."""
        return self._exit

    @property
    def state(self) -> PositionState:
        """Return the lifecycle state."""
        if self._entry is None:
            return PositionState.NEW
        if self._exit is None:
            return PositionState.OPENED
        return PositionState.CLOSED

    @property
    def is_new(self) -> bool:
        """Return whether no trade has been made yet."""
        return self._entry is None

    @property
    def is_opened(self) -> bool:
        """Return whether the entry has been made but not the exit."""
        return self._entry is not None and self._exit is None

    @property
    def is_closed(self) -> bool:
        """Return whether both trades have been made."""
        return self._exit is not None

    @property
    def is_long(self) -> bool:
        """Return whether the position enters with a BUY."""
        return self._starting_type is TradeType.BUY

    def operate(
        self,
        time: datetime,
        price: NumberLike,
        amount: NumberLike,
        trade_type: TradeType | None = None,
    ) -> Trade:
        """Record the next trade of this position.

        A NEW position records the entry, an OPENED one the exit.

        Args:
            time: Execution time.
            price: Price per unit.
            amount: Number of units.
            trade_type: Expected direction; when given it must match the
                starting type for the entry and its complement for the exit.

        Returns:
            The recorded trade.

        Raises:
            ProtocolViolationError: If the position is already closed or the
                exit precedes the entry.
            TypeMismatchError: If ``trade_type`` is not the expected direction.

        """
        if self._exit is not None:
            msg = f"Cannot trade on closed position [{self}]: attempted {trade_type or 'trade'} at {time}"
            raise ProtocolViolationError(msg)
        is_entry = self._entry is None
        expected = self._starting_type if is_entry else self._starting_type.complement
        if trade_type is not None and trade_type is not expected:
            stage = "entry" if is_entry else "exit"
            msg = f"Position {stage} must be {expected.value}, got {trade_type.value}"
            raise TypeMismatchError(msg)
        if self._entry is not None and time < self._entry.time:
            msg = f"Exit at {time} precedes entry at {self._entry.time} of position [{self}]"
            raise ProtocolViolationError(msg)

        price_num = self._num_factory.num(price)
        amount_num = self._num_factory.num(amount)
        with self._num_factory.calculating():
            cost = self._transaction_cost_model.calculate(price_num, amount_num)
        trade = Trade(
            time=time,
            price=price_num,
            amount=amount_num,
            trade_type=expected,
            order_type=OrderType.OPEN if is_entry else OrderType.CLOSE,
            cost=cost,
        )
        if is_entry:
            self._entry = trade
        else:
            self._exit = trade
        logger.debug("Position %s: %s", self.state.value, trade)
        return trade

    def on_bar(self, bar: Bar) -> None:
        """Record ``bar`` while the position is open."""
        if self.is_opened:
            self._bars.append(bar)

    @property
    def bars(self) -> tuple[Bar, ...]:
        """Return the bars observed while the position was open."""
        return tuple(self._bars)

    def _elapsed(self) -> timedelta:
        if self._entry is None:
            return timedelta(0)
        if self._exit is not None:
            return self._exit.time - self._entry.time
        if self._bars:
            return max(self._bars[-1].end_time - self._entry.time, timedelta(0))
        return timedelta(0)

    def _current_price(self) -> Decimal:
        if self._exit is not None:
            return self._exit.price
        if self._bars:
            return self._bars[-1].close
        return self._entry.price if self._entry is not None else ZERO

    @property
    def transaction_cost(self) -> Decimal:
        """Return the transaction costs of the trades made so far."""
        return self._num_factory.total(t.cost for t in (self._entry, self._exit) if t is not None)

    @property
    def holding_cost(self) -> Decimal:
        """Return the holding cost accrued between entry and exit (or the last bar)."""
        if self._entry is None:
            return ZERO
        with self._num_factory.calculating():
            return self._holding_cost_model.holding_cost(
                self._entry.price,
                self._current_price(),
                self._entry.amount,
                self._elapsed(),
            )

    @property
    def position_cost(self) -> Decimal:
        """Return transaction plus holding cost."""
        return self._num_factory.add(self.transaction_cost, self.holding_cost)

    @property
    def gross_profit(self) -> Decimal:
        """Return profit before costs; zero unless closed."""
        if self._exit is None:
            return ZERO
        return self.gross_profit_at(self._exit.price)

    def gross_profit_at(self, price: NumberLike) -> Decimal:
        """Return the profit before costs if the position were valued at ``price``.

        A closed position is always valued at its exit.
        """
        if self._entry is None:
            return ZERO
        factory = self._num_factory
        exit_price = self._exit.price if self._exit is not None else factory.num(price)
        exit_amount = self._exit.amount if self._exit is not None else self._entry.amount
        gross = factory.subtract(
            factory.multiply(exit_price, exit_amount),
            factory.multiply(self._entry.price, self._entry.amount),
        )
        return gross if self.is_long else factory.negate(gross)

    @property
    def profit(self) -> Decimal:
        """Return the net profit; zero unless closed."""
        if self._exit is None:
            return ZERO
        return self._num_factory.subtract(self.gross_profit, self.position_cost)

    def profit_at(self, price: NumberLike) -> Decimal:
        """Return the net profit if the position were closed at ``price``.

        Only the costs incurred so far are deducted; an open position's exit
        fee is not yet known.
        """
        return self._num_factory.subtract(self.gross_profit_at(price), self.position_cost)

    @property
    def gross_return(self) -> Decimal:
        """Return the price ratio of the position; zero unless closed.

        Long: ``exit / entry``. Short: ``2 - exit / entry``.
        """
        if self._entry is None or self._exit is None:
            return ZERO
        return self.gross_return_at(self._exit.price)

    def gross_return_at(self, price: NumberLike) -> Decimal:
        """Return the price ratio if the position were valued at ``price``."""
        if self._entry is None:
            return ONE
        ratio = self._num_factory.divide(self._num_factory.num(price), self._entry.price)
        return ratio if self.is_long else self._num_factory.subtract(TWO, ratio)

    def has_profit(self) -> bool:
        """Return whether the net profit is strictly positive."""
        return self.profit > ZERO

    def has_loss(self) -> bool:
        """Return whether the net profit is strictly negative."""
        return self.profit < ZERO

    @property
    def cash_flow(self) -> list[tuple[datetime, Decimal]]:
        """Return ``(bar end time, value ratio)`` for every bar seen while open.

        The ratio compares the close, adjusted by the per-unit holding cost,
        with the entry price: ``price / entry`` for a long position and
        ``1 + (entry - price) / entry`` for a short one.
        """
        if self._entry is None or not self._bars:
            return []
        factory = self._num_factory
        entry_price = self._entry.price
        cost_per_unit = factory.divide(self.holding_cost, self._entry.amount, default=ZERO)
        flow: list[tuple[datetime, Decimal]] = []
        for bar in self._bars:
            if self.is_long:
                ratio = factory.divide(factory.subtract(bar.close, cost_per_unit), entry_price)
            else:
                loss = factory.subtract(entry_price, factory.add(bar.close, cost_per_unit))
                ratio = factory.add(ONE, factory.divide(loss, entry_price))
            flow.append((bar.end_time, ratio))
        return flow

    @property
    def max_drawdown(self) -> Decimal:
        """Return the largest peak-to-trough decline of the cash flow, as a fraction.

        The peak starts at ``1`` (the entry value).
        """
        return curve_drawdown((value for _, value in self.cash_flow), self._num_factory)

    @property
    def time_in_trade(self) -> timedelta:
        """Return the time between entry and exit, or up to the last bar while open."""
        return self._elapsed()

    def __str__(self) -> str:
        """Return ``Entry: ... exit: ...``."""
        return f"Entry: {self._entry} exit: {self._exit}"

    def __repr__(self) -> str:
        """Return the state and the trades."""
        return f"Position(state={self.state.value}, entry={self._entry!r}, exit={self._exit!r})"


def curve_drawdown(values: Iterable[Decimal], num_factory: NumFactory) -> Decimal:
    """Return the largest ``(peak - value) / peak`` over a value curve.

    The peak starts at ``1``; NaN points are skipped.
    """
    peak = ONE
    drawdown = ZERO
    for value in values:
        if value.is_nan():
            continue
        peak = max(peak, value)
        drawdown = max(drawdown, num_factory.divide(num_factory.subtract(peak, value), peak, default=ZERO))
    return drawdown
