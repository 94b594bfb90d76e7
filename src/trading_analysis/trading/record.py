"""Ordered ledger of closed positions plus the current position.

The ``TradingRecord`` is what strategies write to (``enter`` / ``exit``)
and what criteria read from. It always holds exactly one current position,
NEW or OPENED; closing it moves it into ``positions`` and installs a fresh
NEW position with the same direction and cost models in the same step.
"""

import logging
from datetime import datetime
from decimal import Decimal

from trading_analysis.core.exceptions import ProtocolViolationError
from trading_analysis.core.models import Bar, TradeType
from trading_analysis.core.numbers import NumberLike, NumFactory
from trading_analysis.core.protocols import CostModel
from trading_analysis.trading.costs import ZeroCostModel
from trading_analysis.trading.position import Position
from trading_analysis.trading.trade import Trade

logger = logging.getLogger(__name__)


class TradingRecord:
    """History of the positions taken by one strategy run."""

    def __init__(
        self,
        starting_type: TradeType = TradeType.BUY,
        name: str = "",
        transaction_cost_model: CostModel | None = None,
        holding_cost_model: CostModel | None = None,
        num_factory: NumFactory | None = None,
    ) -> None:
        """Initialize an empty record.

        Args:
            starting_type: Entry direction of every position.
            name: Record name (typically the strategy name).
            transaction_cost_model: Cost model charged on every trade.
            holding_cost_model: Cost model accrued while positions are open.
            num_factory: Factory used by positions to convert numbers.

        """
        self._starting_type = starting_type
        self._name = name
        self._transaction_cost_model = transaction_cost_model or ZeroCostModel()
        self._holding_cost_model = holding_cost_model or ZeroCostModel()
        self._num_factory = num_factory or NumFactory()
        self._positions: list[Position] = []
        self._trades: list[Trade] = []
        self._current_position = self._new_position()
        self._current_time: datetime | None = None
        self._current_price: Decimal | None = None

    def _new_position(self) -> Position:
        return Position(
            self._starting_type,
            self._transaction_cost_model,
            self._holding_cost_model,
            self._num_factory,
        )

    @property
    def name(self) -> str:
        """Return the record name."""
        return self._name

    @property
    def starting_type(self) -> TradeType:
        """Return the entry direction of every position."""
        return self._starting_type

    @property
    def num_factory(self) -> NumFactory:
        """Return the numeric factory."""
        return self._num_factory

    @property
    def transaction_cost_model(self) -> CostModel:
        """Return the transaction cost model."""
        return self._transaction_cost_model

    @property
    def holding_cost_model(self) -> CostModel:
        """Return the holding cost model."""
        return self._holding_cost_model

    @property
    def positions(self) -> list[Position]:
        """Return the closed positions, oldest first."""
        return list(self._positions)

    @property
    def position_count(self) -> int:
        """Return the number of closed positions."""
        return len(self._positions)

    @property
    def current_position(self) -> Position:
        """Return the position the next trade applies to (NEW or OPENED)."""
        return self._current_position

    @property
    def last_position(self) -> Position | None:
        """Return the most recently closed position, if any."""
        return self._positions[-1] if self._positions else None

    @property
    def trades(self) -> list[Trade]:
        """Return every trade recorded, oldest first."""
        return list(self._trades)

    def last_trade(self, trade_type: TradeType | None = None) -> Trade | None:
        """Return the most recent trade of ``trade_type`` (any type when ``None``)."""
        for trade in reversed(self._trades):
            if trade_type is None or trade.trade_type is trade_type:
                return trade
        return None

    @property
    def last_entry(self) -> Trade | None:
        """Return the most recent entry trade, if any."""
        return self.last_trade(self._starting_type)

    @property
    def last_exit(self) -> Trade | None:
        """Return the most recent exit trade, if any."""
        return self.last_trade(self._starting_type.complement)

    @property
    def is_closed(self) -> bool:
        """Return whether no position is open (the current position is NEW)."""
        return self._current_position.is_new

    @property
    def is_empty(self) -> bool:
        """Return whether no trade has been recorded."""
        return not self._trades

    @property
    def current_time(self) -> datetime | None:
        """Return the end time of the last bar seen by ``on_bar``."""
        return self._current_time

    @property
    def current_price(self) -> Decimal | None:
        """Return the close of the last bar seen by ``on_bar``."""
        return self._current_price

    def enter(self, time: datetime, price: NumberLike, amount: NumberLike) -> Trade:
        """Open the current position.

        Raises:
            ProtocolViolationError: If a position is already open or the trade
                is not later than the previous one.

        """
        if not self._current_position.is_new:
            msg = f"Cannot enter at {time}: position [{self._current_position}] is already open"
            raise ProtocolViolationError(msg)
        return self.operate(time, price, amount)

    def exit(self, time: datetime, price: NumberLike, amount: NumberLike) -> Trade:
        """Close the current position.

        Raises:
            ProtocolViolationError: If no position is open or the trade is
                not later than the previous one.

        """
        if not self._current_position.is_opened:
            msg = f"Cannot exit at {time}: no position is open"
            raise ProtocolViolationError(msg)
        return self.operate(time, price, amount)

    def operate(self, time: datetime, price: NumberLike, amount: NumberLike) -> Trade:
        """Record the next trade of the current position, entry or exit by state.

        Raises:
            ProtocolViolationError: If the trade is not later than the previous one.

        """
        last = self.last_trade()
        if last is not None and time <= last.time:
            msg = f"Trade at {time} is not after the previous trade at {last.time}"
            raise ProtocolViolationError(msg)
        position = self._current_position
        trade = position.operate(time, price, amount)
        self._trades.append(trade)
        if position.is_closed:
            self._positions.append(position)
            self._current_position = self._new_position()
            logger.debug(
                "Closed position %d of %r with profit %s", len(self._positions), self._name, position.profit
            )
        return trade

    def on_bar(self, bar: Bar) -> None:
        """Forward ``bar`` to the current position and remember the latest price."""
        self._current_time = bar.end_time
        self._current_price = bar.close
        self._current_position.on_bar(bar)

    def __repr__(self) -> str:
        """Return the name, direction and position count."""
        return (
            f"TradingRecord(name={self._name!r}, starting_type={self._starting_type.value}, "
            f"positions={len(self._positions)})"
        )
