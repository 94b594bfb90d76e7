"""Risk criteria based on the cash-flow drawdown of a record."""

import logging
from decimal import Decimal

from trading_analysis.analysis.cash_flow import CashFlow
from trading_analysis.analysis.criteria.base import Criterion, LowerIsBetterCriterion
from trading_analysis.analysis.criteria.pnl import ReturnCriterion
from trading_analysis.core.numbers import ZERO, NumFactory
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord

logger = logging.getLogger(__name__)


class MaximumDrawdownCriterion(LowerIsBetterCriterion):
    """Largest peak-to-trough decline of the record's cash flow, as a fraction.

    The peak carries over from one position to the next and the open
    position is included. ``0`` for an empty record.
    """

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the maximum drawdown of the combined cash flow."""
        if record.is_empty:
            return ZERO
        return CashFlow(record).max_drawdown

    def calculate_position(self, position: Position) -> Decimal:
        """Return the position's maximum drawdown."""
        return position.max_drawdown


class ReturnOverMaxDrawdownCriterion(Criterion):
    """Net return (``ReturnCriterion`` without base) divided by the maximum drawdown.

    ``0`` for an empty record or a position that is not closed. A zero
    drawdown yields the plain return.
    """

    def __init__(self, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion."""
        self._num_factory = num_factory or NumFactory()
        self._return = ReturnCriterion(add_base=False)
        self._drawdown = MaximumDrawdownCriterion()

    def _ratio(self, total_return: Decimal, drawdown: Decimal) -> Decimal:
        logger.debug("Return: %s, drawdown: %s", total_return, drawdown)
        if drawdown == ZERO:
            return total_return
        return self._num_factory.divide(total_return, drawdown)

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the record's return over maximum drawdown."""
        if record.is_empty:
            return ZERO
        return self._ratio(self._return.calculate(record), self._drawdown.calculate(record))

    def calculate_position(self, position: Position) -> Decimal:
        """Return the position's return over maximum drawdown."""
        if not position.is_closed:
            return ZERO
        return self._ratio(self._return.calculate_position(position), self._drawdown.calculate_position(position))
