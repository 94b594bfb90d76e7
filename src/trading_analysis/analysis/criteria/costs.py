"""Cost criteria."""

from decimal import Decimal

from trading_analysis.analysis.criteria.base import LowerIsBetterCriterion
from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.numbers import ZERO, NumberLike, NumFactory
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord


class LinearTransactionCostCriterion(LowerIsBetterCriterion):
    """Total cost of trading a compounding capital at ``a * capital + b`` per trade.

    Starting from ``initial_amount``, every entry pays ``a * capital + b``;
    the remaining capital is then scaled by the position's gross return and
    the exit pays ``a * capital + b`` on that new capital. The entry of an
    open position is charged as well.

    Args:
        initial_amount: Starting capital.
        a: Proportional cost per trade (``0.005`` is 0.5%).
        b: Fixed cost per trade.

    """

    def __init__(
        self,
        initial_amount: NumberLike,
        a: NumberLike,
        b: NumberLike = 0,
        num_factory: NumFactory | None = None,
    ) -> None:
        """Initialize the criterion.

        Raises:
            ConfigurationError: If any parameter is negative.

        """
        self._num_factory = num_factory or NumFactory()
        self._initial_amount = self._num_factory.num(initial_amount)
        self._a = self._num_factory.num(a)
        self._b = self._num_factory.num(b)
        for label, value in (("initial_amount", self._initial_amount), ("a", self._a), ("b", self._b)):
            if value < ZERO:
                msg = f"{label} must be >= 0, got {value}"
                raise ConfigurationError(msg)

    def _trade_cost(self, capital: Decimal) -> Decimal:
        return self._a * capital + self._b

    def _position_costs(self, position: Position, capital: Decimal) -> tuple[Decimal, Decimal]:
        """Return ``(cost, capital after the position)`` for ``position``."""
        if position.entry is None:
            return ZERO, capital
        with self._num_factory.calculating():
            entry_cost = self._trade_cost(capital)
            capital -= entry_cost
            if position.exit is None:
                return entry_cost, capital
            capital *= position.gross_return
            exit_cost = self._trade_cost(capital)
            return entry_cost + exit_cost, capital - exit_cost

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the total cost over all positions, including an open entry."""
        total = ZERO
        capital = self._initial_amount
        for position in record.positions:
            cost, capital = self._position_costs(position, capital)
            total = self._num_factory.add(total, cost)
        if record.current_position.is_opened:
            cost, _ = self._position_costs(record.current_position, capital)
            total = self._num_factory.add(total, cost)
        return total

    def calculate_position(self, position: Position) -> Decimal:
        """Return the cost of ``position`` traded with the initial amount."""
        cost, _ = self._position_costs(position, self._initial_amount)
        return cost
