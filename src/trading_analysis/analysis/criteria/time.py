"""Time-based criteria."""

from datetime import timedelta
from decimal import Decimal

from trading_analysis.analysis.criteria.base import LowerIsBetterCriterion
from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.numbers import ZERO
from trading_analysis.trading.position import Position


class TimeInTradeCriterion(LowerIsBetterCriterion):
    """Time spent in closed positions, counted in whole ``unit`` intervals.

    Open positions count as ``0``.
    """

    def __init__(self, unit: timedelta = timedelta(days=1)) -> None:
        """Initialize the criterion.

        Raises:
            ConfigurationError: If ``unit`` is not positive.

        """
        if unit <= timedelta(0):
            msg = f"unit must be positive, got {unit}"
            raise ConfigurationError(msg)
        self._unit = unit

    @classmethod
    def minutes(cls) -> "TimeInTradeCriterion":
        """Return a criterion counting minutes."""
        return cls(timedelta(minutes=1))

    @classmethod
    def hours(cls) -> "TimeInTradeCriterion":
        """Return a criterion counting hours."""
        return cls(timedelta(hours=1))

    @classmethod
    def days(cls) -> "TimeInTradeCriterion":
        """Return a criterion counting days."""
        return cls(timedelta(days=1))

    def calculate_position(self, position: Position) -> Decimal:
        """Return the whole units between entry and exit, ``0`` unless closed."""
        if not position.is_closed:
            return ZERO
        return Decimal(position.time_in_trade // self._unit)
