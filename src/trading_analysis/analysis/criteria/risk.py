"""Tail-risk criteria over the bar-by-bar returns of the closed positions.

Both criteria express a loss as a negative return, so a higher value is
better. Open positions are ignored.
"""

import logging
import math
from decimal import Decimal

from trading_analysis.analysis.criteria.base import Criterion
from trading_analysis.analysis.returns import position_returns, record_returns
from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.numbers import ONE, ZERO, NumberLike, NumFactory
from trading_analysis.trading.position import Position
from trading_analysis.trading.record import TradingRecord

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = Decimal("0.95")


def _confidence(value: NumberLike, num_factory: NumFactory) -> Decimal:
    confidence = num_factory.num(value)
    if not ZERO < confidence < ONE:
        msg = f"confidence must be between 0 and 1, got {value}"
        raise ConfigurationError(msg)
    return confidence


class ValueAtRiskCriterion(Criterion):
    """Historical Value at Risk of the bar returns.

    The worst return left once the best ``confidence`` share of returns is
    set aside, capped at ``0``: with 20 returns and a 95% confidence it is
    the single worst one. ``0`` without returns.
    """

    def __init__(self, confidence: NumberLike = DEFAULT_CONFIDENCE, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion.

        Raises:
            ConfigurationError: If ``confidence`` is not strictly between 0 and 1.

        """
        self._num_factory = num_factory or NumFactory()
        self._confidence = _confidence(confidence, self._num_factory)

    def _value_at_risk(self, returns: list[Decimal]) -> Decimal:
        if not returns:
            return ZERO
        in_body = int(self._num_factory.multiply(Decimal(len(returns)), self._confidence))
        in_tail = len(returns) - in_body
        value_at_risk = sorted(returns)[in_tail - 1]
        return min(value_at_risk, ZERO)

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the VaR of the returns of all closed positions."""
        return self._value_at_risk(record_returns(record))

    def calculate_position(self, position: Position) -> Decimal:
        """Return the VaR of a closed position's returns, ``0`` otherwise."""
        if not position.is_closed:
            return ZERO
        return self._value_at_risk(position_returns(position))

    def __repr__(self) -> str:
        """Return the class name and confidence."""
        return f"{type(self).__name__}(confidence={self._confidence})"


class ExpectedShortfallCriterion(Criterion):
    """Expected shortfall (conditional VaR): the mean of the worst returns.

    Zero returns are discarded first. The tail holds the worst
    ``ceil(n * (1 - confidence))`` returns, at least one. ``0`` without
    non-zero returns. Unlike the VaR, the result is not capped at ``0``.
    """

    def __init__(self, confidence: NumberLike = DEFAULT_CONFIDENCE, num_factory: NumFactory | None = None) -> None:
        """Initialize the criterion.

        Raises:
            ConfigurationError: If ``confidence`` is not strictly between 0 and 1.

        """
        self._num_factory = num_factory or NumFactory()
        self._confidence = _confidence(confidence, self._num_factory)

    def _expected_shortfall(self, returns: list[Decimal]) -> Decimal:
        nonzero = sorted(r for r in returns if r != ZERO)
        if not nonzero:
            return ZERO
        tail_share = self._num_factory.subtract(ONE, self._confidence)
        count = max(1, math.ceil(self._num_factory.multiply(Decimal(len(nonzero)), tail_share)))
        tail = nonzero[:count]
        logger.debug("Expected shortfall over the %d worst of %d returns", count, len(nonzero))
        return self._num_factory.divide(self._num_factory.total(tail), Decimal(count))

    def calculate(self, record: TradingRecord) -> Decimal:
        """Return the expected shortfall of the returns of all closed positions."""
        return self._expected_shortfall(record_returns(record))

    def calculate_position(self, position: Position) -> Decimal:
        """Return the expected shortfall of a closed position's returns, ``0`` otherwise."""
        if not position.is_closed:
            return ZERO
        return self._expected_shortfall(position_returns(position))

    def __repr__(self) -> str:
        """Return the class name and confidence."""
        return f"{type(self).__name__}(confidence={self._confidence})"
