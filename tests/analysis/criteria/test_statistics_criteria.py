"""Tests for the statistics criteria over per-position values."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from trading_analysis.analysis.criteria.pnl import ProfitLossCriterion
from trading_analysis.analysis.criteria.statistics import (
    AverageCriterion,
    StandardDeviationCriterion,
    StandardErrorCriterion,
    VarianceCriterion,
    mean,
    population_variance,
)
from trading_analysis.core.numbers import ZERO, NumFactory
from trading_analysis.trading.record import TradingRecord

RecordFactory = Callable[..., TradingRecord]

# Profits 10 and 5.
PRICES = (100, 110, 100, 105)
EXPECTED_AVERAGE = Decimal("7.5")
EXPECTED_VARIANCE = Decimal("6.25")
EXPECTED_DEVIATION = Decimal("2.5")


class TestHelpers:
    """Tests for mean and population_variance."""

    def test_values(self) -> None:
        """Compute the mean and the population variance."""
        factory = NumFactory()
        values = [Decimal(2), Decimal(4), Decimal(4), Decimal(4), Decimal(5), Decimal(5), Decimal(7), Decimal(9)]
        assert mean(values, factory) == Decimal(5)
        assert population_variance(values, factory) == Decimal(4)

    def test_empty(self) -> None:
        """No values give 0."""
        assert mean([], NumFactory()) == ZERO
        assert population_variance([], NumFactory()) == ZERO


class TestAverage:
    """Tests for AverageCriterion."""

    def test_average_profit(self, record_factory: RecordFactory) -> None:
        """Average the net profit of the closed positions."""
        criterion = AverageCriterion(ProfitLossCriterion())
        record = record_factory(*PRICES)
        assert criterion.calculate(record) == EXPECTED_AVERAGE
        assert criterion.calculate_position(record.positions[0]) == Decimal(10)

    def test_empty(self) -> None:
        """An empty record averages to 0."""
        assert AverageCriterion(ProfitLossCriterion()).calculate(TradingRecord()) == ZERO


class TestVariance:
    """Tests for VarianceCriterion."""

    def test_variance_of_profit(self, record_factory: RecordFactory) -> None:
        """Population variance of 10 and 5."""
        record = record_factory(*PRICES)
        assert VarianceCriterion(ProfitLossCriterion()).calculate(record) == EXPECTED_VARIANCE

    def test_open_position_ignored(self, record_factory: RecordFactory) -> None:
        """A lone open position gives 0, as does an empty record."""
        assert VarianceCriterion(ProfitLossCriterion()).calculate(record_factory(100)) == ZERO
        assert VarianceCriterion(ProfitLossCriterion()).calculate(TradingRecord()) == ZERO

    def test_direction(self) -> None:
        """Higher is better unless configured otherwise."""
        assert VarianceCriterion(ProfitLossCriterion()).better_than(Decimal(5000), Decimal(4500))
        lower = VarianceCriterion(ProfitLossCriterion(), lower_is_better=True)
        assert lower.better_than(Decimal(4500), Decimal(5000))
        assert not lower.better_than(Decimal(5000), Decimal(4500))


class TestStandardDeviation:
    """Tests for StandardDeviationCriterion."""

    def test_deviation_of_profit(self, record_factory: RecordFactory) -> None:
        """Square root of the variance."""
        record = record_factory(*PRICES)
        criterion = StandardDeviationCriterion(ProfitLossCriterion())
        assert criterion.calculate(record) == EXPECTED_DEVIATION
        assert criterion.calculate_position(record.positions[0]) == ZERO

    def test_empty(self) -> None:
        """An empty record gives 0."""
        assert StandardDeviationCriterion(ProfitLossCriterion()).calculate(TradingRecord()) == ZERO


class TestStandardError:
    """Tests for StandardErrorCriterion."""

    def test_error_of_profit(self, record_factory: RecordFactory) -> None:
        """Deviation over the square root of the position count."""
        record = record_factory(*PRICES)
        expected = EXPECTED_DEVIATION / Decimal(2).sqrt()
        assert StandardErrorCriterion(ProfitLossCriterion()).calculate(record) == pytest.approx(expected)

    def test_empty(self) -> None:
        """An empty record gives 0."""
        assert StandardErrorCriterion(ProfitLossCriterion()).calculate(TradingRecord()) == ZERO

    def test_lower_is_better_by_default(self) -> None:
        """A smaller error is better."""
        assert StandardErrorCriterion(ProfitLossCriterion()).better_than(Decimal(1), Decimal(2))
        assert StandardErrorCriterion(ProfitLossCriterion(), lower_is_better=False).better_than(
            Decimal(2), Decimal(1)
        )
