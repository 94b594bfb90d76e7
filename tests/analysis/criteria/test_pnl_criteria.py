"""Tests for the profit and loss criteria."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from trading_analysis.analysis.criteria.pnl import (
    AverageLossCriterion,
    AverageProfitCriterion,
    AverageReturnPerBarCriterion,
    LossCriterion,
    ProfitCriterion,
    ProfitLossCriterion,
    ProfitLossPercentageCriterion,
    ProfitLossRatioCriterion,
    ReturnCriterion,
)
from trading_analysis.core.models import TradeType
from trading_analysis.core.numbers import ONE, ZERO, NumFactory
from trading_analysis.trading.costs import LinearTransactionCostModel
from trading_analysis.trading.record import TradingRecord

RecordFactory = Callable[..., TradingRecord]

EXPECTED_RETURN = Decimal("1.155")
EXPECTED_NET_RETURN = Decimal("0.155")
EXPECTED_AVERAGE_LOSS = Decimal("-17.5")
EXPECTED_FEE_LOSS = Decimal("-1.01")
ONE_PERCENT = LinearTransactionCostModel(Decimal("0.01"))
START = datetime(2024, 1, 1, tzinfo=UTC)


class TestReturnCriterion:
    """Tests for ReturnCriterion."""

    def test_compounds_positions(self, record_factory: RecordFactory) -> None:
        """Multiply the gross returns of the closed positions."""
        record = record_factory(100, 110, 100, 105)
        assert ReturnCriterion().calculate(record) == EXPECTED_RETURN
        assert ReturnCriterion(add_base=False).calculate(record) == EXPECTED_NET_RETURN

    def test_empty_record(self) -> None:
        """An empty record breaks even."""
        assert ReturnCriterion().calculate(TradingRecord()) == ONE
        assert ReturnCriterion(add_base=False).calculate(TradingRecord()) == ZERO

    def test_short_positions(self, record_factory: RecordFactory) -> None:
        """Short positions return ``2 - exit / entry``."""
        record = record_factory(100, 90, starting_type=TradeType.SELL)
        assert ReturnCriterion().calculate(record) == Decimal("1.1")

    def test_open_position_is_neutral(self, record_factory: RecordFactory) -> None:
        """The open position does not count."""
        record = record_factory(100, 110, 100)
        assert ReturnCriterion().calculate(record) == Decimal("1.1")
        assert ReturnCriterion().calculate_position(record.current_position) == ONE

    def test_higher_is_better(self) -> None:
        """Prefer a higher return."""
        assert ReturnCriterion().better_than(Decimal(2), ONE)


class TestProfitLossCriteria:
    """Tests for ProfitLoss, Profit and Loss criteria."""

    def test_net_profit(self, record_factory: RecordFactory) -> None:
        """Sum profits and losses of closed positions."""
        record = record_factory(100, 110, 100, 95, 100)
        assert ProfitLossCriterion().calculate(record) == Decimal(5)
        assert ProfitCriterion().calculate(record) == Decimal(10)
        assert LossCriterion().calculate(record) == Decimal(-5)

    def test_short_profit(self, record_factory: RecordFactory) -> None:
        """A short position earns on falling prices."""
        record = record_factory(100, 90, starting_type=TradeType.SELL)
        assert ProfitLossCriterion().calculate(record) == Decimal(10)

    def test_exclude_costs(self, record_factory: RecordFactory) -> None:
        """Fees can turn a gross winner into a net loser."""
        record = record_factory(100, 101, transaction_cost_model=ONE_PERCENT)
        assert ProfitCriterion().calculate(record) == ZERO
        assert ProfitCriterion(exclude_costs=True).calculate(record) == ONE
        assert LossCriterion().calculate(record) == EXPECTED_FEE_LOSS
        assert LossCriterion(exclude_costs=True).calculate(record) == ZERO

    def test_fees_reduce_profit(self, record_factory: RecordFactory) -> None:
        """A 1% fee on 100 -> 110 leaves 7.9."""
        record = record_factory(100, 110, transaction_cost_model=ONE_PERCENT)
        assert ProfitLossCriterion().calculate(record) == Decimal("7.9")


class TestAverageCriteria:
    """Tests for AverageProfit and AverageLoss."""

    def test_average_loss(self, record_factory: RecordFactory) -> None:
        """Average the losing positions only."""
        record = record_factory(100, 95, 100, 70)
        assert AverageLossCriterion().calculate(record) == EXPECTED_AVERAGE_LOSS
        assert AverageProfitCriterion().calculate(record) == ZERO

    def test_average_profit(self, record_factory: RecordFactory) -> None:
        """Average the winning positions only."""
        record = record_factory(100, 110, 100, 130, 100, 90)
        assert AverageProfitCriterion().calculate(record) == Decimal(20)
        assert AverageLossCriterion().calculate(record) == Decimal(-10)


class TestProfitLossRatio:
    """Tests for ProfitLossRatioCriterion."""

    def test_ratio(self, record_factory: RecordFactory) -> None:
        """Divide the average profit by the size of the average loss."""
        record = record_factory(100, 120, 100, 80, 100, 130, 100, 90)
        expected = NumFactory().divide(Decimal(25), Decimal(15))
        assert ProfitLossRatioCriterion().calculate(record) == expected

    def test_only_profits(self, record_factory: RecordFactory) -> None:
        """Profits without losses give 1."""
        assert ProfitLossRatioCriterion().calculate(record_factory(100, 110)) == ONE

    def test_no_profits(self, record_factory: RecordFactory) -> None:
        """No profits give 0."""
        assert ProfitLossRatioCriterion().calculate(record_factory(100, 90)) == ZERO
        assert ProfitLossRatioCriterion().calculate(TradingRecord()) == ZERO


class TestProfitLossPercentage:
    """Tests for ProfitLossPercentageCriterion."""

    def test_percentage(self, record_factory: RecordFactory) -> None:
        """Net profit over the capital invested at entry, in percent."""
        record = record_factory(100, 110, 100, 95)
        criterion = ProfitLossPercentageCriterion()
        assert criterion.calculate(record) == Decimal("2.5")
        assert criterion.calculate_position(record.positions[0]) == Decimal(10)

    def test_empty(self) -> None:
        """No capital invested gives 0."""
        assert ProfitLossPercentageCriterion().calculate(TradingRecord()) == ZERO


class TestAverageReturnPerBar:
    """Tests for AverageReturnPerBarCriterion."""

    def test_compounds_back_to_gross_return(self) -> None:
        """1.21 over two days is 1.1 per day."""
        record = TradingRecord()
        record.enter(START, 100, 1)
        record.exit(START + timedelta(days=2), 121, 1)
        criterion = AverageReturnPerBarCriterion()
        assert criterion.calculate(record) == pytest.approx(Decimal("1.1"))
        assert criterion.calculate_position(record.positions[0]) == pytest.approx(Decimal("1.1"))

    def test_across_positions(self, record_factory: RecordFactory) -> None:
        """Compound every closed position over the total time in trade."""
        record = record_factory(100, 110, 100, 121)
        per_day = AverageReturnPerBarCriterion().calculate(record)
        assert per_day == pytest.approx(Decimal("1.331") ** (ONE / Decimal(2)))

    def test_custom_unit(self, record_factory: RecordFactory) -> None:
        """Counting hours spreads one day's return over 24 units."""
        record = record_factory(100, 110)
        per_hour = AverageReturnPerBarCriterion(timedelta(hours=1)).calculate(record)
        assert per_hour ** 24 == pytest.approx(Decimal("1.1"))

    def test_no_time_in_trade(self, record_factory: RecordFactory) -> None:
        """An empty record, an open position and a same-day round trip give 1."""
        assert AverageReturnPerBarCriterion().calculate(TradingRecord()) == ONE
        assert AverageReturnPerBarCriterion().calculate(record_factory(100)) == ONE
        record = TradingRecord()
        record.enter(START, 100, 1)
        record.exit(START + timedelta(hours=2), 110, 1)
        assert AverageReturnPerBarCriterion().calculate(record) == ONE

    def test_higher_is_better(self) -> None:
        """Prefer a higher return per unit."""
        assert AverageReturnPerBarCriterion().better_than(Decimal("1.1"), ONE)
