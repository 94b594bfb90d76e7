"""Tests for core protocols."""

from datetime import timedelta
from decimal import Decimal

from trading_analysis.analysis.criteria.pnl import ProfitLossCriterion
from trading_analysis.core.models import Bar
from trading_analysis.core.protocols import (
    AnalysisCriterion,
    BarListener,
    CostModel,
    NumericIndicator,
    Strategy,
)
from trading_analysis.indicators.prices import ClosePriceIndicator
from trading_analysis.series.bar_series import BarSeries
from trading_analysis.trading.costs import LinearBorrowingCostModel, ZeroCostModel
from trading_analysis.trading.record import TradingRecord


class FakeStrategy:
    """A class that structurally satisfies Strategy."""

    @property
    def name(self) -> str:
        """Return strategy name."""
        return "fake"

    @property
    def unstable_bars(self) -> int:
        """Return no warm-up."""
        return 0

    def should_enter(self, index: int, record: TradingRecord) -> bool:  # noqa: ARG002
        """Never enter."""
        return False

    def should_exit(self, index: int, record: TradingRecord) -> bool:  # noqa: ARG002
        """Never exit."""
        return False


class FakeListener:
    """A class that structurally satisfies BarListener."""

    def on_bar(self, bar: Bar) -> None:
        """Ignore the bar."""


class FakeCostModel:
    """A class that structurally satisfies CostModel."""

    def calculate(self, price: Decimal, amount: Decimal) -> Decimal:  # noqa: ARG002
        """Return zero."""
        return Decimal(0)

    def holding_cost(
        self,
        entry_price: Decimal,  # noqa: ARG002
        current_price: Decimal,  # noqa: ARG002
        amount: Decimal,  # noqa: ARG002
        elapsed: timedelta,  # noqa: ARG002
    ) -> Decimal:
        """Return zero."""
        return Decimal(0)


class BadStrategy:
    """Missing should_enter and should_exit."""

    @property
    def name(self) -> str:
        """Return strategy name."""
        return "bad"


class TestProtocols:
    """Tests for structural subtyping of the protocols."""

    def test_fake_strategy_satisfies_protocol(self) -> None:
        """Test that FakeStrategy is recognized as Strategy."""
        assert isinstance(FakeStrategy(), Strategy)

    def test_bad_strategy_does_not_satisfy_protocol(self) -> None:
        """Test that BadStrategy is not recognized as Strategy."""
        assert not isinstance(BadStrategy(), Strategy)

    def test_fake_listener_satisfies_protocol(self) -> None:
        """Test that FakeListener is recognized as BarListener."""
        assert isinstance(FakeListener(), BarListener)

    def test_cost_models_satisfy_protocol(self) -> None:
        """Built-in and fake cost models are CostModels."""
        assert isinstance(FakeCostModel(), CostModel)
        assert isinstance(ZeroCostModel(), CostModel)
        assert isinstance(LinearBorrowingCostModel(Decimal("0.01")), CostModel)

    def test_indicator_satisfies_protocol(self) -> None:
        """Cached indicators are NumericIndicators."""
        assert isinstance(ClosePriceIndicator(BarSeries()), NumericIndicator)

    def test_criterion_satisfies_protocol(self) -> None:
        """Criteria are AnalysisCriteria."""
        assert isinstance(ProfitLossCriterion(), AnalysisCriterion)
