"""Named performance report over a trading record.

``calculate_report`` runs a set of criteria and returns a dictionary
suitable for display, as the backtester does after every run.
"""

from collections.abc import Mapping
from decimal import Decimal

from trading_analysis.analysis.criteria.base import PositionFilter
from trading_analysis.analysis.criteria.drawdown import (
    MaximumDrawdownCriterion,
    ReturnOverMaxDrawdownCriterion,
)
from trading_analysis.analysis.criteria.pnl import (
    ProfitLossCriterion,
    ProfitLossRatioCriterion,
    ReturnCriterion,
)
from trading_analysis.analysis.criteria.positions import (
    ExpectancyCriterion,
    NumberOfPositionsCriterion,
    PositionsRatioCriterion,
    SqnCriterion,
)
from trading_analysis.analysis.criteria.risk import ExpectedShortfallCriterion, ValueAtRiskCriterion
from trading_analysis.core.numbers import NumFactory
from trading_analysis.core.protocols import AnalysisCriterion
from trading_analysis.trading.record import TradingRecord


def default_criteria(num_factory: NumFactory | None = None) -> dict[str, AnalysisCriterion]:
    """Return the criteria reported when none are given, keyed by report name."""
    factory = num_factory or NumFactory()
    return {
        "total_return": ReturnCriterion(add_base=False),
        "net_profit": ProfitLossCriterion(),
        "win_rate": PositionsRatioCriterion(PositionFilter.PROFIT, factory),
        "profit_loss_ratio": ProfitLossRatioCriterion(factory),
        "expectancy": ExpectancyCriterion(factory),
        "max_drawdown": MaximumDrawdownCriterion(),
        "return_over_max_drawdown": ReturnOverMaxDrawdownCriterion(factory),
        "sqn": SqnCriterion(num_factory=factory),
        "value_at_risk": ValueAtRiskCriterion(num_factory=factory),
        "expected_shortfall": ExpectedShortfallCriterion(num_factory=factory),
        "total_positions": NumberOfPositionsCriterion(),
    }


def calculate_report(
    record: TradingRecord,
    criteria: Mapping[str, AnalysisCriterion] | None = None,
) -> dict[str, Decimal]:
    """Calculate every criterion over ``record`` and return the values by name.

    Args:
        record: The trading record to analyse.
        criteria: Criteria keyed by report name; defaults to ``default_criteria``.

    Returns:
        The criterion values, in the order the criteria were given.

    """
    selected = criteria if criteria is not None else default_criteria(record.num_factory)
    return {name: criterion.calculate(record) for name, criterion in selected.items()}
