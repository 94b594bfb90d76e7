"""Backtest executor that drives a strategy bar by bar over a series.

Append each bar to the ``BarSeries`` (which notifies indicator contexts),
forward it to the ``TradingRecord``, then ask the ``Strategy`` whether to
enter or exit at that bar's close. Optionally close a still-open position
on the last bar. Return a ``BacktestResult`` holding the record and the
performance report.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from trading_analysis.analysis.report import calculate_report
from trading_analysis.core.config import ConfigLoader, get_config
from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.models import Bar, TradeType
from trading_analysis.core.numbers import ONE, ZERO, NumberLike
from trading_analysis.core.protocols import CostModel, Strategy
from trading_analysis.series.bar_series import BarSeries
from trading_analysis.trading.costs import cost_models_from_config
from trading_analysis.trading.record import TradingRecord

logger = logging.getLogger(__name__)


def _empty_metrics() -> dict[str, Decimal]:
    return {}


def _config_flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True)
class BacktestResult:
    """Immutable summary of a completed backtest run."""

    strategy_name: str
    record: TradingRecord
    metrics: dict[str, Decimal] = field(default_factory=_empty_metrics)


class BacktestExecutor:
    """Run a ``Strategy`` against bars appended to a ``BarSeries``.

    The executor is single-threaded and deterministic: the same bars and
    strategy always produce the same trades.
    """

    def __init__(  # noqa: PLR0913
        self,
        series: BarSeries,
        strategy: Strategy,
        amount: NumberLike | None = None,
        starting_type: TradeType = TradeType.BUY,
        transaction_cost_model: CostModel | None = None,
        holding_cost_model: CostModel | None = None,
        *,
        close_open_position: bool = True,
    ) -> None:
        """Initialize the executor.

        Args:
            series: Series the bars are appended to; the strategy's indicators
                must read from it.
            strategy: Entry and exit decision maker.
            amount: Units traded per entry and exit (default ``1``).
            starting_type: Entry direction of every position.
            transaction_cost_model: Cost charged on every trade.
            holding_cost_model: Cost accrued while positions are open.
            close_open_position: Close a position still open on the last bar.

        Raises:
            ConfigurationError: If ``amount`` is not positive.

        """
        self._series = series
        self._strategy = strategy
        self._amount = series.num_factory.num(amount if amount is not None else ONE)
        if self._amount <= ZERO:
            msg = f"amount must be positive, got {self._amount}"
            raise ConfigurationError(msg)
        self._starting_type = starting_type
        self._transaction_cost_model = transaction_cost_model
        self._holding_cost_model = holding_cost_model
        self._close_open_position = close_open_position

    @classmethod
    def from_config(
        cls,
        series: BarSeries,
        strategy: Strategy,
        loader: ConfigLoader | None = None,
    ) -> "BacktestExecutor":
        """Build an executor from the ``backtest`` and ``costs`` configuration sections."""
        cfg = loader or get_config()
        transaction, holding = cost_models_from_config(cfg)
        return cls(
            series,
            strategy,
            amount=str(cfg.get("backtest.amount", "1")),
            transaction_cost_model=transaction,
            holding_cost_model=holding,
            close_open_position=_config_flag(cfg.get("backtest.close_open_position", True)),
        )

    def run(self, bars: Iterable[Bar]) -> BacktestResult:
        """Execute the backtest over ``bars`` and return the result.

        Entries are only considered once the bar index reaches the strategy's
        ``unstable_bars``. At most one trade is made per bar.

        Args:
            bars: Bars in strictly increasing time order.

        Returns:
            A ``BacktestResult`` with the trading record and its report.

        """
        record = TradingRecord(
            self._starting_type,
            name=self._strategy.name,
            transaction_cost_model=self._transaction_cost_model,
            holding_cost_model=self._holding_cost_model,
            num_factory=self._series.num_factory,
        )
        last_bar: Bar | None = None
        for bar in bars:
            index = self._series.append(bar)
            record.on_bar(bar)
            self._step(index, bar, record)
            last_bar = bar

        if last_bar is not None and self._close_open_position:
            self._close(last_bar, record)

        metrics = calculate_report(record)
        logger.info(
            "Backtest %s finished: %d positions, return %s",
            self._strategy.name,
            record.position_count,
            metrics["total_return"],
        )
        return BacktestResult(strategy_name=self._strategy.name, record=record, metrics=metrics)

    def _step(self, index: int, bar: Bar, record: TradingRecord) -> None:
        """Consult the strategy for ``bar`` and record at most one trade."""
        position = record.current_position
        if position.is_new:
            if index >= self._strategy.unstable_bars and self._strategy.should_enter(index, record):
                record.enter(bar.end_time, bar.close, self._amount)
        elif self._strategy.should_exit(index, record):
            record.exit(bar.end_time, bar.close, self._amount)

    def _close(self, bar: Bar, record: TradingRecord) -> None:
        """Close the open position at ``bar`` if it was entered before it."""
        entry = record.current_position.entry
        if entry is None:
            return
        if entry.time >= bar.end_time:
            logger.debug("Leaving position entered on the last bar open")
            return
        record.exit(bar.end_time, bar.close, self._amount)
