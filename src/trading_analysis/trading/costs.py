"""Transaction and holding cost models.

Models are stateless frozen dataclasses: every call receives the full
context it needs, so one instance can be shared by any number of positions.
Numeric parameters may be given as ``Decimal``, ``int``, ``float`` or
``str``; they are stored as ``Decimal``.
"""

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from trading_analysis.core.config import ConfigLoader, get_config
from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.numbers import ZERO, NumberLike
from trading_analysis.core.protocols import CostModel


def _non_negative(value: NumberLike, label: str) -> Decimal:
    """Return ``value`` as a ``Decimal``, rejecting NaN and negative numbers."""
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        msg = f"{label} must be a number, got {value!r}"
        raise ConfigurationError(msg) from exc
    if number.is_nan() or number < ZERO:
        msg = f"{label} must be >= 0, got {value}"
        raise ConfigurationError(msg)
    return number


@dataclass(frozen=True)
class ZeroCostModel:
    """Charge nothing for transactions or holding."""

    def calculate(self, price: Decimal, amount: Decimal) -> Decimal:  # noqa: ARG002
        """Return zero."""
        return ZERO

    def holding_cost(
        self,
        entry_price: Decimal,  # noqa: ARG002
        current_price: Decimal,  # noqa: ARG002
        amount: Decimal,  # noqa: ARG002
        elapsed: timedelta,  # noqa: ARG002
    ) -> Decimal:
        """Return zero."""
        return ZERO


@dataclass(frozen=True)
class LinearTransactionCostModel:
    """Charge a fixed fraction of the traded value on every entry and exit.

    Args:
        fee_per_trade_pct: Fee as a fraction of ``price * amount``
            (``Decimal("0.01")`` is 1%).

    """

    fee_per_trade_pct: Decimal

    def __post_init__(self) -> None:
        """Validate the fee."""
        object.__setattr__(self, "fee_per_trade_pct", _non_negative(self.fee_per_trade_pct, "fee_per_trade_pct"))

    def calculate(self, price: Decimal, amount: Decimal) -> Decimal:
        """Return ``price * amount * fee_per_trade_pct``."""
        return price * amount * self.fee_per_trade_pct

    def holding_cost(
        self,
        entry_price: Decimal,  # noqa: ARG002
        current_price: Decimal,  # noqa: ARG002
        amount: Decimal,  # noqa: ARG002
        elapsed: timedelta,  # noqa: ARG002
    ) -> Decimal:
        """Return zero; transaction fees do not accrue over time."""
        return ZERO


@dataclass(frozen=True)
class FixedTransactionCostModel:
    """Charge the same fee on every entry and exit, whatever the traded value.

    Args:
        fee_per_trade: Fee charged per trade, in quote currency.

    """

    fee_per_trade: Decimal

    def __post_init__(self) -> None:
        """Validate the fee."""
        object.__setattr__(self, "fee_per_trade", _non_negative(self.fee_per_trade, "fee_per_trade"))

    def calculate(self, price: Decimal, amount: Decimal) -> Decimal:  # noqa: ARG002
        """Return the fixed fee."""
        return self.fee_per_trade

    def holding_cost(
        self,
        entry_price: Decimal,  # noqa: ARG002
        current_price: Decimal,  # noqa: ARG002
        amount: Decimal,  # noqa: ARG002
        elapsed: timedelta,  # noqa: ARG002
    ) -> Decimal:
        """Return zero; transaction fees do not accrue over time."""
        return ZERO


@dataclass(frozen=True)
class LinearBorrowingCostModel:
    """Charge a fixed rate of the entry value per whole elapsed period.

    Models the cost of borrowing the asset (short) or the cash (leveraged
    long): ``entry_price * amount * rate * whole_periods(elapsed)``.

    Args:
        rate: Fraction of the entry value charged per period.
        period: Length of one charging period (default one day).

    """

    rate: Decimal
    period: timedelta = timedelta(days=1)

    def __post_init__(self) -> None:
        """Validate the rate and the period."""
        object.__setattr__(self, "rate", _non_negative(self.rate, "rate"))
        if self.period <= timedelta(0):
            msg = f"period must be positive, got {self.period}"
            raise ConfigurationError(msg)

    def calculate(self, price: Decimal, amount: Decimal) -> Decimal:  # noqa: ARG002
        """Return zero; borrowing is charged over time, not per trade."""
        return ZERO

    def holding_cost(
        self,
        entry_price: Decimal,
        current_price: Decimal,  # noqa: ARG002
        amount: Decimal,
        elapsed: timedelta,
    ) -> Decimal:
        """Return the borrowing cost for the whole periods in ``elapsed``."""
        if elapsed <= timedelta(0):
            return ZERO
        periods = Decimal(elapsed // self.period)
        return entry_price * amount * self.rate * periods


def cost_models_from_config(loader: ConfigLoader | None = None) -> tuple[CostModel, CostModel]:
    """Build ``(transaction, holding)`` cost models from the ``costs`` section.

    ``transaction_fee_pct`` builds a linear fee and ``transaction_fee_fixed``
    a fixed fee per trade; at most one of them may be non-zero. A zero fee
    or rate yields a ``ZeroCostModel``.

    Raises:
        ConfigurationError: If a value is not a valid non-negative number, or
            both transaction fees are set.

    """
    cfg = loader or get_config()
    fee_pct = _config_decimal(cfg, "costs.transaction_fee_pct")
    fee_fixed = _config_decimal(cfg, "costs.transaction_fee_fixed")
    rate = _config_decimal(cfg, "costs.borrowing_rate")
    if fee_pct > ZERO and fee_fixed > ZERO:
        msg = "costs.transaction_fee_pct and costs.transaction_fee_fixed are mutually exclusive"
        raise ConfigurationError(msg)
    transaction: CostModel = ZeroCostModel()
    if fee_pct > ZERO:
        transaction = LinearTransactionCostModel(fee_pct)
    elif fee_fixed > ZERO:
        transaction = FixedTransactionCostModel(fee_fixed)
    holding: CostModel = LinearBorrowingCostModel(rate) if rate > ZERO else ZeroCostModel()
    return transaction, holding


def _config_decimal(cfg: ConfigLoader, key: str) -> Decimal:
    raw = cfg.get(key, "0")
    try:
        value = cfg.get_num_factory().num(str(raw))
    except ArithmeticError as exc:
        msg = f"{key} must be a number, got {raw!r}"
        raise ConfigurationError(msg) from exc
    return _non_negative(value, key)
