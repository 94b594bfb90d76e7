"""Immutable record of one executed trade."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from trading_analysis.core.models import TradeType
from trading_analysis.core.numbers import ZERO


class OrderType(Enum):
    """Whether a trade opens or closes its position."""

    OPEN = "OPEN"
    CLOSE = "CLOSE"


@dataclass(frozen=True)
class Trade:
    """A single execution of ``amount`` units at ``price``.

    ``cost`` is the transaction cost charged for this execution, computed by
    the position's transaction cost model when the trade is created.
    """

    time: datetime
    price: Decimal
    amount: Decimal
    trade_type: TradeType
    order_type: OrderType
    cost: Decimal = ZERO

    @property
    def is_buy(self) -> bool:
        """Return whether this is a BUY trade."""
        return self.trade_type is TradeType.BUY

    @property
    def is_sell(self) -> bool:
        """Return whether this is a SELL trade."""
        return self.trade_type is TradeType.SELL

    @property
    def value(self) -> Decimal:
        """Return the traded value, ``price * amount``."""
        return self.price * self.amount

    @property
    def net_price(self) -> Decimal:
        """Return the price per unit including the transaction cost.

        A buy pays the per-unit cost on top of the price; a sell receives the
        price less the per-unit cost.
        """
        if self.amount == ZERO:
            return self.price
        cost_per_unit = self.cost / self.amount
        return self.price + cost_per_unit if self.is_buy else self.price - cost_per_unit

    def __str__(self) -> str:
        """Return a compact ``TYPE ORDER time | amount @ price`` summary."""
        return f"{self.trade_type.value} {self.order_type.value} {self.time.isoformat()} | {self.amount} @ {self.price}"
