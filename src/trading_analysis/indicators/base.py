"""Cached, lag-aware indicator base classes and arithmetic composition.

Every indicator is a function of a ``BarSeries`` index. Values are computed
on first request and memoized per index; because bars are append-only and
never replaced, a cached value never needs to be invalidated.

Each indicator declares a ``lag``: the number of leading bars for which its
value is not meaningful. Indices below the lag resolve to the NaN sentinel
without running the formula, and ``is_stable`` flips to ``True`` (and stays
there) once the series' current index reaches the lag.

Indicators compose. Arithmetic operators, ``abs``, ``sqrt``, ``min`` and
``max`` build new indicators whose lag is the maximum of their inputs' lags,
while ``previous``, ``sma`` and ``ema`` wrap an indicator in a windowed one.
Inputs are wired at construction, so a dependency cycle cannot be built.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING

from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.numbers import NAN, NumberLike, NumFactory, any_nan

if TYPE_CHECKING:
    from trading_analysis.series.bar_series import BarSeries


class CachedIndicator(ABC):
    """Base class for indicators memoized per bar index.

    Subclasses implement ``_calculate(index)``, which is only invoked for
    indices at or beyond the lag and at most once per index. It runs inside
    the series' ``NumFactory`` context, so plain operators use its precision.
    """

    def __init__(self, series: "BarSeries", lag: int = 0) -> None:
        """Initialize the indicator.

        Args:
            series: The bar series the indicator reads from.
            lag: Number of leading bars for which the value is NaN.

        Raises:
            ConfigurationError: If ``lag`` is negative.

        """
        if lag < 0:
            msg = f"lag must be >= 0, got {lag}"
            raise ConfigurationError(msg)
        self._series = series
        self._lag = lag
        self._cache: dict[int, Decimal] = {}
        self._highest_cached = -1
        self._stable = False

    @property
    def series(self) -> "BarSeries":
        """Return the series this indicator reads from."""
        return self._series

    @property
    def num_factory(self) -> NumFactory:
        """Return the numeric factory of the underlying series."""
        return self._series.num_factory

    @property
    def lag(self) -> int:
        """Return the number of warm-up bars."""
        return self._lag

    @property
    def is_stable(self) -> bool:
        """Return whether the series' current index has reached the lag.

        Once stable, the indicator stays stable.
        """
        if not self._stable and self._series.current_index >= self._lag:
            self._stable = True
        return self._stable

    def value(self, index: int | None = None) -> Decimal:
        """Return the indicator value at ``index``.

        Args:
            index: Bar index; defaults to the series' current index.

        Raises:
            OutOfBoundsError: If the series does not hold ``index``.

        """
        if index is None:
            index = self._series.current_index
        self._series.check_index(index)
        cached = self._cache.get(index)
        if cached is not None:
            return cached
        if index < self._lag:
            result = NAN
        else:
            with self.num_factory.calculating():
                result = self._calculate(index)
        self._cache[index] = result
        self._highest_cached = max(self._highest_cached, index)
        return result

    @abstractmethod
    def _calculate(self, index: int) -> Decimal:
        """Compute the value at ``index`` (``index >= lag``)."""

    def __repr__(self) -> str:
        """Return the indicator class name and lag."""
        return f"{type(self).__name__}(lag={self._lag})"

    def _operand(self, other: "CachedIndicator | NumberLike") -> "CachedIndicator":
        if isinstance(other, CachedIndicator):
            return other
        return Constant(self._series, other)

    def __add__(self, other: "CachedIndicator | NumberLike") -> "BinaryOperation":
        return BinaryOperation.sum(self, self._operand(other))

    def __radd__(self, other: NumberLike) -> "BinaryOperation":
        return BinaryOperation.sum(self._operand(other), self)

    def __sub__(self, other: "CachedIndicator | NumberLike") -> "BinaryOperation":
        return BinaryOperation.difference(self, self._operand(other))

    def __rsub__(self, other: NumberLike) -> "BinaryOperation":
        return BinaryOperation.difference(self._operand(other), self)

    def __mul__(self, other: "CachedIndicator | NumberLike") -> "BinaryOperation":
        return BinaryOperation.product(self, self._operand(other))

    def __rmul__(self, other: NumberLike) -> "BinaryOperation":
        return BinaryOperation.product(self._operand(other), self)

    def __truediv__(self, other: "CachedIndicator | NumberLike") -> "BinaryOperation":
        return BinaryOperation.quotient(self, self._operand(other))

    def __rtruediv__(self, other: NumberLike) -> "BinaryOperation":
        return BinaryOperation.quotient(self._operand(other), self)

    def __neg__(self) -> "UnaryOperation":
        return UnaryOperation.negate(self)

    def __abs__(self) -> "UnaryOperation":
        return UnaryOperation.absolute(self)

    def sqrt(self) -> "UnaryOperation":
        """Return an indicator of the square root (NaN for negative values)."""
        return UnaryOperation.square_root(self)

    def min(self, other: "CachedIndicator | NumberLike") -> "BinaryOperation":
        """Return the pointwise minimum with ``other``."""
        return BinaryOperation.minimum(self, self._operand(other))

    def max(self, other: "CachedIndicator | NumberLike") -> "BinaryOperation":
        """Return the pointwise maximum with ``other``."""
        return BinaryOperation.maximum(self, self._operand(other))

    def previous(self, bars: int = 1) -> "CachedIndicator":
        """Return this indicator shifted back by ``bars`` bars."""
        from trading_analysis.indicators.helpers import PreviousValueIndicator  # noqa: PLC0415

        return PreviousValueIndicator(self, bars)

    def sma(self, bar_count: int) -> "CachedIndicator":
        """Return the simple moving average of this indicator."""
        from trading_analysis.indicators.averages import SMAIndicator  # noqa: PLC0415

        return SMAIndicator(self, bar_count)

    def ema(self, bar_count: int) -> "CachedIndicator":
        """Return the exponential moving average of this indicator."""
        from trading_analysis.indicators.averages import EMAIndicator  # noqa: PLC0415

        return EMAIndicator(self, bar_count)


class RecursiveIndicator(CachedIndicator):
    """Indicator whose value at ``i`` depends on its own value at ``i - 1``.

    A cold query at a late index fills the cache forward from the highest
    cached index, so evaluation never recurses once per bar.
    """

    def value(self, index: int | None = None) -> Decimal:
        """Return the value at ``index``, filling earlier indices first."""
        if index is None:
            index = self._series.current_index
        self._series.check_index(index)
        if index not in self._cache and index > self._lag:
            for i in range(max(self._lag, self._highest_cached + 1), index):
                super().value(i)
        return super().value(index)


class Constant(CachedIndicator):
    """Indicator returning the same number at every index (lag 0)."""

    def __init__(self, series: "BarSeries", value: NumberLike) -> None:
        """Initialize the constant indicator."""
        super().__init__(series, 0)
        self._constant = series.num_factory.num(value)

    def _calculate(self, index: int) -> Decimal:  # noqa: ARG002
        return self._constant


class BinaryOperation(CachedIndicator):
    """Pointwise combination of two indicators.

    The lag is the larger of the two input lags. A NaN on either side
    yields NaN. Division by zero yields NaN.
    """

    def __init__(
        self,
        operator: Callable[[Decimal, Decimal], Decimal],
        left: CachedIndicator,
        right: CachedIndicator,
    ) -> None:
        """Initialize the operation over ``left`` and ``right``."""
        super().__init__(left.series, max(left.lag, right.lag))
        self._operator = operator
        self._left = left
        self._right = right

    @classmethod
    def sum(cls, left: CachedIndicator, right: CachedIndicator) -> "BinaryOperation":
        """Return ``left + right``."""
        return cls(left.num_factory.add, left, right)

    @classmethod
    def difference(cls, left: CachedIndicator, right: CachedIndicator) -> "BinaryOperation":
        """Return ``left - right``."""
        return cls(left.num_factory.subtract, left, right)

    @classmethod
    def product(cls, left: CachedIndicator, right: CachedIndicator) -> "BinaryOperation":
        """Return ``left * right``."""
        return cls(left.num_factory.multiply, left, right)

    @classmethod
    def quotient(cls, left: CachedIndicator, right: CachedIndicator) -> "BinaryOperation":
        """Return ``left / right`` (NaN where ``right`` is zero)."""
        factory = left.num_factory
        return cls(factory.divide, left, right)

    @classmethod
    def minimum(cls, left: CachedIndicator, right: CachedIndicator) -> "BinaryOperation":
        """Return the pointwise minimum."""
        return cls(min, left, right)

    @classmethod
    def maximum(cls, left: CachedIndicator, right: CachedIndicator) -> "BinaryOperation":
        """Return the pointwise maximum."""
        return cls(max, left, right)

    def _calculate(self, index: int) -> Decimal:
        left = self._left.value(index)
        right = self._right.value(index)
        # Decimal.max/min silently drop a quiet NaN
        if any_nan(left, right):
            return NAN
        return self._operator(left, right)


class UnaryOperation(CachedIndicator):
    """Pointwise transformation of one indicator, keeping its lag."""

    def __init__(self, operator: Callable[[Decimal], Decimal], indicator: CachedIndicator) -> None:
        """Initialize the operation over ``indicator``."""
        super().__init__(indicator.series, indicator.lag)
        self._operator = operator
        self._indicator = indicator

    @classmethod
    def negate(cls, indicator: CachedIndicator) -> "UnaryOperation":
        """Return ``-indicator``."""
        return cls(indicator.num_factory.negate, indicator)

    @classmethod
    def absolute(cls, indicator: CachedIndicator) -> "UnaryOperation":
        """Return ``abs(indicator)``."""
        return cls(indicator.num_factory.absolute, indicator)

    @classmethod
    def square_root(cls, indicator: CachedIndicator) -> "UnaryOperation":
        """Return the square root (NaN for negative values)."""
        return cls(indicator.num_factory.sqrt, indicator)

    def _calculate(self, index: int) -> Decimal:
        value = self._indicator.value(index)
        if value.is_nan():
            return NAN
        return self._operator(value)


def check_bar_count(bar_count: int, label: str = "bar_count") -> int:
    """Return ``bar_count`` or raise ``ConfigurationError`` if it is not positive."""
    if bar_count < 1:
        msg = f"{label} must be >= 1, got {bar_count}"
        raise ConfigurationError(msg)
    return bar_count
