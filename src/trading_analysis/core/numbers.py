"""Numeric representation used by series, indicators, and trading records.

Every price, amount, and indicator value in this package is a ``Decimal``.
A ``NumFactory`` is passed explicitly to the components that create or
divide numbers; precision belongs to the series, not the process.
"""

from collections.abc import Iterable
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Context, Decimal, localcontext

ZERO = Decimal(0)
ONE = Decimal(1)
TWO = Decimal(2)
THREE = Decimal(3)
HUNDRED = Decimal(100)
NAN = Decimal("NaN")

DEFAULT_PRECISION = 32

NumberLike = Decimal | int | float | str


def is_nan(value: Decimal) -> bool:
    """Return whether ``value`` is the NaN sentinel."""
    return value.is_nan()


def any_nan(*values: Decimal) -> bool:
    """Return whether any of ``values`` is the NaN sentinel."""
    return any(v.is_nan() for v in values)


@dataclass(frozen=True)
class NumFactory:
    """Create and divide ``Decimal`` values at a fixed precision.

    Conversion goes through ``str`` for floats so that ``0.01`` becomes
    ``Decimal("0.01")`` rather than its binary expansion. Division and
    square roots run in the factory's own ``decimal.Context`` and never
    raise on degenerate input: a zero denominator resolves to a caller
    supplied sentinel (NaN by default) and a negative radicand to NaN.
    """

    precision: int = DEFAULT_PRECISION
    context: Context = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate the precision and build the arithmetic context."""
        if self.precision <= 0:
            msg = f"precision must be positive, got {self.precision}"
            raise ValueError(msg)
        object.__setattr__(self, "context", Context(prec=self.precision, rounding=ROUND_HALF_EVEN))

    @property
    def zero(self) -> Decimal:
        """Return zero."""
        return ZERO

    @property
    def one(self) -> Decimal:
        """Return one."""
        return ONE

    @property
    def hundred(self) -> Decimal:
        """Return one hundred."""
        return HUNDRED

    @property
    def nan(self) -> Decimal:
        """Return the NaN sentinel."""
        return NAN

    def num(self, value: NumberLike) -> Decimal:
        """Convert ``value`` to a ``Decimal`` rounded to this factory's precision."""
        if isinstance(value, float):
            value = str(value)
        return self.context.create_decimal(value)

    def divide(
        self,
        numerator: Decimal,
        denominator: Decimal,
        *,
        default: Decimal = NAN,
    ) -> Decimal:
        """Divide two numbers, returning ``default`` when the denominator is zero.

        NaN operands always produce NaN, regardless of ``default``.
        """
        if numerator.is_nan() or denominator.is_nan():
            return NAN
        if denominator == ZERO:
            return default
        return self.context.divide(numerator, denominator)

    def sqrt(self, value: Decimal) -> Decimal:
        """Return the square root of ``value`` or NaN for negative / NaN input."""
        if value.is_nan() or value < ZERO:
            return NAN
        return self.context.sqrt(value)

    def power(self, base: Decimal, exponent: Decimal) -> Decimal:
        """Return ``base ** exponent``, or NaN when it has no real value."""
        if base.is_nan() or exponent.is_nan():
            return NAN
        if base < ZERO and exponent != exponent.to_integral_value():
            return NAN
        if base == ZERO and exponent < ZERO:
            return NAN
        return self.context.power(base, exponent)

    def add(self, left: Decimal, right: Decimal) -> Decimal:
        """Return ``left + right`` rounded to this factory's precision."""
        return self.context.add(left, right)

    def subtract(self, left: Decimal, right: Decimal) -> Decimal:
        """Return ``left - right`` rounded to this factory's precision."""
        return self.context.subtract(left, right)

    def multiply(self, left: Decimal, right: Decimal) -> Decimal:
        """Return ``left * right`` rounded to this factory's precision."""
        return self.context.multiply(left, right)

    def negate(self, value: Decimal) -> Decimal:
        """Return ``-value``."""
        return self.context.minus(value)

    def absolute(self, value: Decimal) -> Decimal:
        """Return ``abs(value)``."""
        return self.context.abs(value)

    def total(self, values: Iterable[Decimal]) -> Decimal:
        """Return the sum of ``values`` (``0`` when empty)."""
        total = ZERO
        for value in values:
            total = self.context.add(total, value)
        return total

    def calculating(self) -> AbstractContextManager[Context]:
        """Return a context manager running plain ``Decimal`` operators at this precision.

        Used around formula code so ``+``, ``-`` and ``*`` honour the
        factory's context instead of the thread's default one.
        """
        return localcontext(self.context)
