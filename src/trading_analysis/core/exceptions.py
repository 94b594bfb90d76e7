"""Exception hierarchy for series, indicator, and trading-record errors.

A single base class lets callers catch everything raised by this package,
while each subclass also derives from the closest built-in exception so
generic handlers (``except IndexError``) keep working. Degenerate
arithmetic never raises: indicators resolve it to sentinel values.
"""


class TradingAnalysisError(Exception):
    """Base exception for all trading analysis errors."""


class OutOfBoundsError(TradingAnalysisError, IndexError):
    """Raise when an index lies outside the extent of a bar series.

    Args:
        index: The requested index.
        bar_count: Number of bars the series held at the time of the request.

    """

    def __init__(self, index: int, bar_count: int) -> None:
        """Initialize the out-of-bounds error.

        Args:
            index: The requested index.
            bar_count: Number of bars the series held at the time of the request.

        """
        super().__init__(f"Index {index} is out of bounds for a series of {bar_count} bars")
        self.index = index
        self.bar_count = bar_count


class OutOfOrderBarError(TradingAnalysisError, ValueError):
    """Raise when a bar does not end strictly after the last bar of its series."""


class ProtocolViolationError(TradingAnalysisError, RuntimeError):
    """Raise when a trade is recorded against a position in the wrong state."""


class TypeMismatchError(TradingAnalysisError, TypeError):
    """Raise when a trade direction disagrees with the position's configured direction."""


class ConfigurationError(TradingAnalysisError, ValueError):
    """Raise when constructor parameters or configuration values are invalid."""
