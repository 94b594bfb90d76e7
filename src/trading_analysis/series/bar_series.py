"""Append-only, randomly indexable store of bars.

The ``BarSeries`` is the single source of truth every indicator reads
from. Appending a bar is the only way new indicator values become
computable: the series stores the bar, moves its current index to it,
and then notifies its listeners (typically indicator contexts and
trading records) in registration order.
"""

import logging
from collections.abc import Iterator

from trading_analysis.core.exceptions import OutOfBoundsError, OutOfOrderBarError
from trading_analysis.core.models import Bar, Timeframe
from trading_analysis.core.numbers import NumFactory
from trading_analysis.core.protocols import BarListener
from trading_analysis.core.timestamps import TimestampLike
from trading_analysis.series.bar_builder import BarBuilder

logger = logging.getLogger(__name__)


class BarSeries:
    """Ordered sequence of finalized bars with a movable current index.

    The current index is ``-1`` while the series is empty and otherwise
    points at the most recently appended bar. Bars must arrive in strictly
    increasing ``end_time`` order; a published bar is never replaced.
    """

    def __init__(
        self,
        name: str = "",
        num_factory: NumFactory | None = None,
        timeframe: Timeframe = Timeframe.UNDEFINED,
    ) -> None:
        """Initialize an empty series.

        Args:
            name: Human-readable series name (e.g. the symbol).
            num_factory: Numeric factory shared by indicators built on this
                series. Defaults to a factory with the default precision.
            timeframe: Timeframe of the bars held by this series.

        """
        self._name = name
        self._num_factory = num_factory or NumFactory()
        self._timeframe = timeframe
        self._bars: list[Bar] = []
        self._listeners: list[BarListener] = []
        self._current_index = -1

    @property
    def name(self) -> str:
        """Return the series name."""
        return self._name

    @property
    def num_factory(self) -> NumFactory:
        """Return the numeric factory used by this series and its indicators."""
        return self._num_factory

    @property
    def timeframe(self) -> Timeframe:
        """Return the timeframe of the bars in this series."""
        return self._timeframe

    @property
    def current_index(self) -> int:
        """Return the index of the bar currently being processed, ``-1`` if empty."""
        return self._current_index

    @property
    def bar_count(self) -> int:
        """Return the number of bars stored."""
        return len(self._bars)

    @property
    def is_empty(self) -> bool:
        """Return whether the series holds no bars."""
        return not self._bars

    @property
    def begin_index(self) -> int:
        """Return the first valid index (always ``0``)."""
        return 0

    @property
    def end_index(self) -> int:
        """Return the last valid index, ``-1`` if empty."""
        return len(self._bars) - 1

    @property
    def current_bar(self) -> Bar:
        """Return the bar at the current index.

        Raises:
            OutOfBoundsError: If the series is empty.

        """
        return self.get(self._current_index)

    @property
    def first_bar(self) -> Bar:
        """Return the first bar of the series."""
        return self.get(0)

    @property
    def last_bar(self) -> Bar:
        """Return the most recently appended bar."""
        return self.get(self.end_index)

    @property
    def period_description(self) -> str:
        """Return ``"<first end time> - <last end time>"`` or an empty string."""
        if not self._bars:
            return ""
        return f"{self._bars[0].end_time.isoformat()} - {self._bars[-1].end_time.isoformat()}"

    def get(self, index: int) -> Bar:
        """Return the bar at ``index``.

        Raises:
            OutOfBoundsError: If ``index`` is negative or not yet appended.

        """
        self.check_index(index)
        return self._bars[index]

    def check_index(self, index: int) -> None:
        """Raise ``OutOfBoundsError`` unless the series holds ``index``."""
        if index < 0 or index >= len(self._bars):
            raise OutOfBoundsError(index, len(self._bars))

    def __getitem__(self, index: int) -> Bar:
        """Return the bar at ``index`` (no negative indexing)."""
        return self.get(index)

    def __len__(self) -> int:
        """Return the number of bars stored."""
        return len(self._bars)

    def __iter__(self) -> Iterator[Bar]:
        """Iterate over the bars from oldest to newest."""
        return iter(list(self._bars))

    def add_listener(self, listener: BarListener) -> None:
        """Register a listener notified after every appended bar."""
        self._listeners.append(listener)

    def append(self, bar: Bar) -> int:
        """Append a finalized bar, advance the current index, and notify listeners.

        Args:
            bar: The bar to append. Its ``end_time`` must be strictly later
                than the ``end_time`` of the last bar.

        Returns:
            The index the bar was stored at.

        Raises:
            OutOfOrderBarError: If the bar does not end after the last bar.

        """
        if self._bars and bar.end_time <= self._bars[-1].end_time:
            msg = (
                f"Cannot append a bar ending at {bar.end_time.isoformat()} to series "
                f"{self._name!r} whose last bar ends at {self._bars[-1].end_time.isoformat()}"
            )
            raise OutOfOrderBarError(msg)
        self._bars.append(bar)
        self._current_index = len(self._bars) - 1
        logger.debug("Appended bar %d to %r ending %s", self._current_index, self._name, bar.end_time)
        for listener in self._listeners:
            listener.on_bar(bar)
        return self._current_index

    def bar_builder(self, begin_time: TimestampLike, timeframe: Timeframe | None = None) -> BarBuilder:
        """Return a builder whose ``add()`` appends the finished bar to this series.

        Args:
            begin_time: Start of the bar's time bucket.
            timeframe: Bar timeframe; defaults to the series timeframe.

        """
        return BarBuilder(
            begin_time=begin_time,
            timeframe=timeframe or self._timeframe,
            num_factory=self._num_factory,
            series=self,
        )
