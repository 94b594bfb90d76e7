"""Named registry of indicators for one timeframe, driven by bar notifications.

An ``IndicatorContext`` listens to its ``BarSeries``. On every appended bar
it evaluates each registered indicator at the series' current index, tells
change listeners about every indicator it touched, and finally sends exactly
one update per new bar to update listeners. Repeated or stale notifications
for an index that was already processed are ignored.

Strategies look indicators up by name with ``get_numeric_indicator``.
"""

import logging
import uuid
from collections import deque
from collections.abc import Iterator
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from trading_analysis.core.exceptions import ConfigurationError
from trading_analysis.core.models import Bar, Timeframe
from trading_analysis.core.protocols import (
    ContextUpdateListener,
    IndicatorChangeListener,
    NumericIndicator,
)
from trading_analysis.indicators.base import check_bar_count

if TYPE_CHECKING:
    from trading_analysis.series.bar_series import BarSeries

logger = logging.getLogger(__name__)


class IndicatorHistory:
    """Bounded per-indicator record of the values seen on each update.

    Registered as a change listener of a context; keeps the last ``window``
    values per indicator name.
    """

    def __init__(self, window: int) -> None:
        """Initialize an empty history of ``window`` values per indicator."""
        self._window = check_bar_count(window, "window")
        self._values: dict[str, deque[Decimal]] = {}

    @property
    def window(self) -> int:
        """Return the number of values kept per indicator."""
        return self._window

    def on_indicator_change(self, time: datetime, name: str, indicator: NumericIndicator) -> None:  # noqa: ARG002
        """Record the indicator's current value."""
        values = self._values.setdefault(name, deque(maxlen=self._window))
        values.append(indicator.value())

    def previous(self, name: str, bars: int = 1) -> Decimal | None:
        """Return the value ``bars`` updates before the latest, or ``None`` if not recorded."""
        values = self._values.get(name)
        if values is None or bars < 0 or bars >= len(values):
            return None
        return values[-1 - bars]


class IndicatorContext:
    """Registry of named indicators evaluated once per new bar of one timeframe."""

    def __init__(
        self,
        series: "BarSeries",
        timeframe: Timeframe | None = None,
        history_window: int | None = None,
    ) -> None:
        """Initialize the context and subscribe it to ``series``.

        Args:
            series: Series whose appended bars drive evaluation.
            timeframe: Timeframe of the context; defaults to the series'.
            history_window: When set, keep that many past values per indicator.

        """
        self._series = series
        self._timeframe = timeframe or series.timeframe
        self._indicators: dict[str, NumericIndicator] = {}
        self._change_listeners: list[IndicatorChangeListener] = []
        self._update_listeners: list[ContextUpdateListener] = []
        self._history: IndicatorHistory | None = None
        self._last_index = -1
        self._last_end_time: datetime | None = None
        self._started = False
        self._stable = False
        if history_window is not None:
            self.enable_history(history_window)
        series.add_listener(self)

    @property
    def timeframe(self) -> Timeframe:
        """Return the timeframe this context is scoped to."""
        return self._timeframe

    @property
    def series(self) -> "BarSeries":
        """Return the series driving this context."""
        return self._series

    @property
    def is_stable(self) -> bool:
        """Return whether every registered indicator is stable (sticky once true)."""
        if not self._stable:
            self._stable = all(indicator.is_stable for indicator in self._indicators.values())
        return self._stable

    @property
    def first(self) -> NumericIndicator | None:
        """Return the first registered indicator, if any."""
        return next(iter(self._indicators.values()), None)

    def add(self, indicator: NumericIndicator, name: str | None = None) -> str:
        """Register ``indicator`` under ``name`` and return the name used.

        A random placeholder name is generated when ``name`` is omitted.

        Raises:
            ConfigurationError: If the name is taken or bars were already processed.

        """
        if self._started:
            msg = f"Cannot add indicator {name!r} after the context has processed bars"
            raise ConfigurationError(msg)
        key = name if name is not None else str(uuid.uuid4())
        if key in self._indicators:
            msg = f"Indicator name {key!r} is already registered"
            raise ConfigurationError(msg)
        self._indicators[key] = indicator
        self._stable = False
        return key

    def add_all(self, *indicators: NumericIndicator) -> list[str]:
        """Register several indicators under generated names."""
        return [self.add(indicator) for indicator in indicators]

    def get_numeric_indicator(self, name: str) -> NumericIndicator | None:
        """Return the indicator registered as ``name``, or ``None``."""
        return self._indicators.get(name)

    def add_change_listener(self, listener: IndicatorChangeListener) -> None:
        """Register a listener called for every indicator evaluated on a new bar."""
        self._change_listeners.append(listener)

    def add_update_listener(self, listener: ContextUpdateListener) -> None:
        """Register a listener called once per new bar after all indicators."""
        self._update_listeners.append(listener)

    def enable_history(self, window: int) -> None:
        """Start recording the last ``window`` values of each indicator."""
        self._history = IndicatorHistory(window)
        self.add_change_listener(self._history)

    def previous_value(self, name: str, bars: int = 1) -> Decimal | None:
        """Return the value of ``name`` recorded ``bars`` updates ago.

        Raises:
            ConfigurationError: If history has not been enabled.

        """
        if self._history is None:
            msg = "History is not enabled for this context"
            raise ConfigurationError(msg)
        return self._history.previous(name, bars)

    def on_bar(self, bar: Bar) -> bool:
        """Evaluate every indicator for the series' current index and notify listeners.

        Returns:
            ``True`` if the bar was processed, ``False`` if it was a repeated
            or stale notification and was ignored.

        """
        index = self._series.current_index
        if index <= self._last_index or (
            self._last_end_time is not None and bar.end_time <= self._last_end_time
        ):
            logger.warning(
                "Ignoring repeated notification for index %d ending %s (last index %d)",
                index,
                bar.end_time,
                self._last_index,
            )
            return False
        self._started = True
        self._last_index = index
        self._last_end_time = bar.end_time
        for name, indicator in self._indicators.items():
            indicator.value(index)
            _ = indicator.is_stable  # advances sticky stability
            for change_listener in self._change_listeners:
                change_listener.on_indicator_change(bar.begin_time, name, indicator)
        for update_listener in self._update_listeners:
            update_listener.on_context_update(bar.end_time, self)
        return True

    def __contains__(self, name: object) -> bool:
        """Return whether an indicator is registered under ``name``."""
        return name in self._indicators

    def __iter__(self) -> Iterator[tuple[str, NumericIndicator]]:
        """Iterate over ``(name, indicator)`` pairs in registration order."""
        return iter(list(self._indicators.items()))

    def __len__(self) -> int:
        """Return the number of registered indicators."""
        return len(self._indicators)
