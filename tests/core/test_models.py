"""Tests for core data models."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from trading_analysis.core.models import Bar, Timeframe, TradeType

_BEGIN = datetime(2024, 1, 1, tzinfo=UTC)
_END = _BEGIN + timedelta(days=1)


def _bar(open_: str = "100", high: str = "110", low: str = "90", close: str = "105") -> Bar:
    return Bar(
        begin_time=_BEGIN,
        end_time=_END,
        open=Decimal(open_),
        high=Decimal(high),
        low=Decimal(low),
        close=Decimal(close),
        volume=Decimal(50),
        timeframe=Timeframe.D1,
    )


class TestTradeType:
    """Tests for TradeType enum."""

    def test_values(self) -> None:
        """Test TradeType enum values."""
        assert TradeType.BUY.value == "BUY"
        assert TradeType.SELL.value == "SELL"

    def test_complement(self) -> None:
        """The exit direction is the opposite of the entry direction."""
        assert TradeType.BUY.complement is TradeType.SELL
        assert TradeType.SELL.complement is TradeType.BUY


class TestTimeframe:
    """Tests for Timeframe enum."""

    def test_all_timeframes(self) -> None:
        """Test all timeframe values are present."""
        expected = {"undefined", "1m", "5m", "15m", "1h", "4h", "1d", "1w"}
        assert {t.value for t in Timeframe} == expected

    def test_duration(self) -> None:
        """Fixed timeframes have a duration, UNDEFINED has none."""
        assert Timeframe.H4.duration == timedelta(hours=4)
        assert Timeframe.W1.duration == timedelta(weeks=1)
        assert Timeframe.UNDEFINED.duration is None


class TestBar:
    """Tests for Bar model."""

    def test_creation(self) -> None:
        """Test bar creation with all fields."""
        bar = _bar()
        assert bar.close == Decimal(105)
        assert bar.volume == Decimal(50)
        assert bar.trades == 0
        assert bar.time_period == timedelta(days=1)

    def test_frozen(self) -> None:
        """Test that bar is immutable."""
        bar = _bar()
        with pytest.raises(AttributeError):
            bar.close = Decimal(999)  # type: ignore[misc]

    def test_bullish_and_bearish(self) -> None:
        """Classify the bar by its open and close."""
        assert _bar().is_bullish
        assert _bar(open_="105", close="100").is_bearish
        flat = _bar(open_="100", close="100")
        assert not flat.is_bullish
        assert not flat.is_bearish

    def test_in_period(self) -> None:
        """The period is half-open: begin inclusive, end exclusive."""
        bar = _bar()
        assert bar.in_period(_BEGIN)
        assert bar.in_period(_BEGIN + timedelta(hours=12))
        assert not bar.in_period(_END)

    def test_begin_after_end_raises(self) -> None:
        """Reject an empty or inverted time bucket."""
        with pytest.raises(ValueError, match="begin_time"):
            Bar(
                begin_time=_END,
                end_time=_END,
                open=Decimal(1),
                high=Decimal(1),
                low=Decimal(1),
                close=Decimal(1),
            )

    def test_low_above_high_raises(self) -> None:
        """Reject a low above the high."""
        with pytest.raises(ValueError, match="low"):
            _bar(high="90", low="110", open_="100", close="100")

    def test_close_outside_range_raises(self) -> None:
        """Reject a close outside [low, high]."""
        with pytest.raises(ValueError, match="close"):
            _bar(close="120")
