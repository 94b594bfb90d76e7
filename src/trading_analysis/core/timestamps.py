"""Timestamp coercion for bar and trade times."""

from datetime import UTC, datetime

TimestampLike = datetime | int | str


def parse_timestamp(value: str) -> datetime:
    """Parse a date string or raw integer string into an aware UTC datetime.

    Accept ISO 8601 date strings (``2024-01-01``, ``2024-01-01T12:00:00``)
    or raw integer Unix timestamps.

    Args:
        value: Date string or integer timestamp string.

    Returns:
        Timezone-aware datetime in UTC.

    Raises:
        ValueError: If the value cannot be parsed.

    """
    # Try raw integer first
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except ValueError:
        pass

    for fmt in ("%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue

    msg = f"Cannot parse timestamp: {value!r}. Use ISO 8601 (YYYY-MM-DD) or a Unix timestamp."
    raise ValueError(msg)


def to_datetime(value: TimestampLike) -> datetime:
    """Coerce a datetime, Unix timestamp, or date string to an aware datetime.

    Naive datetimes are assumed to be UTC.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, int):
        return datetime.fromtimestamp(value, tz=UTC)
    return parse_timestamp(value)
