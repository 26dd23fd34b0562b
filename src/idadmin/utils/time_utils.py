"""Timestamp conversions between backend wire values and Python types."""

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any


def millis_to_datetime(value: Any) -> datetime | None:
    """Convert an epoch-milliseconds wire value (int or numeric string).

    Args:
        value: Epoch milliseconds, or None

    Returns:
        Optional[datetime]: Aware UTC datetime, or None if absent or malformed
    """
    if value is None or value == "":
        return None
    try:
        millis = int(value)
    except (TypeError, ValueError):
        return None
    return datetime.fromtimestamp(millis / 1000, tz=UTC)


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp such as ``2024-01-02T03:04:05.678Z``."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parse_utc_date_string(value: Any) -> datetime | None:
    """Parse a UTC date string in RFC 2822 or ISO-8601 form.

    Both ``"Tue, 02 Jan 2024 03:04:05 GMT"`` and ``"2024-01-02T03:04:05Z"``
    are accepted.

    Args:
        value: Date string

    Returns:
        Optional[datetime]: Aware UTC datetime, or None if the value is not a
        parseable date string
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return parse_iso_datetime(value.strip())
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def datetime_to_millis(value: datetime) -> int:
    return round(value.timestamp() * 1000)


def utc_date_string(value: datetime | None) -> str | None:
    """Render a datetime the way account metadata is displayed (RFC 1123)."""
    if value is None:
        return None
    return value.astimezone(UTC).strftime("%a, %d %b %Y %H:%M:%S GMT")


def iso_timestamp(value: datetime) -> str:
    """Render a datetime as ``2024-01-02T03:04:05.000Z`` (UTC, millisecond precision)."""
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
