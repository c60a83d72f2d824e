"""
Time interval validation for schedule items.

All values are normalised to timezone-aware UTC datetimes; naive inputs are
taken to already be in UTC.
"""
from datetime import datetime, timezone
from typing import Any, Optional, Tuple
from app.core.exceptions import MalformedTimestamp, InvalidInterval


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any, field: str = "timestamp") -> datetime:
    """
    Parse a datetime or ISO-8601 string into an aware UTC datetime.

    Raises:
        MalformedTimestamp: If the value is missing or cannot be parsed
    """
    if value is None or value == "":
        raise MalformedTimestamp(f"{field} is required")
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        raise MalformedTimestamp(f"{field} must be an ISO-8601 date-time string")

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise MalformedTimestamp(f"{field} is not a valid date-time: {value!r}")
    return ensure_utc(parsed)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_utc(value).isoformat().replace("+00:00", "Z")


def validate_interval(start: Any, end: Any) -> Tuple[datetime, datetime]:
    """
    Validate that ``end`` strictly follows ``start``.

    Returns:
        The normalised (start, end) pair

    Raises:
        MalformedTimestamp: If either bound is missing or unparseable
        InvalidInterval: If end <= start
    """
    start_at = parse_timestamp(start, "start_time")
    end_at = parse_timestamp(end, "end_time")
    if end_at <= start_at:
        raise InvalidInterval()
    return start_at, end_at


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap: back-to-back sessions do not overlap."""
    return ensure_utc(a_start) < ensure_utc(b_end) and ensure_utc(b_start) < ensure_utc(a_end)
