from datetime import date, datetime
from typing import Union


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime string. Raises ValueError when malformed."""
    raw = (value or "").strip()
    if not raw:
        raise ValueError("empty date")
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


def normalize_day(value: Union[str, date, datetime]) -> datetime:
    """
    Return the calendar day of ``value`` as a naive datetime at 00:00:00.

    The wall-clock day of the given value is kept; an offset is dropped, not converted
    to UTC, so ``2024-03-01T23:30:00-05:00`` is still 1 March.
    """
    if isinstance(value, str):
        value = parse_iso_datetime(value)
    if isinstance(value, datetime):
        return value.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
    return datetime(value.year, value.month, value.day)
