"""Time utilities for temporal value normalization."""

import calendar
from datetime import date, datetime, timezone


def is_calendar_date(value) -> bool:
    """True for pure calendar dates (``datetime`` is a ``date`` subclass and is excluded)."""
    return isinstance(value, date) and not isinstance(value, datetime)


def date_to_string(value: date) -> str:
    """
    Render a calendar date as ``YYYY-MM-DD``.

    Example:
        >>> date_to_string(date(2024, 2, 9))
        '2024-02-09'
    """
    return value.isoformat()


def datetime_to_epoch(value: datetime) -> int:
    """
    Convert a timestamp to integer seconds since the epoch.

    Sub-second precision is dropped. Naive datetimes are read as UTC.

    Args:
        value: Naive or timezone-aware datetime

    Returns:
        Whole seconds since 1970-01-01T00:00:00Z
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return calendar.timegm(value.utctimetuple())
