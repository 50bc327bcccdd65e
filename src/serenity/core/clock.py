"""Time helpers for session-boundary computation.

All session dates are UTC calendar dates so that the day boundary is the
same for every call regardless of the host time zone.
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(instant: datetime) -> datetime:
    """Normalize an instant to aware UTC.

    Naive datetimes are taken to already be in UTC.

    Args:
        instant: Any datetime.

    Returns:
        Aware datetime in UTC.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def session_date(instant: datetime) -> date:
    """Calendar date (UTC) that an instant belongs to.

    Examples:
        >>> session_date(datetime(2024, 3, 1, 23, 30, tzinfo=timezone.utc))
        datetime.date(2024, 3, 1)
    """
    return as_utc(instant).date()
