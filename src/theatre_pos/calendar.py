"""Business-day calendar.

A theatre's business day runs past midnight: sales rung up before the cutoff
hour (02:00 by default) belong to the previous business day. Every place that
needs a business date (report generation, retention pruning, daily-transition
detection) goes through :func:`business_date_of`.

Examples:
    >>> from datetime import datetime
    >>> business_date_of(datetime(2025, 1, 16, 1, 59))
    '2025-01-15'
    >>> business_date_of(datetime(2025, 1, 16, 2, 0))
    '2025-01-16'

"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo

DATE_FORMAT = "%Y-%m-%d"

DEFAULT_CUTOFF_HOUR = 2


def business_date_of(
    timestamp: datetime,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
    tz: tzinfo | None = None,
) -> str:
    """Return the business date (YYYY-MM-DD) a timestamp belongs to.

    Args:
        timestamp: Instant of the sale. Naive datetimes are read as local
            wall-clock time. Aware datetimes (such as the UTC timestamps of
            the tablet order log) are converted to ``tz`` when one is given,
            otherwise to the system local timezone.
        cutoff_hour: Local hour before which the previous calendar day is used.
        tz: Optional local timezone of the venue.

    Returns:
        Business date string in YYYY-MM-DD format.

    """
    local = timestamp
    if timestamp.tzinfo is not None:
        local = timestamp.astimezone(tz)

    day = local.date()
    if local.hour < cutoff_hour:
        day = day - timedelta(days=1)
    return format_date(day)


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.

    Examples:
        >>> parse_date("2023-01-15")
        datetime.date(2023, 1, 15)

    """
    return datetime.strptime(s, DATE_FORMAT).date()


def format_date(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return d.strftime(DATE_FORMAT)


def shift_business_date(business_date: str, days: int) -> str:
    """Move a business date string by a number of days.

    Examples:
        >>> shift_business_date("2025-03-01", -1)
        '2025-02-28'

    """
    return format_date(parse_date(business_date) + timedelta(days=days))


def retention_cutoff(today: str, retention_days: int) -> str:
    """Oldest business date still retained when ``today`` is the current day.

    Orders and snapshots dated exactly on the cutoff are kept; anything older
    is pruned.

    Examples:
        >>> retention_cutoff("2025-01-15", 14)
        '2025-01-01'

    """
    return shift_business_date(today, -retention_days)
