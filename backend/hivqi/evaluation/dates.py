"""Date helpers for reporting periods.

Reporting parameters may be plain dates (no time of day) or datetimes.
A plain ``date`` carries no time component, so an end date given as a
``date`` covers the whole day, while a ``datetime`` is taken literally.
"""

from datetime import date, datetime, time

END_OF_DAY = time(23, 59, 59, 999000)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def start_of_day(value: date | datetime) -> datetime:
    """Midnight at the start of the given day."""
    return datetime.combine(_as_date(value), time.min)


def end_of_day(value: date | datetime) -> datetime:
    """23:59:59.999 on the given day."""
    return datetime.combine(_as_date(value), END_OF_DAY)


def to_datetime(value: date | datetime | None) -> datetime | None:
    """Widen a plain date to midnight; datetimes pass through unchanged."""
    if value is None or isinstance(value, datetime):
        return value
    return start_of_day(value)


def end_of_day_if_time_excluded(
    value: date | datetime | None,
    time_included: bool | None = None,
) -> datetime | None:
    """Normalize a period end date to the end of its day unless it has a time.

    Args:
        value: The end date.
        time_included: Whether ``value`` carries a meaningful time of day.
            When None this is decided by type: ``datetime`` values include a
            time, plain ``date`` values do not.

    Returns:
        The effective end datetime, or None when ``value`` is None.
    """
    if value is None:
        return None
    if time_included is None:
        time_included = isinstance(value, datetime)
    if not time_included:
        return end_of_day(value)
    return to_datetime(value)


def is_same_day(first: date | datetime | None, second: date | datetime | None) -> bool:
    """Whether two values fall on the same calendar day."""
    if first is None or second is None:
        return False
    return _as_date(first) == _as_date(second)


def age_on(birthdate: date | datetime, on_date: date | datetime) -> int:
    """Age in whole years on ``on_date``."""
    born = _as_date(birthdate)
    today = _as_date(on_date)
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years
