"""Timestamp handling - Pure functions.

PHIVOLCS reports event times as Philippine local civil time. Timestamps
are kept as source text on the records and parsed on demand, so every
helper here has to cope with malformed input.
"""

import calendar
from datetime import datetime, timedelta, timezone


# Internal timestamp layout used in records and ledger files
TIMESTAMP_FORMAT = "%d %B %Y - %I:%M:%S %p"

# Philippine Standard Time is UTC+8 (no DST)
PHT = timezone(timedelta(hours=8), name="PHT")


def parse_timestamp(value: str) -> datetime | None:
    """Parse a record timestamp.

    Pure function.

    Args:
        value: Timestamp text in TIMESTAMP_FORMAT

    Returns:
        Naive local datetime, or None if the text is malformed
    """
    if not isinstance(value, str):
        return None

    try:
        return datetime.strptime(value.strip(), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def format_timestamp(value: datetime) -> str:
    """Format a datetime into the record timestamp layout."""
    return value.strftime(TIMESTAMP_FORMAT)


def local_now() -> datetime:
    """Current Philippine local time as a naive datetime."""
    return datetime.now(PHT).replace(tzinfo=None)


def within_minutes(first: str, second: str, tolerance_minutes: int) -> bool:
    """Check whether two timestamps fall within a minute tolerance.

    Pure function.

    A tolerance of 0 means "same minute" (less than 60 seconds apart);
    any other tolerance is an inclusive bound on the absolute difference.
    Unparseable input never matches.

    Args:
        first: First timestamp text
        second: Second timestamp text
        tolerance_minutes: Allowed difference in whole minutes

    Returns:
        True if both parse and are within tolerance
    """
    first_dt = parse_timestamp(first)
    second_dt = parse_timestamp(second)
    if first_dt is None or second_dt is None:
        return False

    delta_seconds = abs((first_dt - second_dt).total_seconds())
    if tolerance_minutes == 0:
        return delta_seconds < 60
    return delta_seconds <= tolerance_minutes * 60


def same_minute(first: str, second: str) -> bool:
    """Check whether two timestamps are less than a minute apart."""
    return within_minutes(first, second, 0)


def months_before(moment: datetime, months: int) -> datetime:
    """Shift a datetime back by whole calendar months.

    Pure function. The day is clamped to the last day of the target month
    (e.g. 30 April minus 2 months is 28/29 February).

    Args:
        moment: Starting point
        months: Number of months to go back

    Returns:
        Shifted datetime
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
