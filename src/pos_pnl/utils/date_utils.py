"""Date parsing and calendar utilities."""

import re
from datetime import date, datetime, timedelta

# Report dates are always ISO calendar dates
ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

# Stored timestamps: SQLite CURRENT_TIMESTAMP ("2024-03-15 14:02:11"),
# JavaScript toISOString ("2024-03-15T14:02:11.123Z"), or a bare date.
TIMESTAMP_PATTERN = re.compile(r"^(\d{4}-\d{1,2}-\d{1,2})(?:[ T].*)?$")


class InvalidDateRange(ValueError):
    """Raised when a report date cannot be parsed."""

    def __init__(self, message: str, value: object = None):
        """Initialize InvalidDateRange.

        Args:
            message: Error message.
            value: The offending input value.
        """
        self.value = value
        super().__init__(message)


def parse_date(raw_date: str | date) -> date:
    """Parse a report date.

    Args:
        raw_date: ISO date string (YYYY-MM-DD), date, or datetime.

    Returns:
        Parsed date object.

    Raises:
        InvalidDateRange: If the date cannot be parsed.
    """
    if isinstance(raw_date, datetime):
        return raw_date.date()
    if isinstance(raw_date, date):
        return raw_date
    if not isinstance(raw_date, str):
        raise InvalidDateRange(f"Unsupported date value: {raw_date!r}", raw_date)

    date_str = raw_date.strip()
    match = ISO_DATE_PATTERN.match(date_str)
    if not match:
        raise InvalidDateRange(f"Cannot parse date: '{raw_date}'", raw_date)

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateRange(f"Cannot parse date: '{raw_date}': {e}", raw_date) from e


def parse_date_range(start: str | date, end: str | date) -> tuple[date, date]:
    """Parse both ends of an inclusive date range.

    No ordering check is made; ``start > end`` is a valid, empty range.
    """
    return parse_date(start), parse_date(end)


def to_date(timestamp: str | date) -> date:
    """Get the calendar date of a stored timestamp.

    Args:
        timestamp: Timestamp string, date, or datetime.

    Returns:
        The calendar date part.

    Raises:
        InvalidDateRange: If the timestamp is not recognizable.
    """
    if isinstance(timestamp, (date, datetime)):
        return parse_date(timestamp)
    if not isinstance(timestamp, str):
        raise InvalidDateRange(f"Unsupported timestamp value: {timestamp!r}", timestamp)

    match = TIMESTAMP_PATTERN.match(timestamp.strip())
    if not match:
        raise InvalidDateRange(f"Cannot parse timestamp: '{timestamp}'", timestamp)
    return parse_date(match.group(1))


def date_to_iso(d: date) -> str:
    """Convert a date to ISO 8601 format (YYYY-MM-DD).

    Args:
        d: Date to convert.

    Returns:
        ISO format date string.
    """
    return d.isoformat()


def is_date_in_range(
    d: date,
    start_date: date | None = None,
    end_date: date | None = None,
) -> bool:
    """Check if a date is within a range.

    Args:
        d: Date to check.
        start_date: Start of range (inclusive). None means no lower bound.
        end_date: End of range (inclusive). None means no upper bound.

    Returns:
        True if date is within range.
    """
    if start_date is not None and d < start_date:
        return False
    if end_date is not None and d > end_date:
        return False
    return True


def get_quarter(d: date) -> int:
    """Get the quarter (1-4) for a date.

    Args:
        d: Date to get quarter for.

    Returns:
        Quarter number (1-4).
    """
    return (d.month - 1) // 3 + 1


def last_day_of_month(year: int, month: int) -> date:
    """Return the last calendar day of a month."""
    if month == 12:
        return date(year, 12, 31)
    return date(year, month + 1, 1) - timedelta(days=1)


def add_months(d: date, months: int) -> date:
    """Return the first day of the month ``months`` after ``d``'s month."""
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def previous_period(start: date, end: date) -> tuple[date, date]:
    """Return the equal-length range that ends the day before ``start``.

    A 7-day range 2024-03-08..2024-03-14 gives 2024-03-01..2024-03-07.

    Args:
        start: Start of the current range (inclusive).
        end: End of the current range (inclusive).

    Returns:
        Tuple of (previous_start, previous_end).
    """
    length = (end - start).days
    previous_end = start - timedelta(days=1)
    return previous_end - timedelta(days=length), previous_end
