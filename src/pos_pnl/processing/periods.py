"""Calendar period partitioning for breakdown reports.

Every generator returns ordered, non-overlapping, gap-free
``(period_start, period_end)`` pairs. The first period is anchored to
the calendar boundary containing ``start`` (Sunday, 1st of the month,
first day of the quarter, January 1st), so it may begin before
``start``. The last period's end is clamped to ``end``.
"""

from datetime import date, timedelta
from typing import Callable

from pos_pnl.models.report import Granularity
from pos_pnl.utils.date_utils import add_months, get_quarter, last_day_of_month, parse_date_range

Period = tuple[date, date]

ONE_DAY = timedelta(days=1)


def generate_daily_periods(start: str | date, end: str | date) -> list[Period]:
    """One period per calendar day.

    Raises:
        InvalidDateRange: If either date is malformed.
    """
    start_date, end_date = parse_date_range(start, end)
    periods: list[Period] = []
    current = start_date
    while current <= end_date:
        periods.append((current, current))
        current += ONE_DAY
    return periods


def week_start(d: date) -> date:
    """Return the Sunday on or before ``d``."""
    # date.weekday(): Monday == 0 ... Sunday == 6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def generate_weekly_periods(start: str | date, end: str | date) -> list[Period]:
    """Sunday-to-Saturday weeks, the first starting on the Sunday on/before ``start``.

    Raises:
        InvalidDateRange: If either date is malformed.
    """
    start_date, end_date = parse_date_range(start, end)
    periods: list[Period] = []
    if start_date > end_date:
        return periods

    current = week_start(start_date)
    while current <= end_date:
        periods.append((current, min(current + timedelta(days=6), end_date)))
        current += timedelta(days=7)
    return periods


def generate_monthly_periods(start: str | date, end: str | date) -> list[Period]:
    """Calendar months, the first starting on the 1st of ``start``'s month.

    Raises:
        InvalidDateRange: If either date is malformed.
    """
    start_date, end_date = parse_date_range(start, end)
    periods: list[Period] = []
    if start_date > end_date:
        return periods

    current = start_date.replace(day=1)
    while current <= end_date:
        month_end = last_day_of_month(current.year, current.month)
        periods.append((current, min(month_end, end_date)))
        current = add_months(current, 1)
    return periods


def generate_quarterly_periods(start: str | date, end: str | date) -> list[Period]:
    """Calendar quarters (Jan/Apr/Jul/Oct), the first containing ``start``.

    Raises:
        InvalidDateRange: If either date is malformed.
    """
    start_date, end_date = parse_date_range(start, end)
    periods: list[Period] = []
    if start_date > end_date:
        return periods

    current = date(start_date.year, (get_quarter(start_date) - 1) * 3 + 1, 1)
    while current <= end_date:
        next_quarter = add_months(current, 3)
        periods.append((current, min(next_quarter - ONE_DAY, end_date)))
        current = next_quarter
    return periods


def generate_yearly_periods(start: str | date, end: str | date) -> list[Period]:
    """Calendar years, the first starting January 1st of ``start``'s year.

    Raises:
        InvalidDateRange: If either date is malformed.
    """
    start_date, end_date = parse_date_range(start, end)
    periods: list[Period] = []
    if start_date > end_date:
        return periods

    current = date(start_date.year, 1, 1)
    while current <= end_date:
        periods.append((current, min(date(current.year, 12, 31), end_date)))
        current = date(current.year + 1, 1, 1)
    return periods


GENERATORS: dict[Granularity, Callable[[str | date, str | date], list[Period]]] = {
    Granularity.DAILY: generate_daily_periods,
    Granularity.WEEKLY: generate_weekly_periods,
    Granularity.MONTHLY: generate_monthly_periods,
    Granularity.QUARTERLY: generate_quarterly_periods,
    Granularity.YEARLY: generate_yearly_periods,
}


def partition(start: str | date, end: str | date, granularity: Granularity) -> list[Period]:
    """Partition ``[start, end]`` at the given granularity.

    Args:
        start: First day (inclusive).
        end: Last day (inclusive).
        granularity: Bucket size.

    Returns:
        Ordered list of (period_start, period_end) pairs; empty if
        ``start > end``.

    Raises:
        InvalidDateRange: If either date is malformed.
    """
    return GENERATORS[granularity](start, end)
