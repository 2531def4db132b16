"""
Calendar date helpers.

All dates are naive local calendar dates. Weekdays follow two conventions:
Python's ``date.weekday()`` (Monday = 0) for range arithmetic and the
stored schedule convention (Sunday = 0) for schedule lookups.
"""

import calendar
from datetime import date, timedelta
from typing import Iterator, Optional, Tuple


def sunday_based_weekday(day: date) -> int:
    """Return 0 for Sunday through 6 for Saturday."""
    return (day.weekday() + 1) % 7


def week_range(anchor: date) -> Tuple[date, date]:
    """Monday..Sunday week containing ``anchor``."""
    monday = anchor - timedelta(days=anchor.weekday())
    return monday, monday + timedelta(days=6)


def month_range(anchor: date) -> Tuple[date, date]:
    """First..last day of the calendar month containing ``anchor``."""
    last_day = calendar.monthrange(anchor.year, anchor.month)[1]
    return anchor.replace(day=1), anchor.replace(day=last_day)


def resolve_view_range(
    view: Optional[str],
    start_date: date,
    end_date: Optional[date] = None
) -> Tuple[date, date, str]:
    """
    Resolve a calendar view to a concrete date range.

    Args:
        view: "day", "week" or "month"; anything else (including None and
            "range") means the literal range
        start_date: Anchor date, or range start for a literal range
        end_date: Range end for a literal range (defaults to start_date)

    Returns:
        Tuple of (first day, last day, resolved view name)
    """
    if view == "day":
        return start_date, start_date, "day"
    if view == "week":
        first, last = week_range(start_date)
        return first, last, "week"
    if view == "month":
        first, last = month_range(start_date)
        return first, last, "month"
    return start_date, end_date or start_date, "range"


def iter_days(first: date, last: date) -> Iterator[date]:
    """Yield every date from ``first`` to ``last`` inclusive."""
    day = first
    while day <= last:
        yield day
        day += timedelta(days=1)
