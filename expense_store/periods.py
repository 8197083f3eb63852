"""Calendar helpers for period filters and trend reports."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Tuple

ALL = "all"
WEEK = "week"
MONTH = "month"
PERIODS = (ALL, WEEK, MONTH)

WEEK_LENGTH_DAYS = 7

# Fixed English abbreviations so labels do not depend on the process locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def week_window(today: date) -> Tuple[str, str]:
    """The 7 calendar days ending ``today``, both ends inclusive."""
    start = today - timedelta(days=WEEK_LENGTH_DAYS - 1)
    return start.isoformat(), today.isoformat()


def month_window(today: date) -> Tuple[str, str]:
    """From the 1st of the current month through ``today``, inclusive."""
    return today.replace(day=1).isoformat(), today.isoformat()


def shift_month(day: date, months: int) -> date:
    """First day of the month ``months`` away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    return date(year, month + 1, 1)


def month_bounds(first: date) -> Tuple[str, str]:
    """Half-open ``[first, first_of_next_month)`` bounds as ISO strings."""
    return first.isoformat(), shift_month(first, 1).isoformat()


def month_label(day: date) -> str:
    return f"{MONTH_ABBREVIATIONS[day.month - 1]} {day.year % 100:02d}"


def day_label(day: date) -> str:
    return f"{day.day} {MONTH_ABBREVIATIONS[day.month - 1]}"
