"""
DayNotes Backend — Date Range Calculation
==========================================

What:  Inclusive week and month boundaries around an arbitrary date.
How:   Pure functions over datetime.date; results are YYYY-MM-DD strings so
       callers can compare them lexicographically against stored date keys.
"""

import calendar
from datetime import date
from typing import Tuple

# datetime.date.weekday() numbering
MONDAY = 0
SUNDAY = 6


def week_bounds(day: date, week_starts_on: int = MONDAY) -> Tuple[str, str]:
    """
    Return (first, last) day of the seven-day week containing `day`.

    `week_starts_on` uses weekday() numbering: Monday=0 ... Sunday=6.
    Weeks that would run past date.min or date.max are clipped to them.
    """
    offset = (day.weekday() - week_starts_on) % 7
    first = max(day.toordinal() - offset, date.min.toordinal())
    last = min(day.toordinal() - offset + 6, date.max.toordinal())
    return date.fromordinal(first).isoformat(), date.fromordinal(last).isoformat()


def month_bounds(day: date) -> Tuple[str, str]:
    """Return (first, last) day of the calendar month containing `day`."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1).isoformat(), day.replace(day=last_day).isoformat()
