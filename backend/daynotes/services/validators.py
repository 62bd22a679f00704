"""
DayNotes Backend — Input Validation
====================================

What:  Validates externally supplied date/time strings and sanitizes note text.
Who:   Called by NoteRepository at the start of every operation, before the
       backing store is touched.

Rules:
    date  YYYY-MM-DD, ASCII digits, must be a real Gregorian date
    time  exactly two digits, a colon, two digits ("09:30")
          Hour and minute are NOT range-checked: "99:99" is accepted.
    text  & < > " ' ` = /  are replaced by numeric character references
"""

import re
from datetime import date
from typing import Any

from daynotes.exceptions import ValidationError

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
TIME_PATTERN = re.compile(r"[0-9]{2}:[0-9]{2}")

_ESCAPED_CHARS = "&<>\"'`=/"
_ESCAPE_TABLE = {ord(ch): f"&#{ord(ch)};" for ch in _ESCAPED_CHARS}

DATE_FORMAT_HINT = "Invalid date format. Use YYYY-MM-DD."
DATE_TIME_FORMAT_HINT = (
    "Invalid date or time format. Use YYYY-MM-DD for date and HH:MM for time."
)


def validate_date(value: str) -> date:
    """
    Parse `value` as a canonical ISO calendar date.

    Raises:
        ValidationError: not of the form YYYY-MM-DD, or not a real date
                         (e.g. "2024-04-31", "2023-02-29", "not-a-date").
    """
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        raise ValidationError(DATE_FORMAT_HINT, field="date", context={"value": str(value)})
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(DATE_FORMAT_HINT, field="date", context={"value": value})


def validate_time(value: str) -> bool:
    """True iff `value` is two ASCII digits, a colon and two ASCII digits."""
    return isinstance(value, str) and TIME_PATTERN.fullmatch(value) is not None


def validate_key(date_str: str, time_str: str) -> date:
    """Validate a (date, time) note key, reporting both formats on failure."""
    try:
        parsed = validate_date(date_str)
    except ValidationError:
        parsed = None
    if parsed is None or not validate_time(time_str):
        raise ValidationError(
            DATE_TIME_FORMAT_HINT,
            context={"date": str(date_str), "time": str(time_str)},
        )
    return parsed


def sanitize_text(value: Any) -> str:
    """Coerce to str and escape markup-significant characters as &#<codepoint>;."""
    return str(value).translate(_ESCAPE_TABLE)


def require_text(value: Any) -> str:
    """
    Return the sanitized note text.

    Raises:
        ValidationError: text is missing (None) or the empty string.
    """
    if value is None or value == "":
        raise ValidationError("Text is required.", field="text")
    return sanitize_text(value)
