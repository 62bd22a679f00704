"""
DayNotes Backend — Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for the note service.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by the validators and the repository; caught by the
       global handlers.

Exception Hierarchy:
    DayNotesError (base)
    ├── ValidationError   → 400 Bad Request (client can fix)
    ├── NotFoundError     → 404 Not Found
    └── StoreError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class DayNotesError(Exception):
    """
    Base exception for all DayNotes application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info, always logged. Only ValidationError
                  context is returned to the client, as `details`.
    """

    # Machine-readable code returned alongside the message
    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DayNotesError):
    """
    Raised when client input fails validation.

    When:    Malformed date or time, missing or empty note text, unparsable body.
    HTTP:    400 Bad Request

    Always raised before the backing store is touched, so a rejected request
    has no side effects.
    """

    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(DayNotesError):
    """
    Raised when nothing is stored at the requested key or range.

    When:    Missing note, empty day, week or month with no notes.
    HTTP:    404 Not Found
    """

    code = "not_found"

    def __init__(
        self,
        message: str = "Not found.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreError(DayNotesError):
    """
    Raised when a backing-store call fails.

    HTTP:    500 Internal Server Error

    The client only ever sees the generic message; the operation, path and
    original exception type travel in `context` and are logged server-side.
    Store errors are never retried by the repository.
    """

    code = "store_error"

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
