"""
DayNotes Backend — Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the API contract.
How:   FastAPI uses these models to parse request bodies, serialize responses
       and generate the OpenAPI documentation.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Domain / Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteRecord(BaseModel):
    """
    A stored note, exactly as persisted under notes/{date}/{time}.

    `timestamp` is set by the server on every create and update.
    """
    text: str = Field(description="Sanitized note text")
    timestamp: int = Field(description="Last write time, epoch milliseconds")


# time → note, for a single day
DayNotes = Dict[str, NoteRecord]

# date → (time → note), for a week or month
RangeNotes = Dict[str, DayNotes]


class MessageResponse(BaseModel):
    """Confirmation returned by successful create, update and delete."""
    message: str = Field(description="Human-readable confirmation")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteBody(BaseModel):
    """
    Body of POST and PUT /notes/{date}/{time}.

    `text` accepts any JSON value; non-strings are stored as their string
    form. Missing or empty text is rejected by the repository with a 400.
    """
    text: Optional[Any] = Field(default=None, description="Note text")


# ══════════════════════════════════════════════════════════════════════════
# Error / Operational Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "Note not found.",
            "code": "not_found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and backing-store status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    store: str = Field(description="Backing store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
