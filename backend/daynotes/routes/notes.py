"""
DayNotes Backend — Notes Route Handlers
========================================

What:  HTTP surface for the note repository.
How:   Extracts path parameters and bodies, delegates to NoteRepository,
       returns JSON. Errors raised by the repository are turned into
       responses by the global exception handlers in main.py.

Route Inventory:
    GET    /notes/day/{date}      all notes on a date
    GET    /notes/week/{date}     all notes in the week containing date
    GET    /notes/month/{date}    all notes in the month containing date
    GET    /notes/{date}/{time}   one note
    POST   /notes/{date}/{time}   create or replace (201)
    PUT    /notes/{date}/{time}   update existing
    DELETE /notes/{date}/{time}   delete existing

The range routes are registered before /{date}/{time}; otherwise
GET /notes/day/2024-03-10 would match it with date="day".
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request

from daynotes.config import settings
from daynotes.schemas.note import (
    DayNotes,
    ErrorResponse,
    MessageResponse,
    NoteBody,
    NoteRecord,
    RangeNotes,
)
from daynotes.services.note_repository import NoteRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["Notes"])

_ERRORS = {
    400: {"description": "Malformed date, time or body", "model": ErrorResponse},
    404: {"description": "Nothing stored at the key or range", "model": ErrorResponse},
    500: {"description": "Backing store failure", "model": ErrorResponse},
}


def get_note_repository(request: Request) -> NoteRepository:
    """FastAPI dependency: a repository over the store built by create_app()."""
    return NoteRepository(
        request.app.state.store,
        root=settings.notes_root,
        week_starts_on=settings.week_starts_on,
    )


# ── Range Queries ─────────────────────────────────────────────────────────

@router.get("/day/{date}", response_model=DayNotes, responses=_ERRORS,
            summary="All notes on a date")
async def get_day(date: str, repo: NoteRepository = Depends(get_note_repository)) -> DayNotes:
    return await repo.get_day(date)


@router.get("/week/{date}", response_model=RangeNotes, responses=_ERRORS,
            summary="All notes in the week containing a date")
async def get_week(date: str, repo: NoteRepository = Depends(get_note_repository)) -> RangeNotes:
    return await repo.get_week(date)


@router.get("/month/{date}", response_model=RangeNotes, responses=_ERRORS,
            summary="All notes in the month containing a date")
async def get_month(date: str, repo: NoteRepository = Depends(get_note_repository)) -> RangeNotes:
    return await repo.get_month(date)


# ── Single Notes ──────────────────────────────────────────────────────────

@router.get("/{date}/{time}", response_model=NoteRecord, responses=_ERRORS,
            summary="Get a single note")
async def get_note(
    date: str,
    time: str,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteRecord:
    return await repo.get_note(date, time)


@router.post("/{date}/{time}", response_model=MessageResponse, status_code=201,
             responses=_ERRORS, summary="Create or replace a note")
async def create_note(
    date: str,
    time: str,
    body: Optional[NoteBody] = Body(default=None),
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageResponse:
    """
    Store `body.text` at (date, time). An existing note at the same key is
    replaced without complaint.
    """
    await repo.create_or_replace_note(date, time, body.text if body else None)
    return MessageResponse(message="Note created successfully.")


@router.put("/{date}/{time}", response_model=MessageResponse, responses=_ERRORS,
            summary="Update an existing note")
async def update_note(
    date: str,
    time: str,
    body: Optional[NoteBody] = Body(default=None),
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageResponse:
    """Replace the text of an existing note; 404 if there is none to update."""
    await repo.update_note(date, time, body.text if body else None)
    return MessageResponse(message="Note updated successfully.")


@router.delete("/{date}/{time}", response_model=MessageResponse, responses=_ERRORS,
               summary="Delete a note")
async def delete_note(
    date: str,
    time: str,
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageResponse:
    await repo.delete_note(date, time)
    return MessageResponse(message="Note deleted successfully.")
