"""
DayNotes Backend — Note Repository
===================================

What:  Maps (date, time) identifiers onto the hierarchical store and answers
       point and range queries over it.
How:   Validates raw inputs, derives store paths and date boundaries, calls
       the KeyValueStore, and converts results into NoteRecord models.
Who:   Called by the /notes route handlers; one instance per request, built
       around the process-wide store.

Store Layout:
    {root}/{YYYY-MM-DD}/{HH:MM} → {"text": str, "timestamp": int}

Write Semantics:
    create_or_replace_note  unconditional write, no existence check (upsert)
    update_note             requires an existing note, then shallow-merges
    delete_note             requires an existing note, then removes it
    Every write stamps the note with the current time in epoch milliseconds.

Range Queries:
    Week and month reads ask the store for the children of {root} whose date
    keys fall in [start, end], both ends inclusive. How the store answers
    (ordered range scan or full read + filter) is up to the backend.

Error Handling:
    ValidationError is raised before any store access. Store exceptions are
    wrapped in StoreError with the failing action and path as context. The
    repository holds no mutable state and never retries.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Optional

from daynotes.exceptions import DayNotesError, NotFoundError, StoreError
from daynotes.schemas.note import DayNotes, NoteRecord, RangeNotes
from daynotes.services.date_ranges import MONDAY, month_bounds, week_bounds
from daynotes.services.validators import require_text, validate_date, validate_key
from daynotes.store.base import KeyValueStore, join_path

logger = logging.getLogger(__name__)


def epoch_millis() -> int:
    """Current UTC time in epoch milliseconds."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def _to_day(raw: Any) -> DayNotes:
    if not isinstance(raw, dict):
        return {}
    return {time_key: NoteRecord.model_validate(note) for time_key, note in raw.items()}


class NoteRepository:
    """
    Date/time-keyed note operations over a KeyValueStore.

    Args:
        store:          Backing store shared by the whole process.
        root:           Top-level path segment holding all notes.
        week_starts_on: First day of a week for get_week (Monday=0 ... Sunday=6).
        clock:          Returns "now" in epoch milliseconds; injectable for tests.
    """

    def __init__(
        self,
        store: KeyValueStore,
        root: str = "notes",
        week_starts_on: int = MONDAY,
        clock: Optional[Callable[[], int]] = None,
    ):
        self._store = store
        self._root = root
        self._week_starts_on = week_starts_on
        self._clock = clock or epoch_millis

    @asynccontextmanager
    async def _store_call(self, action: str, path: str) -> AsyncIterator[None]:
        """Translate unexpected failures inside the block into StoreError."""
        try:
            yield
        except DayNotesError:
            raise
        except Exception as e:
            logger.error("Store %s failed for %s: %s", action, path, str(e), exc_info=True)
            raise StoreError(
                context={"action": action, "path": path, "error_type": type(e).__name__},
            ) from e

    def _note_path(self, date_str: str, time_str: str) -> str:
        return join_path(self._root, date_str, time_str)

    # ── Range Queries ─────────────────────────────────────────────────────

    async def get_day(self, date_str: str) -> DayNotes:
        """
        All notes stored under one date, keyed by time.

        Raises:
            ValidationError: malformed date
            NotFoundError:   the date holds no notes
        """
        logger.info("Fetching all notes on %s", date_str)
        validate_date(date_str)

        path = join_path(self._root, date_str)
        async with self._store_call("read", path):
            notes = _to_day(await self._store.read(path))

        if not notes:
            logger.warning("No notes found for %s", date_str)
            raise NotFoundError("No notes found for the specified date.", context={"date": date_str})

        logger.info("Found %d notes for %s", len(notes), date_str)
        return notes

    async def get_week(self, date_str: str) -> RangeNotes:
        """Notes for the week containing `date_str`, keyed by date then time."""
        logger.info("Fetching all notes in the week of %s", date_str)
        start, end = week_bounds(validate_date(date_str), self._week_starts_on)
        return await self._get_range("week", start, end)

    async def get_month(self, date_str: str) -> RangeNotes:
        """Notes for the calendar month containing `date_str`, keyed by date then time."""
        logger.info("Fetching all notes in the month of %s", date_str)
        start, end = month_bounds(validate_date(date_str))
        return await self._get_range("month", start, end)

    async def _get_range(self, period: str, start: str, end: str) -> RangeNotes:
        async with self._store_call("read_range", self._root):
            entries = await self._store.read_range(self._root, start, end)
            notes = {date_key: _to_day(times) for date_key, times in entries.items()}
            notes = {date_key: times for date_key, times in notes.items() if times}

        if notes:
            logger.info("Notes found for the %s of %s to %s", period, start, end)
            return notes

        async with self._store_call("exists", self._root):
            store_has_notes = await self._store.exists(self._root)

        context = {"period": period, "start": start, "end": end}
        if not store_has_notes:
            logger.warning("No notes found in the store")
            raise NotFoundError("No notes found.", context=context)

        logger.warning("No notes found for the %s of %s to %s", period, start, end)
        raise NotFoundError(f"No notes found for the specified {period}.", context=context)

    # ── Single Notes ──────────────────────────────────────────────────────

    async def get_note(self, date_str: str, time_str: str) -> NoteRecord:
        """
        The note stored at exactly (date, time).

        Raises:
            ValidationError: malformed date or time
            NotFoundError:   nothing stored at that key
        """
        logger.info("Fetching note on %s at %s", date_str, time_str)
        validate_key(date_str, time_str)

        path = self._note_path(date_str, time_str)
        async with self._store_call("read", path):
            raw = await self._store.read(path)
            note = NoteRecord.model_validate(raw) if raw is not None else None

        if note is None:
            logger.warning("Note not found for %s at %s", date_str, time_str)
            raise NotFoundError("Note not found.", context={"date": date_str, "time": time_str})
        return note

    async def create_or_replace_note(self, date_str: str, time_str: str, text: Any) -> NoteRecord:
        """
        Store a note at (date, time), replacing any note already there.

        Raises:
            ValidationError: malformed date or time, missing or empty text
        """
        logger.info("Creating/replacing note on %s at %s", date_str, time_str)
        validate_key(date_str, time_str)
        note = NoteRecord(text=require_text(text), timestamp=self._clock())

        path = self._note_path(date_str, time_str)
        async with self._store_call("write", path):
            await self._store.write(path, note.model_dump())

        logger.info("Note created/replaced for %s at %s", date_str, time_str)
        return note

    async def update_note(self, date_str: str, time_str: str, text: Any) -> NoteRecord:
        """
        Overwrite the text of an existing note and refresh its timestamp.

        Raises:
            ValidationError: malformed date or time, missing or empty text
            NotFoundError:   no note at (date, time); nothing is written
        """
        logger.info("Updating note on %s at %s", date_str, time_str)
        validate_key(date_str, time_str)
        text = require_text(text)

        path = self._note_path(date_str, time_str)
        async with self._store_call("exists", path):
            found = await self._store.exists(path)
        if not found:
            logger.warning("Note not found for %s at %s to update", date_str, time_str)
            raise NotFoundError("Note not found.", context={"date": date_str, "time": time_str})

        note = NoteRecord(text=text, timestamp=self._clock())
        async with self._store_call("merge", path):
            await self._store.merge(path, note.model_dump())

        logger.info("Note updated for %s at %s", date_str, time_str)
        return note

    async def delete_note(self, date_str: str, time_str: str) -> None:
        """
        Permanently remove the note at (date, time).

        Raises:
            ValidationError: malformed date or time
            NotFoundError:   no note at (date, time)
        """
        logger.info("Deleting note on %s at %s", date_str, time_str)
        validate_key(date_str, time_str)

        path = self._note_path(date_str, time_str)
        async with self._store_call("exists", path):
            found = await self._store.exists(path)
        if not found:
            logger.warning("Note not found for %s at %s to delete", date_str, time_str)
            raise NotFoundError("Note not found.", context={"date": date_str, "time": time_str})

        async with self._store_call("remove", path):
            await self._store.remove(path)

        logger.info("Note deleted for %s at %s", date_str, time_str)
