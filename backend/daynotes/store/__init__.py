"""
DayNotes Backend — Store Package
=================================

What:  Hierarchical key-value backends behind the KeyValueStore interface.

Backend Inventory:
    - base.py:   KeyValueStore (abstract) + path helpers
    - memory.py: MemoryStore, nested dicts in process memory
    - sql.py:    SQLStore, one SQL row per leaf via async SQLAlchemy
"""

import logging

from daynotes.config import Settings
from daynotes.store.base import KeyValueStore
from daynotes.store.memory import MemoryStore

logger = logging.getLogger(__name__)

__all__ = ["KeyValueStore", "MemoryStore", "build_store"]


def build_store(config: Settings) -> KeyValueStore:
    """
    Construct the process-wide store selected by STORE_BACKEND.

    Called once by the application factory; the result is handed to every
    NoteRepository through a FastAPI dependency.
    """
    if config.store_backend == "memory":
        logger.info("Using in-memory note store (data is not persisted)")
        return MemoryStore()

    # Imported lazily so the memory backend never creates a database engine
    from daynotes.database import async_session_factory, engine
    from daynotes.store.sql import SQLStore

    logger.info("Using SQL note store")
    return SQLStore(async_session_factory, engine=engine, create_schema=config.db_create_all)
