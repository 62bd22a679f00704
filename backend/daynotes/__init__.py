"""
DayNotes Backend — Application Package Initializer
===================================================

What: Marks the `daynotes` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Repository, Validation, │  ← Addressing, range queries,
    │            Date Ranges)             │    input rules
    ├─────────────────────────────────────┤
    │   Store (KeyValueStore backends)    │  ← Path-addressed persistence
    ├─────────────────────────────────────┤
    │        Database (SQL backend)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the store directly; the repository never touches HTTP.
"""

__version__ = "1.0.0"
