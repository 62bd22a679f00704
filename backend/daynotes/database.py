"""
DayNotes Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory and declarative base.
How:   Creates an async engine with connection pooling and a session factory
       that the SQL store backend opens one session per store call from.
Who:   Used by daynotes.store.sql.SQLStore and Alembic.
When:  Engine is created at module import; sessions are created per store
       call. SQLStore.close() disposes the engine at shutdown.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs skip the pool options; aiosqlite picks its own pool class.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from daynotes.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for `database_url` using the configured pool settings."""
    options = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: values stay readable after the session closes
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)
async_session_factory = build_session_factory(engine)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers tables with a shared metadata object used by Alembic and by
    SQLStore.initialize() when DB_CREATE_ALL is enabled.
    """
    pass
