"""
DayNotes Backend — Store Node SQLAlchemy Model
===============================================

What:  ORM model for the `store_nodes` table backing the SQL key-value store.
How:   The hierarchical store is flattened to one row per primitive leaf:

           path                                   value
           ─────────────────────────────────────  ──────────────
           notes/2024-03-10/09:00/text            "Buy milk"
           notes/2024-03-10/09:00/timestamp       1710061200000

       Interior nodes (notes, notes/2024-03-10, ...) are never stored; they
       exist exactly as long as some leaf lives beneath them.
Who:   Used by SQLStore for every operation and by Alembic for schema management.

Query Patterns:
    - Read a subtree:  WHERE path = :p OR (path > ':p/' AND path < ':p0')
    - Range of children: WHERE path >= ':p/:start' AND path < ':p/:end0'
      → primary key B-tree gives an ordered range scan

Collation:
    Range predicates rely on bytewise ordering of the path column. SQLite
    compares with BINARY by default; on PostgreSQL the column is declared
    with the "C" collation so locale rules cannot reorder punctuation.
"""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from daynotes.database import Base

PATH_TYPE = String(512).with_variant(String(512, collation="C"), "postgresql")


class StoreNode(Base):
    """A single primitive value addressed by its full `/`-joined path."""

    __tablename__ = "store_nodes"

    path: Mapped[str] = mapped_column(
        PATH_TYPE,
        primary_key=True,
        comment="Full slash-joined path of the leaf, e.g. notes/2024-03-10/09:00/text",
    )

    # JSON so strings, integers, floats and booleans round-trip unchanged
    value: Mapped[Any] = mapped_column(
        JSON,
        nullable=False,
        comment="Primitive leaf value",
    )

    def __repr__(self) -> str:
        return f"<StoreNode(path='{self.path}', value={self.value!r})>"
