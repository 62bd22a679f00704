"""Create store_nodes table

Revision ID: 001
Revises: None
Create Date: 2024-03-01 00:00:00.000000+00:00

What:  Creates the `store_nodes` table backing SQLStore: one row per
       primitive leaf of the note hierarchy, keyed by its full path.
How:   The path column uses the "C" collation on PostgreSQL so the primary
       key index orders paths bytewise, which range reads depend on.

Rollback: downgrade() drops the table and every stored note with it.
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "store_nodes",
        sa.Column(
            "path",
            sa.String(512).with_variant(sa.String(512, collation="C"), "postgresql"),
            nullable=False,
            comment="Full slash-joined path of the leaf, e.g. notes/2024-03-10/09:00/text",
        ),
        sa.Column(
            "value",
            sa.JSON(),
            nullable=False,
            comment="Primitive leaf value",
        ),
        sa.PrimaryKeyConstraint("path"),
    )


def downgrade() -> None:
    op.drop_table("store_nodes")
