"""Initial schema - beekeepers, hives, queens.

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- beekeepers : one row per identity subject (unique subject_id)
- hives      : owner-scoped hive records
- queens     : global queen records

Indexes / constraints:
- uq_beekeepers_subject_id : a subject registers once
- ix_hives_owner_id        : owner-scoped listing filter
- uq_hives_queen_id        : a queen sits in at most one hive
- uq_queens_hive_id        : a hive holds at most one queen

Design notes:
- The Hive↔Queen link is stored on both rows and kept mirrored by the
  assignment coordinator inside one transaction; the two unique constraints
  make a racing double assignment fail at commit.
- No foreign keys between hives and queens: the references are cleared
  explicitly before either row is deleted.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers used by Alembic
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "beekeepers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("subject_id", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("subject_id", name="uq_beekeepers_subject_id"),
    )

    op.create_table(
        "hives",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("structure_type", sa.String(255), nullable=False),
        sa.Column("colony_size", sa.Integer, nullable=False),
        sa.Column("owner_id", sa.String(255), nullable=False),
        sa.Column("queen_id", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("queen_id", name="uq_hives_queen_id"),
    )
    op.create_index("ix_hives_owner_id", "hives", ["owner_id"])

    op.create_table(
        "queens",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("species", sa.String(255), nullable=False),
        sa.Column("age", sa.Integer, nullable=False),
        sa.Column("hive_id", sa.Integer, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("hive_id", name="uq_queens_hive_id"),
    )


def downgrade() -> None:
    op.drop_table("queens")
    op.drop_index("ix_hives_owner_id", table_name="hives")
    op.drop_table("hives")
    op.drop_table("beekeepers")
