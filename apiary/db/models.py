"""SQLAlchemy ORM models for Apiary.

Tables:
- beekeepers : owners, one row per external identity subject
- hives      : owner-scoped hive records
- queens     : global queen records

The Hive↔Queen relation is stored on both sides (``hives.queen_id`` and
``queens.hive_id``).  Both columns are UNIQUE so that at most one queen sits
in a hive and at most one hive holds a queen; the assignment coordinator keeps
the two sides mirrored inside a single transaction, and the constraints turn a
racing double assignment into an IntegrityError at commit instead of a
corrupted relation.
"""

from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Beekeeper(Base):
    """The authenticated owner of zero or more hives.

    Created on first registration after login; never updated or deleted
    through the API.
    """

    __tablename__ = "beekeepers"
    __table_args__ = (sa.UniqueConstraint("subject_id", name="uq_beekeepers_subject_id"),)

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow
    )


class Hive(Base):
    """An apiary record owned by one beekeeper, holding at most one queen."""

    __tablename__ = "hives"
    __table_args__ = (sa.UniqueConstraint("queen_id", name="uq_hives_queen_id"),)

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    structure_type: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    colony_size: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    # Subject identifier of the creator; immutable after creation
    owner_id: Mapped[str] = mapped_column(sa.String(255), nullable=False, index=True)
    queen_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow
    )


class Queen(Base):
    """A queen bee record; global (not owner-scoped), installed in at most one hive."""

    __tablename__ = "queens"
    __table_args__ = (sa.UniqueConstraint("hive_id", name="uq_queens_hive_id"),)

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    species: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    age: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    hive_id: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=_utcnow
    )
