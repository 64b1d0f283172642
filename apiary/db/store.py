"""Typed CRUD over one table per entity kind.

``EntityStore`` wraps an ``AsyncSession`` and a model class.  It never
commits: callers open the unit of work (``async with session.begin():``) and
every store call made inside it is part of the same transaction.  Writes are
flushed so generated ids and constraint violations surface immediately.

Pagination is keyset-based: rows are ordered by ascending primary key and the
opaque cursor encodes the last id of the previous page (url-safe base64, same
scheme the listing tools used for offsets).  ``list_page`` fetches one row
more than the page size to learn whether another page exists, and counts the
full filtered set with a separate unbounded query.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession

from apiary.db.models import Base, Beekeeper, Hive, Queen
from apiary.results import Result, validation_error

T = TypeVar("T", bound=Base)


# ---------------------------------------------------------------------------
# Cursor helpers
# ---------------------------------------------------------------------------


def encode_cursor(last_id: int) -> str:
    return base64.urlsafe_b64encode(str(last_id).encode()).decode()


def decode_cursor(cursor: str) -> int | None:
    """Return the id encoded in *cursor*, or None if it is not a valid cursor."""
    try:
        value = int(base64.urlsafe_b64decode(cursor.encode()).decode())
    except (binascii.Error, UnicodeError, ValueError):
        return None
    return value if value >= 0 else None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@dataclass
class Page(Generic[T]):
    """One page of a filtered listing."""

    items: list[T]
    next_cursor: str | None
    total: int


class EntityStore(Generic[T]):
    """CRUD for a single entity kind, bound to one session."""

    def __init__(self, session: AsyncSession, model: type[T]) -> None:
        self.session = session
        self.model = model

    async def create(self, **data: Any) -> T:
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def get_by_id(self, entity_id: int, *, for_update: bool = False) -> T | None:
        """Load one entity by primary key.

        With ``for_update=True`` the row is locked (``SELECT ... FOR UPDATE``)
        until the surrounding transaction ends, and the in-session copy is
        refreshed from the locked row.
        """
        stmt = sa.select(self.model).where(self.model.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_one(self, filters: dict[str, Any], *, for_update: bool = False) -> T | None:
        """Load the entity matching *filters*, refreshed from the database.

        Meant for columns that are UNIQUE, such as the assignment references;
        the row with the lowest id is returned if several match.
        """
        stmt = (
            sa.select(self.model)
            .where(*self._conditions(filters))
            .order_by(self.model.id.asc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def save(self, entity_id: int, data: dict[str, Any]) -> T | None:
        """Merge *data* into the stored entity.  Returns None if it does not exist.

        PATCH callers drop unset fields before calling; PUT callers pass every
        replaceable attribute.
        """
        entity = await self.get_by_id(entity_id, for_update=True)
        if entity is None:
            return None
        for key, value in data.items():
            setattr(entity, key, value)
        await self.session.flush()
        return entity

    async def delete(self, entity_id: int) -> bool:
        entity = await self.get_by_id(entity_id, for_update=True)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        return True

    async def list_page(
        self,
        filters: dict[str, Any],
        page_size: int,
        cursor: str | None = None,
    ) -> Result[Page[T]]:
        """Return up to *page_size* entities matching *filters* after *cursor*.

        Args:
            filters:   Column equality filters (e.g. ``{"owner_id": subject}``).
            page_size: Maximum number of items on the page.
            cursor:    Opaque cursor from a previous page, or None for the first.

        Returns:
            ``Page`` with the items, the cursor of the next page (None on the
            last page) and the total number of matching entities regardless of
            paging.  A VALIDATION failure if *cursor* cannot be decoded.
        """
        stmt = sa.select(self.model).where(*self._conditions(filters))
        if cursor is not None:
            after_id = decode_cursor(cursor)
            if after_id is None:
                return validation_error("invalid cursor")
            stmt = stmt.where(self.model.id > after_id)
        stmt = stmt.order_by(self.model.id.asc()).limit(page_size + 1)

        result = await self.session.execute(stmt)
        rows = list(result.scalars().all())

        count_result = await self.session.execute(
            sa.select(sa.func.count())
            .select_from(self.model)
            .where(*self._conditions(filters))
        )
        total = count_result.scalar_one()

        items = rows[:page_size]
        next_cursor = encode_cursor(items[-1].id) if len(rows) > page_size else None
        return Page(items=items, next_cursor=next_cursor, total=total)

    async def list_all(self, filters: dict[str, Any] | None = None) -> list[T]:
        stmt = (
            sa.select(self.model)
            .where(*self._conditions(filters or {}))
            .order_by(self.model.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    def _conditions(self, filters: dict[str, Any]) -> list[sa.ColumnElement[bool]]:
        return [getattr(self.model, column) == value for column, value in filters.items()]


def hive_store(session: AsyncSession) -> EntityStore[Hive]:
    return EntityStore(session, Hive)


def queen_store(session: AsyncSession) -> EntityStore[Queen]:
    return EntityStore(session, Queen)


def beekeeper_store(session: AsyncSession) -> EntityStore[Beekeeper]:
    return EntityStore(session, Beekeeper)


__all__ = [
    "EntityStore",
    "Page",
    "beekeeper_store",
    "decode_cursor",
    "encode_cursor",
    "hive_store",
    "queen_store",
]
