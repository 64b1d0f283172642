"""Queen records: create, read, replace, update and list.

Queens carry no owner and are readable and writable by any caller; the
hive-scoped assignment endpoints are where ownership applies.  As with hives,
``hive_id`` is never written here.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from apiary.db.models import Queen
from apiary.db.store import queen_store
from apiary.results import Result, not_found
from apiary.services.listing import Listing, PaginatedLister
from apiary.validation import validate_attributes

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("name", "species")


class QueenService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.queens = queen_store(session)
        self.lister = PaginatedLister(self.queens)

    async def create(self, *, name: str, species: str, age: int) -> Result[Queen]:
        failure = validate_attributes({"name": name, "species": species})
        if failure is not None:
            return failure

        async with self.session.begin():
            queen = await self.queens.create(name=name, species=species, age=age, hive_id=None)

        logger.info("Queen created: queen_id=%s", queen.id)
        return queen

    async def get(self, queen_id: int) -> Result[Queen]:
        async with self.session.begin():
            queen = await self.queens.get_by_id(queen_id)
        if queen is None:
            return not_found("queen not found")
        return queen

    async def replace(self, queen_id: int, *, name: str, species: str, age: int) -> Result[Queen]:
        """Replace every editable attribute of a queen (PUT); her hive is kept."""
        return await self.update(queen_id, {"name": name, "species": species, "age": age})

    async def update(self, queen_id: int, changes: dict[str, Any]) -> Result[Queen]:
        """Merge the given attributes into a queen (PATCH)."""
        failure = validate_attributes({key: changes[key] for key in _TEXT_FIELDS if key in changes})
        if failure is not None:
            return failure

        async with self.session.begin():
            queen = await self.queens.save(queen_id, changes)
        if queen is None:
            return not_found("queen not found")

        logger.info("Queen updated: queen_id=%s fields=%s", queen_id, sorted(changes))
        return queen

    async def list(
        self,
        *,
        page_size: int,
        cursor: str | None,
        base_url: str,
    ) -> Result[Listing[Queen]]:
        async with self.session.begin():
            return await self.lister.list({}, page_size, cursor, base_url)
