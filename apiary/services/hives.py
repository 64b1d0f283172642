"""Hive records: create, read, replace, update and list for the owning beekeeper.

Deletion and queen (dis)assignment live in ``AssignmentCoordinator`` because
they touch the queen side of the relation as well.  Nothing here ever writes
``queen_id``: PUT and PATCH preserve whatever queen is installed.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from apiary.db.models import Hive
from apiary.db.store import hive_store
from apiary.results import Failure, Result, not_found
from apiary.services.listing import Listing, PaginatedLister
from apiary.services.ownership import OwnershipGuard
from apiary.validation import validate_attributes

logger = logging.getLogger(__name__)

# Free-text columns and the attribute names callers know them by
_TEXT_FIELDS = {"name": "name", "structure_type": "structureType"}


def _check_text(values: dict[str, Any]) -> Failure | None:
    return validate_attributes(
        {label: values.get(column) for column, label in _TEXT_FIELDS.items() if column in values}
    )


class HiveService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.hives = hive_store(session)
        self.guard = OwnershipGuard(self.hives)
        self.lister = PaginatedLister(self.hives)

    async def create(
        self,
        subject_id: str,
        *,
        name: str,
        structure_type: str,
        colony_size: int,
    ) -> Result[Hive]:
        """Create a hive owned by *subject_id*, with no queen installed."""
        failure = _check_text({"name": name, "structure_type": structure_type})
        if failure is not None:
            return failure

        async with self.session.begin():
            hive = await self.hives.create(
                name=name,
                structure_type=structure_type,
                colony_size=colony_size,
                owner_id=subject_id,
                queen_id=None,
            )

        logger.info("Hive created: hive_id=%s owner=%s", hive.id, subject_id)
        return hive

    async def get(self, subject_id: str, hive_id: int) -> Result[Hive]:
        async with self.session.begin():
            return await self.guard.authorize_hive_access(subject_id, hive_id)

    async def replace(
        self,
        subject_id: str,
        hive_id: int,
        *,
        name: str,
        structure_type: str,
        colony_size: int,
    ) -> Result[Hive]:
        """Replace every editable attribute of an owned hive (PUT)."""
        return await self._write(
            subject_id,
            hive_id,
            {"name": name, "structure_type": structure_type, "colony_size": colony_size},
        )

    async def update(self, subject_id: str, hive_id: int, changes: dict[str, Any]) -> Result[Hive]:
        """Merge the given attributes into an owned hive (PATCH).

        *changes* holds only the attributes the caller sent, keyed by column
        name; an empty dict leaves the hive untouched.
        """
        return await self._write(subject_id, hive_id, changes)

    async def list(
        self,
        subject_id: str,
        *,
        page_size: int,
        cursor: str | None,
        base_url: str,
    ) -> Result[Listing[Hive]]:
        """List the caller's hives, one page at a time."""
        async with self.session.begin():
            return await self.lister.list({"owner_id": subject_id}, page_size, cursor, base_url)

    async def _write(self, subject_id: str, hive_id: int, values: dict[str, Any]) -> Result[Hive]:
        failure = _check_text(values)
        if failure is not None:
            return failure

        async with self.session.begin():
            hive = await self.guard.authorize_hive_access(subject_id, hive_id, for_update=True)
            if isinstance(hive, Failure):
                return hive
            saved = await self.hives.save(hive.id, values)
            if saved is None:
                return not_found("hive not found")

        logger.info(
            "Hive updated: hive_id=%s owner=%s fields=%s", hive_id, subject_id, sorted(values)
        )
        return saved
