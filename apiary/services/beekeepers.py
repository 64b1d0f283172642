"""Beekeeper registration.

A beekeeper row is created the first time an authenticated subject registers
after logging in with the identity provider.  Registration is idempotent:
later calls return the existing row unchanged, since beekeepers are immutable.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from apiary.db.models import Beekeeper
from apiary.db.store import beekeeper_store
from apiary.results import Result
from apiary.validation import validate_attributes

logger = logging.getLogger(__name__)


class BeekeeperService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.beekeepers = beekeeper_store(session)

    async def register(
        self,
        subject_id: str,
        *,
        first_name: str,
        last_name: str,
    ) -> Result[tuple[Beekeeper, bool]]:
        """Create the beekeeper for *subject_id* unless it already exists.

        Returns:
            ``(beekeeper, created)``, or a VALIDATION failure for bad names.
        """
        failure = validate_attributes({"firstName": first_name, "lastName": last_name})
        if failure is not None:
            return failure

        try:
            async with self.session.begin():
                existing = await self._find(subject_id)
                if existing is not None:
                    return existing, False
                beekeeper = await self.beekeepers.create(
                    subject_id=subject_id,
                    first_name=first_name,
                    last_name=last_name,
                )
        except IntegrityError:
            # Two first logins raced; the other one created the row.
            async with self.session.begin():
                existing = await self._find(subject_id)
            if existing is None:
                raise
            return existing, False

        logger.info("Beekeeper registered: beekeeper_id=%s subject=%s", beekeeper.id, subject_id)
        return beekeeper, True

    async def list_all(self) -> list[Beekeeper]:
        async with self.session.begin():
            return await self.beekeepers.list_all()

    async def _find(self, subject_id: str) -> Beekeeper | None:
        matches = await self.beekeepers.list_all({"subject_id": subject_id})
        return matches[0] if matches else None
