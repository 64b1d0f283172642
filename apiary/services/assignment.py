"""Hive↔Queen assignment: the only writer of the two relationship columns.

The relation is mirrored on both rows (``hives.queen_id`` / ``queens.hive_id``)
and must always satisfy ``hive.queen_id == queen.id`` iff
``queen.hive_id == hive.id``.  Every operation here therefore runs as ONE
transaction that locks the rows it reads (hive first, then queen) and writes
both sides before a single commit.  A concurrent reader sees either the old
pair or the new pair, never half of one, and a failure between the two writes
rolls both back.

If two requests race to install the same queen, the UNIQUE constraints on the
reference columns make the loser's commit fail; that IntegrityError is
reported as the same conflict a sequential caller would get.

Operations:
- assign       - PUT /hives/{id}/queens/{qid}
- remove       - DELETE /hives/{id}/queens/{qid}
- delete_hive  - DELETE /hives/{id} (detaches the installed queen first)
- delete_queen - DELETE /queens/{id} (clears the holding hive first)
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from apiary.db.models import Hive
from apiary.db.store import hive_store, queen_store
from apiary.results import Failure, conflict, not_found
from apiary.services.ownership import OwnershipGuard

logger = logging.getLogger(__name__)

_DELETE_ATTEMPTS = 3


class AssignmentCoordinator:
    """Keeps hive and queen references mutually consistent."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.hives = hive_store(session)
        self.queens = queen_store(session)
        self.guard = OwnershipGuard(self.hives)

    # ------------------------------------------------------------------
    # Assignment
    # ------------------------------------------------------------------

    async def assign(self, subject_id: str, hive_id: int, queen_id: int) -> Failure | None:
        """Install *queen_id* in *hive_id*.

        Never moves a queen between hives: a queen that already has a hive is
        rejected, as is a hive that already holds a different queen.

        Returns:
            None on success, otherwise the failure (NOT_FOUND, FORBIDDEN or
            CONFLICT).  Nothing is written when a failure is returned.
        """
        try:
            async with self.session.begin():
                hive = await self.guard.authorize_hive_access(subject_id, hive_id, for_update=True)
                if isinstance(hive, Failure):
                    return hive

                queen = await self.queens.get_by_id(queen_id, for_update=True)
                if queen is None:
                    return not_found("hive and/or queen not found")
                if queen.hive_id is not None:
                    logger.warning(
                        "Queen %s already assigned to hive %s; refused for hive %s",
                        queen_id,
                        queen.hive_id,
                        hive_id,
                    )
                    return conflict("queen already assigned")
                if hive.queen_id is not None:
                    return conflict("hive already has a queen")

                queen.hive_id = hive.id
                hive.queen_id = queen.id
                await self.session.flush()
        except IntegrityError:
            logger.warning(
                "Concurrent assignment lost: hive_id=%s queen_id=%s", hive_id, queen_id
            )
            return conflict("queen already assigned")

        logger.info(
            "Queen assigned: hive_id=%s queen_id=%s owner=%s", hive_id, queen_id, subject_id
        )
        return None

    async def remove(self, subject_id: str, hive_id: int, queen_id: int) -> Failure | None:
        """Take *queen_id* out of *hive_id*, clearing both references.

        Both sides are checked: the hive must name the queen AND the queen must
        name the hive, so a drifted back-reference is refused rather than
        half-cleared.
        """
        async with self.session.begin():
            hive = await self.guard.authorize_hive_access(subject_id, hive_id, for_update=True)
            if isinstance(hive, Failure):
                return hive
            if hive.queen_id != queen_id:
                return conflict("queen not associated with this hive")

            queen = await self.queens.get_by_id(queen_id, for_update=True)
            if queen is None:
                return not_found("hive and/or queen not found")
            if queen.hive_id != hive.id:
                logger.warning(
                    "Drifted back-reference: hive %s names queen %s but queen names hive %s",
                    hive_id,
                    queen_id,
                    queen.hive_id,
                )
                return conflict("queen not associated with this hive")

            queen.hive_id = None
            hive.queen_id = None
            await self.session.flush()

        logger.info(
            "Queen removed: hive_id=%s queen_id=%s owner=%s", hive_id, queen_id, subject_id
        )
        return None

    # ------------------------------------------------------------------
    # Cascading deletes
    # ------------------------------------------------------------------

    async def delete_hive(self, subject_id: str, hive_id: int) -> Failure | None:
        """Delete an owned hive, first clearing the installed queen's back-reference."""
        async with self.session.begin():
            hive = await self.guard.authorize_hive_access(subject_id, hive_id, for_update=True)
            if isinstance(hive, Failure):
                return hive

            if hive.queen_id is not None:
                queen = await self.queens.get_by_id(hive.queen_id, for_update=True)
                if queen is not None and queen.hive_id == hive.id:
                    queen.hive_id = None
                    logger.info("Queen %s detached from deleted hive %s", queen.id, hive_id)

            await self.session.delete(hive)
            await self.session.flush()

        logger.info("Hive deleted: hive_id=%s owner=%s", hive_id, subject_id)
        return None

    async def delete_queen(self, queen_id: int) -> Failure | None:
        """Delete a queen, first clearing the reference of the hive holding her.

        The holding hive is found through ``hives.queen_id`` and locked before
        the queen, the same order ``assign`` uses.  Once the queen is locked no
        hive can gain a reference to her, so the holder is read again: if an
        assignment committed in between, the attempt is abandoned and retried
        against the new holder.
        """
        for attempt in range(1, _DELETE_ATTEMPTS + 1):
            async with self.session.begin():
                hive = await self._holding_hive(queen_id)
                queen = await self.queens.get_by_id(queen_id, for_update=True)
                if queen is None:
                    return not_found("queen not found")

                holder = await self.hives.find_one({"queen_id": queen_id})
                if _id_of(holder) != _id_of(hive):
                    logger.info(
                        "Queen %s was assigned during deletion (attempt %s); retrying",
                        queen_id,
                        attempt,
                    )
                    continue

                if hive is not None:
                    hive.queen_id = None
                    logger.info("Hive %s emptied by deletion of queen %s", hive.id, queen_id)

                await self.session.delete(queen)
                await self.session.flush()

            logger.info("Queen deleted: queen_id=%s", queen_id)
            return None

        logger.warning("Queen %s kept changing hives; deletion abandoned", queen_id)
        return conflict("queen assignment changed during deletion")

    async def _holding_hive(self, queen_id: int) -> Hive | None:
        return await self.hives.find_one({"queen_id": queen_id}, for_update=True)


def _id_of(hive: Hive | None) -> int | None:
    return hive.id if hive is not None else None
