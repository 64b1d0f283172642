"""Owner-based authorization for hive-scoped operations.

A hive can only be read, changed, deleted, or have queens (dis)assigned by
the beekeeper whose subject identifier created it.  Single-hive operations go
through ``authorize_hive_access``; listings filter the query by ``owner_id``
instead of authorizing each row.
"""

from __future__ import annotations

import logging

from apiary.db.models import Hive
from apiary.db.store import EntityStore
from apiary.results import Result, forbidden, not_found

logger = logging.getLogger(__name__)


class OwnershipGuard:
    """Loads hives on behalf of a caller and refuses other owners' hives."""

    def __init__(self, hives: EntityStore[Hive]) -> None:
        self.hives = hives

    async def authorize_hive_access(
        self,
        subject_id: str,
        hive_id: int,
        *,
        for_update: bool = False,
    ) -> Result[Hive]:
        """Return the hive if *subject_id* owns it.

        Args:
            subject_id: Authenticated caller.
            hive_id:    Hive to load.
            for_update: Lock the hive row for the rest of the transaction.

        Returns:
            The Hive, a NOT_FOUND failure if it does not exist, or a FORBIDDEN
            failure if it belongs to someone else.
        """
        hive = await self.hives.get_by_id(hive_id, for_update=for_update)
        if hive is None:
            return not_found("hive not found")
        if hive.owner_id != subject_id:
            logger.warning(
                "Hive access denied: hive_id=%s owner=%s caller=%s",
                hive_id,
                hive.owner_id,
                subject_id,
            )
            return forbidden("different owner")
        return hive
