"""Visit service — recording and listing visited paths."""

from datetime import datetime, timezone
from typing import Optional

import structlog

from visitlog.auth.dependencies import Principal
from visitlog.schemas.visit import VisitedPathRead
from visitlog.store.base import Datastore

logger = structlog.get_logger()


class VisitService:
    """Business logic for the visit log."""

    def __init__(self, store: Datastore):
        self.store = store

    async def record(
        self, path: str, principal: Principal, when: Optional[datetime] = None
    ) -> VisitedPathRead:
        """Append a visit for a known principal, stamped now (UTC) by default."""
        when = when or datetime.now(timezone.utc)
        visit = await self.store.add_visited_path(path, when, principal.user_id)
        logger.info("visits.recorded", path=path, user_id=principal.user_id)
        return visit

    async def history(self) -> list[VisitedPathRead]:
        return await self.store.get_all_visited_paths()

    async def history_for(self, user_id: int) -> list[VisitedPathRead]:
        """One user's visits. Not routed; available to callers of the service."""
        return await self.store.get_visited_paths_for_user(user_id)
