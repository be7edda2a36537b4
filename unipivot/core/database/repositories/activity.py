"""Activity log repository."""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.activity import ActivityLog
from .base import AsyncBaseRepository, AsyncQueryBuilder


class ActivityLogRepository(AsyncBaseRepository[ActivityLog]):
    """Repository for activity log entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ActivityLog)

    async def search(
        self,
        user_id: Optional[int] = None,
        action: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[ActivityLog], int]:
        filters = {"user_id": user_id, "action": action}
        entries = await self.list(limit=limit, offset=offset, filters=filters)
        count_stmt = select(func.count()).select_from(ActivityLog)
        count_stmt = AsyncQueryBuilder.apply_filters(count_stmt, ActivityLog, filters)
        total = (await self.session.execute(count_stmt)).scalar_one()
        return entries, total

    async def recent(self, limit: int = 10) -> List[ActivityLog]:
        return await self.list(limit=limit)
