"""
Point ledger repository.

This module provides data access for the append-only point ledger, including
the period sums shown on the points summary.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.points import PointHistory
from .base import AsyncBaseRepository


class PointHistoryRepository(AsyncBaseRepository[PointHistory]):
    """Repository for point ledger entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, PointHistory)

    async def for_user(self, user_id: int, limit: Optional[int] = 50, offset: int = 0) -> List[PointHistory]:
        return await self.list(limit=limit, offset=offset, filters={"user_id": user_id})

    async def ledger_total(self, user_id: int) -> int:
        """Sum of every ledger amount for a user."""
        stmt = select(func.coalesce(func.sum(PointHistory.amount), 0)).where(PointHistory.user_id == user_id)
        return int((await self.session.execute(stmt)).scalar_one())

    async def sum_since(self, user_id: int, point_type: str, since: datetime) -> int:
        """Absolute sum of entries of ``point_type`` created at or after ``since``."""
        stmt = select(func.coalesce(func.sum(PointHistory.amount), 0)).where(
            PointHistory.user_id == user_id,
            PointHistory.type == point_type,
            PointHistory.created_at >= since,
        )
        return abs(int((await self.session.execute(stmt)).scalar_one()))
