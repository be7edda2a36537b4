"""
Change history, rollback and restore point repositories.

This module provides data access for the site design audit trail.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.history import BackupConfig, ChangeHistory, RestorePoint, Rollback
from .base import AsyncBaseRepository, AsyncQueryBuilder


class ChangeHistoryRepository(AsyncBaseRepository[ChangeHistory]):
    """Repository for change history entries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ChangeHistory)

    async def search(
        self,
        entity_type: Optional[str] = None,
        action: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[ChangeHistory], int]:
        """Filter history entries, newest first.

        Args:
            entity_type: Exact entity type
            action: Exact action
            start_date: Inclusive lower bound on ``created_at``
            end_date: Inclusive upper bound on ``created_at``
            search: Case-insensitive substring of description, entity id or field name
            limit: Page size
            offset: Records to skip

        Returns:
            Tuple of (entries, total matching count)
        """
        conditions = []
        if entity_type:
            conditions.append(ChangeHistory.entity_type == entity_type)
        if action:
            conditions.append(ChangeHistory.action == action)
        if start_date:
            conditions.append(ChangeHistory.created_at >= start_date)
        if end_date:
            conditions.append(ChangeHistory.created_at <= end_date)
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    ChangeHistory.description.ilike(pattern),  # type: ignore[union-attr]
                    ChangeHistory.entity_id.ilike(pattern),  # type: ignore[attr-defined]
                    ChangeHistory.field_name.ilike(pattern),  # type: ignore[union-attr]
                )
            )

        stmt = select(ChangeHistory).where(*conditions)
        stmt = stmt.order_by(ChangeHistory.created_at.desc(), ChangeHistory.id.desc())  # type: ignore[union-attr]
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, offset)
        entries = list((await self.session.execute(stmt)).scalars().all())

        count_stmt = select(func.count()).select_from(ChangeHistory).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()
        return entries, total

    async def for_entity(self, entity_type: str, entity_id: str) -> List[ChangeHistory]:
        stmt = (
            select(ChangeHistory)
            .where(ChangeHistory.entity_type == entity_type, ChangeHistory.entity_id == entity_id)
            .order_by(ChangeHistory.created_at.desc(), ChangeHistory.id.desc())  # type: ignore[union-attr]
        )
        return list((await self.session.execute(stmt)).scalars().all())


class RollbackRepository(AsyncBaseRepository[Rollback]):
    """Repository for rollback records."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Rollback)

    async def for_history(self, history_id: int) -> Optional[Rollback]:
        stmt = select(Rollback).where(Rollback.target_history_id == history_id)
        return (await self.session.execute(stmt)).scalars().first()


class RestorePointRepository(AsyncBaseRepository[RestorePoint]):
    """Repository for restore points."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, RestorePoint)

    async def list_points(self, include_automatic: bool = True, limit: int = 50, offset: int = 0) -> List[RestorePoint]:
        stmt = select(RestorePoint)
        if not include_automatic:
            stmt = stmt.where(RestorePoint.is_automatic == False)  # noqa: E712
        stmt = stmt.order_by(RestorePoint.created_at.desc(), RestorePoint.id.desc())  # type: ignore[union-attr]
        stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, offset)
        return list((await self.session.execute(stmt)).scalars().all())

    async def latest_automatic(self) -> Optional[RestorePoint]:
        stmt = (
            select(RestorePoint)
            .where(RestorePoint.is_automatic == True)  # noqa: E712
            .order_by(RestorePoint.created_at.desc(), RestorePoint.id.desc())  # type: ignore[union-attr]
        )
        return (await self.session.execute(stmt)).scalars().first()

    async def automatic_points(self) -> List[RestorePoint]:
        """Automatic backups, newest first."""
        stmt = (
            select(RestorePoint)
            .where(RestorePoint.is_automatic == True)  # noqa: E712
            .order_by(RestorePoint.created_at.desc(), RestorePoint.id.desc())  # type: ignore[union-attr]
        )
        return list((await self.session.execute(stmt)).scalars().all())


class BackupConfigRepository(AsyncBaseRepository[BackupConfig]):
    """Repository for per-entity backup policies."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, BackupConfig)

    async def get_by_entity_type(self, entity_type: str) -> Optional[BackupConfig]:
        stmt = select(BackupConfig).where(BackupConfig.entity_type == entity_type)
        return (await self.session.execute(stmt)).scalars().first()
