"""
Repository layer.

Generic CRUD lives in ``AsyncBaseRepository``; tables with non-trivial queries
have a dedicated repository.
"""

from .activity import ActivityLogRepository
from .base import AsyncBaseRepository, AsyncQueryBuilder
from .history import (
    BackupConfigRepository,
    ChangeHistoryRepository,
    RestorePointRepository,
    RollbackRepository,
)
from .points import PointHistoryRepository

__all__ = [
    "ActivityLogRepository",
    "AsyncBaseRepository",
    "AsyncQueryBuilder",
    "BackupConfigRepository",
    "ChangeHistoryRepository",
    "PointHistoryRepository",
    "RestorePointRepository",
    "RollbackRepository",
]
