"""
Change history entity models.

The change history is an audit trail of site design edits. Each row can be
rolled back individually, and restore points capture every design table at
once so the whole site can be restored.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class ChangeHistory(Base, table=True):
    """One tracked change.

    ``previous_value`` and ``new_value`` hold the entity before and after the
    change; ``full_snapshot`` is the state of the entity as of this entry.

    Table: change_histories
    """

    __tablename__ = "change_histories"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    entity_type: str = Field(max_length=64, index=True)
    entity_id: str = Field(max_length=64, index=True)
    action: str = Field(max_length=16, index=True)
    field_name: Optional[str] = Field(default=None, max_length=100)
    previous_value: Any = Field(default=None, sa_column=Column(JSON(none_as_null=True), nullable=True))
    new_value: Any = Field(default=None, sa_column=Column(JSON(none_as_null=True), nullable=True))
    full_snapshot: Optional[Dict[str, Any]] = Field(
        default=None, sa_column=Column(JSON(none_as_null=True), nullable=True)
    )
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    description: Optional[str] = Field(default=None)
    is_auto_save: bool = Field(default=False)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)

    def __repr__(self) -> str:
        return f"ChangeHistory(id={self.id}, {self.action} {self.entity_type}#{self.entity_id})"


class Rollback(Base, table=True):
    """Record of a rollback performed against a history entry or restore point.

    Table: rollbacks
    """

    __tablename__ = "rollbacks"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    target_history_id: Optional[int] = Field(
        default=None, foreign_key="change_histories.id", index=True, ondelete="SET NULL"
    )
    restore_point_id: Optional[int] = Field(default=None, foreign_key="restore_points.id", ondelete="SET NULL")
    rollback_type: str = Field(max_length=16)
    affected_entities: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    reason: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


class RestorePoint(Base, table=True):
    """Snapshot of every site design table.

    Table: restore_points
    """

    __tablename__ = "restore_points"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    snapshot: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    is_automatic: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)


class BackupConfig(Base, table=True):
    """Automatic backup policy per entity type.

    Table: backup_configs
    """

    __tablename__ = "backup_configs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    entity_type: str = Field(max_length=64, unique=True, index=True)
    enable_auto_backup: bool = Field(default=True)
    backup_interval: int = Field(default=24, ge=0, description="Minimum hours between automatic backups")
    retention_days: int = Field(default=30, ge=1)
    max_versions: int = Field(default=50, ge=1)
    auto_cleanup: bool = Field(default=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)
