"""
Change history, rollback, restore point and backup configuration I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from unipivot.core.models.domain.enums import ChangeAction, RollbackType


class FieldChange(BaseModel):
    field: str
    previous_value: Any = None
    new_value: Any = None


class ChangeHistoryRead(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    action: ChangeAction
    field_name: Optional[str] = None
    previous_value: Any = None
    new_value: Any = None
    full_snapshot: Optional[Dict[str, Any]] = None
    user_id: Optional[int] = None
    description: Optional[str] = None
    is_auto_save: bool
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ChangeHistoryDetail(ChangeHistoryRead):
    changes: List[FieldChange] = Field(default_factory=list)
    rolled_back: bool = False


class RollbackRequest(BaseModel):
    reason: Optional[str] = None


class AffectedEntity(BaseModel):
    entity_type: str
    entity_id: str
    action: str


class RollbackRead(BaseModel):
    id: int
    target_history_id: Optional[int] = None
    restore_point_id: Optional[int] = None
    rollback_type: RollbackType
    affected_entities: List[AffectedEntity]
    user_id: Optional[int] = None
    reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RestorePointCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class RestorePointSummary(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    user_id: Optional[int] = None
    is_automatic: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RestorePointRead(RestorePointSummary):
    snapshot: Dict[str, Any]


class RestoreRequest(BaseModel):
    confirm_restore: bool = Field(default=False, description="Must be true to replace the current site design")


class RestoreResult(BaseModel):
    restore_point_id: int
    backup_id: Optional[int] = Field(default=None, description="Automatic backup taken before restoring")
    restored: Dict[str, int]


class BackupConfigRead(BaseModel):
    entity_type: str
    enable_auto_backup: bool
    backup_interval: int
    retention_days: int
    max_versions: int
    auto_cleanup: bool

    class Config:
        from_attributes = True


class BackupConfigUpdate(BaseModel):
    enable_auto_backup: Optional[bool] = None
    backup_interval: Optional[int] = Field(default=None, ge=0)
    retention_days: Optional[int] = Field(default=None, ge=1)
    max_versions: Optional[int] = Field(default=None, ge=1)
    auto_cleanup: Optional[bool] = None
