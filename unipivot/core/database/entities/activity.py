"""Activity log entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class ActivityLog(Base, table=True):
    """User-facing activity event (registrations, donations, status changes).

    Table: activity_logs
    """

    __tablename__ = "activity_logs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True, ondelete="SET NULL")
    action: str = Field(max_length=64, index=True)
    target: Optional[str] = Field(default=None, max_length=64)
    target_id: Optional[str] = Field(default=None, max_length=64)
    details: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON(none_as_null=True), nullable=True))
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
