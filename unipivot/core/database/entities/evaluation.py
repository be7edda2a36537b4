"""Participant evaluation entity models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from unipivot.core.models.domain.enums import PermissionStatus

from ..base import Base, utc_now


class ParticipantCard(Base, table=True):
    """Warning or praise card issued to a participant by an organizer.

    Table: participant_cards
    """

    __tablename__ = "participant_cards"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    program_id: int = Field(foreign_key="programs.id", index=True, ondelete="CASCADE")
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    session_id: Optional[int] = Field(default=None, foreign_key="program_sessions.id", ondelete="SET NULL")
    type: str = Field(max_length=16)
    category: Optional[str] = Field(default=None, max_length=64)
    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    issued_by: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


class ParticipationPermission(Base, table=True):
    """Participation restriction for a user, global when ``program_id`` is null.

    Table: participation_permissions
    """

    __tablename__ = "participation_permissions"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    program_id: Optional[int] = Field(default=None, foreign_key="programs.id", index=True, ondelete="CASCADE")
    status: str = Field(default=PermissionStatus.allowed.value, max_length=16)
    reason: Optional[str] = Field(default=None)
    expires_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    set_by: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)
