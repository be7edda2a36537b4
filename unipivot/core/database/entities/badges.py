"""Badge and XP entity models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field

from ..base import Base, utc_now


class Badge(Base, table=True):
    """Badge definition, seeded from ``unipivot.core.rules.levels.BADGE_DEFINITIONS``.

    Table: badges
    """

    __tablename__ = "badges"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(max_length=64, unique=True, index=True)
    name: str = Field(max_length=100)
    description: str = Field(default="")
    icon: Optional[str] = Field(default=None, max_length=32)
    category: str = Field(max_length=16)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


class UserBadge(Base, table=True):
    """Badge earned by a user. A badge is earned at most once.

    Table: user_badges
    """

    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    badge_id: int = Field(foreign_key="badges.id", ondelete="CASCADE")
    program_id: Optional[int] = Field(default=None, foreign_key="programs.id", ondelete="SET NULL")
    earned_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)


class UserProfile(Base, table=True):
    """Gamification profile holding experience and level.

    Table: user_profiles
    """

    __tablename__ = "user_profiles"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True, ondelete="CASCADE")
    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)
