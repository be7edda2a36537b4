"""
Badge, evaluation, activity log and dashboard I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from unipivot.core.models.domain.enums import BadgeCategory, CardType, PermissionStatus

from .common import UTCDateTime
from .users import UserRead


class BadgeRead(BaseModel):
    id: int
    code: str
    name: str
    description: str
    icon: Optional[str] = None
    category: BadgeCategory

    class Config:
        from_attributes = True


class UserBadgeRead(BaseModel):
    badge: BadgeRead
    program_id: Optional[int] = None
    earned_at: datetime


class ProfileRead(BaseModel):
    user_id: int
    xp: int
    level: int
    next_level_xp: int

    class Config:
        from_attributes = True


class BadgeCheckResult(BaseModel):
    awarded: List[str]


class CardCreate(BaseModel):
    user_id: int
    type: CardType
    title: str = Field(min_length=1, max_length=255)
    category: Optional[str] = None
    description: Optional[str] = None
    session_id: Optional[int] = None


class CardRead(BaseModel):
    id: int
    program_id: int
    user_id: int
    session_id: Optional[int] = None
    type: CardType
    category: Optional[str] = None
    title: str
    description: Optional[str] = None
    issued_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CardIssueResult(BaseModel):
    card: CardRead
    warning_count: int
    praise_count: int
    deposit_forfeited: bool = False
    badge_awarded: bool = False


class PermissionSet(BaseModel):
    user_id: int
    program_id: Optional[int] = Field(default=None, description="Omit for a global permission")
    status: PermissionStatus
    reason: Optional[str] = None
    expires_at: Optional[UTCDateTime] = None


class PermissionRead(BaseModel):
    id: int
    user_id: int
    program_id: Optional[int] = None
    status: PermissionStatus
    reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    set_by: Optional[int] = None
    updated_at: datetime

    class Config:
        from_attributes = True


class PermissionCheck(BaseModel):
    user_id: int
    program_id: Optional[int] = None
    status: PermissionStatus
    allowed: bool
    reason: Optional[str] = None


class ParticipantSummary(BaseModel):
    user_id: int
    program_id: int
    warning_count: int
    praise_count: int
    cards: List[CardRead]
    permission: PermissionCheck


class ActivityLogRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    target: Optional[str] = None
    target_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DashboardStats(BaseModel):
    total_users: int
    active_programs: int
    monthly_donations: int
    monthly_donation_count: int
    pending_registrations: int
    recent_users: List[UserRead]
    recent_activities: List[ActivityLogRead]
