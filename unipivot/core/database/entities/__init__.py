"""
Database entity models.

Importing this package registers every table on ``Base.metadata``.
"""

from .activity import ActivityLog
from .badges import Badge, UserBadge, UserProfile
from .business import CalendarEvent, Document, Project
from .content import BlogPost, Notice
from .donations import Donation
from .evaluation import ParticipantCard, ParticipationPermission
from .history import BackupConfig, ChangeHistory, RestorePoint, Rollback
from .points import PointHistory
from .programs import Program, ProgramSession
from .registrations import Attendance, Registration
from .reports import BookReport
from .site_design import (
    AnnouncementBanner,
    FloatingButton,
    Popup,
    PopupTemplate,
    SeoSetting,
    SiteSection,
    SiteSetting,
)
from .users import AuthToken, User

__all__ = [
    "ActivityLog",
    "AnnouncementBanner",
    "Attendance",
    "AuthToken",
    "BackupConfig",
    "Badge",
    "BlogPost",
    "BookReport",
    "CalendarEvent",
    "ChangeHistory",
    "Document",
    "FloatingButton",
    "Donation",
    "Notice",
    "ParticipantCard",
    "ParticipationPermission",
    "PointHistory",
    "Popup",
    "PopupTemplate",
    "Program",
    "ProgramSession",
    "Project",
    "Registration",
    "RestorePoint",
    "Rollback",
    "SeoSetting",
    "SiteSection",
    "SiteSetting",
    "User",
    "UserBadge",
    "UserProfile",
]
