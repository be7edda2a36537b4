"""
Activity logging and admin dashboard service.

Activity logs are user-facing events (registrations, donations, status
changes) shown on the admin dashboard. They are written inside the caller's
transaction and committed together with the change they describe.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.activity import ActivityLog
from unipivot.core.database.entities.donations import Donation
from unipivot.core.database.entities.programs import Program
from unipivot.core.database.entities.registrations import Registration
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import ActivityLogRepository
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import DonationStatus, ProgramStatus, RegistrationStatus
from unipivot.core.models.io.community import ActivityLogRead, DashboardStats
from unipivot.core.models.io.users import UserRead

logger = get_logger(__name__)


class ActivityAction:
    """Well-known activity action names."""

    PROGRAM_REGISTER = "PROGRAM_REGISTER"
    PROGRAM_CANCEL = "PROGRAM_CANCEL"
    PROGRAM_COMPLETED = "PROGRAM_COMPLETED"
    DONATION = "DONATION"
    DEPOSIT_PAID = "DEPOSIT_PAID"
    DEPOSIT_REFUNDED = "DEPOSIT_REFUNDED"
    DEPOSIT_FORFEITED = "DEPOSIT_FORFEITED"
    CARD_ISSUED = "CARD_ISSUED"
    ROLE_CHANGED = "ROLE_CHANGED"
    STATUS_CHANGED = "STATUS_CHANGED"
    REPORT_SUBMITTED = "REPORT_SUBMITTED"
    POINTS_ADJUSTED = "POINTS_ADJUSTED"

    @staticmethod
    def registration(status: str) -> str:
        """``REGISTRATION_APPROVED``, ``REGISTRATION_REJECTED`` and so on."""
        return f"REGISTRATION_{status}"


async def log_activity(
    session: AsyncSession,
    user_id: Optional[int],
    action: str,
    target: Optional[str] = None,
    target_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ActivityLog:
    """Append an activity log entry to the current transaction."""
    entry = ActivityLog(
        user_id=user_id,
        action=action,
        target=target,
        target_id=str(target_id) if target_id is not None else None,
        details=details,
    )
    entry = await ActivityLogRepository(session).create(entry)
    logger.debug(f"Activity {action} by user={user_id} on {target}#{target_id}")
    return entry


async def dashboard_stats(session: AsyncSession, recent_limit: int = 5) -> DashboardStats:
    """Headline numbers for the admin dashboard; donations count from the first of the current UTC month."""
    month_start = utc_now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    total_users = (await session.execute(select(func.count(User.id)))).scalar_one()
    active_programs = (
        await session.execute(select(func.count(Program.id)).where(Program.status == ProgramStatus.open.value))
    ).scalar_one()
    donations = (
        await session.execute(
            select(func.coalesce(func.sum(Donation.amount), 0), func.count(Donation.id)).where(
                Donation.status == DonationStatus.completed.value,
                Donation.created_at >= month_start,
            )
        )
    ).one()
    pending_registrations = (
        await session.execute(
            select(func.count(Registration.id)).where(Registration.status == RegistrationStatus.pending.value)
        )
    ).scalar_one()
    recent_users = (
        await session.execute(select(User).order_by(User.created_at.desc(), User.id.desc()).limit(recent_limit))
    ).scalars().all()
    recent_activities = await ActivityLogRepository(session).recent(limit=recent_limit)
    return DashboardStats(
        total_users=total_users,
        active_programs=active_programs,
        monthly_donations=int(donations[0]),
        monthly_donation_count=donations[1],
        pending_registrations=pending_registrations,
        recent_users=[UserRead.model_validate(u) for u in recent_users],
        recent_activities=[ActivityLogRead.model_validate(a) for a in recent_activities],
    )
