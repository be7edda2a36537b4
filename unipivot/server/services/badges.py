"""
Badge and XP service.

Badges are stored once per user. Statistics for the activity badges are
computed from attendance and book report rows, so re-running
``check_and_award_badges`` is always safe.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.entities.badges import Badge, UserBadge, UserProfile
from unipivot.core.database.entities.programs import ProgramSession
from unipivot.core.database.entities.registrations import Attendance, Registration
from unipivot.core.database.entities.reports import BookReport
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import AttendanceStatus, RegistrationStatus, ReportStatus
from unipivot.core.rules.levels import (
    BADGE_DEFINITIONS,
    UserStats,
    calculate_attendance_streak,
    calculate_level,
    earned_badges,
    level_badges,
)

logger = get_logger(__name__)

# Experience granted per activity
XP_ATTENDANCE = 10
XP_REPORT = 20
XP_PROGRAM_COMPLETION = 50

ATTENDED = (AttendanceStatus.present.value, AttendanceStatus.late.value)


async def seed_badges(session: AsyncSession) -> int:
    """Insert missing badge definitions. Returns how many were added."""
    existing = set((await session.execute(select(Badge.code))).scalars().all())
    added = 0
    for definition in BADGE_DEFINITIONS:
        if definition.code in existing:
            continue
        session.add(
            Badge(
                code=definition.code,
                name=definition.name,
                description=definition.description,
                icon=definition.icon,
                category=definition.category.value,
            )
        )
        added += 1
    if added:
        await session.flush()
        logger.info(f"Seeded {added} badges")
    return added


async def get_badge_by_code(session: AsyncSession, code: str) -> Optional[Badge]:
    result = await session.execute(select(Badge).where(Badge.code == code))
    return result.scalars().first()


async def award_badge(session: AsyncSession, user_id: int, code: str, program_id: Optional[int] = None) -> bool:
    """
    Give a badge to a user.

    Returns:
        False when the badge is unknown or already held, True otherwise
    """
    badge = await get_badge_by_code(session, code)
    if badge is None:
        logger.warning(f"Unknown badge code {code}")
        return False
    held = await session.execute(
        select(UserBadge.id).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge.id)
    )
    if held.first() is not None:
        return False
    session.add(UserBadge(user_id=user_id, badge_id=badge.id, program_id=program_id))
    await session.flush()
    logger.info(f"Awarded badge {code} to user={user_id}")
    return True


async def get_or_create_profile(session: AsyncSession, user_id: int) -> UserProfile:
    result = await session.execute(select(UserProfile).where(UserProfile.user_id == user_id))
    profile = result.scalars().first()
    if profile is None:
        profile = UserProfile(user_id=user_id)
        session.add(profile)
        await session.flush()
    return profile


async def award_xp(session: AsyncSession, user_id: int, amount: int) -> Tuple[UserProfile, List[str]]:
    """
    Add experience and recompute the level.

    Returns:
        The profile and the level badge codes newly awarded
    """
    profile = await get_or_create_profile(session, user_id)
    previous_level = profile.level
    profile.xp = max(0, profile.xp + amount)
    profile.level = calculate_level(profile.xp)
    session.add(profile)
    await session.flush()

    awarded: List[str] = []
    if profile.level > previous_level:
        logger.info(f"User {user_id} reached level {profile.level}")
        for code in level_badges(profile.level):
            if await award_badge(session, user_id, code):
                awarded.append(code)
    return profile, awarded


async def get_user_stats(session: AsyncSession, user_id: int) -> UserStats:
    # sessions of every program the user was approved for
    total_stmt = (
        select(func.count(ProgramSession.id))
        .join(Registration, Registration.program_id == ProgramSession.program_id)
        .where(
            Registration.user_id == user_id,
            Registration.status == RegistrationStatus.approved.value,
        )
    )
    total_sessions = (await session.execute(total_stmt)).scalar_one()

    check_ins = (
        await session.execute(
            select(Attendance.checked_at).where(Attendance.user_id == user_id, Attendance.status.in_(ATTENDED))
        )
    ).scalars().all()

    report_count = (
        await session.execute(
            select(func.count(BookReport.id)).where(
                BookReport.author_id == user_id, BookReport.status != ReportStatus.draft.value
            )
        )
    ).scalar_one()

    books_read = (
        await session.execute(
            select(func.count(func.distinct(BookReport.book_title))).where(BookReport.author_id == user_id)
        )
    ).scalar_one()

    return UserStats(
        total_sessions=total_sessions,
        present_sessions=len(check_ins),
        attendance_streak=calculate_attendance_streak(check_ins),
        report_count=report_count,
        books_read=books_read,
    )


async def check_and_award_badges(session: AsyncSession, user_id: int) -> List[str]:
    """Award every activity badge the user now qualifies for."""
    stats = await get_user_stats(session, user_id)
    awarded = []
    for code in earned_badges(stats):
        if await award_badge(session, user_id, code):
            awarded.append(code)
    return awarded


async def list_badges(session: AsyncSession) -> List[Badge]:
    result = await session.execute(select(Badge).order_by(Badge.category, Badge.id))
    return list(result.scalars().all())


async def user_badges(session: AsyncSession, user_id: int) -> List[Tuple[UserBadge, Badge]]:
    stmt = (
        select(UserBadge, Badge)
        .join(Badge, Badge.id == UserBadge.badge_id)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.desc())
    )
    return [(row[0], row[1]) for row in (await session.execute(stmt)).all()]
