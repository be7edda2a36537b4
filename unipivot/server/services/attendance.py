"""
Session attendance service.

Participants check themselves in during the session's check-in window;
organizers can record or correct attendance for anyone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.programs import ProgramSession
from unipivot.core.database.entities.registrations import Attendance, Registration
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import BusinessRuleError, ConflictError, NotFoundError, PermissionDeniedError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import AttendanceStatus, PointCategory, RegistrationStatus
from unipivot.core.rules.attendance import (
    AttendanceStats,
    calculate_attendance_stats,
    calculate_late_minutes,
    can_check_in,
    determine_attendance_status,
    get_check_in_message,
)
from unipivot.server.core.config import settings

from .badges import XP_ATTENDANCE, award_xp, check_and_award_badges
from .points import add_points
from .programs import get_program_or_404

logger = get_logger(__name__)


@dataclass
class CheckInOutcome:
    attendance: Attendance
    message: str
    points_awarded: int
    badges: List[str]


async def get_session_or_404(session: AsyncSession, session_id: int) -> ProgramSession:
    program_session = await session.get(ProgramSession, session_id)
    if program_session is None:
        raise NotFoundError(f"Session {session_id} not found")
    return program_session


async def find_attendance(session: AsyncSession, session_id: int, user_id: int) -> Optional[Attendance]:
    result = await session.execute(
        select(Attendance).where(Attendance.session_id == session_id, Attendance.user_id == user_id)
    )
    return result.scalars().first()


async def check_in(
    session: AsyncSession, user: User, session_id: int, now: Optional[datetime] = None
) -> CheckInOutcome:
    """
    Record a self check-in.

    PRESENT and LATE earn attendance points and XP and re-evaluate badges.
    Checking in more than 15 minutes late is recorded as ABSENT.
    """
    now = now or utc_now()
    program_session = await get_session_or_404(session, session_id)

    result = await session.execute(
        select(Registration).where(
            Registration.user_id == user.id,
            Registration.program_id == program_session.program_id,
            Registration.status == RegistrationStatus.approved.value,
        )
    )
    if result.scalars().first() is None:
        raise PermissionDeniedError("Only approved participants can check in")
    if not can_check_in(program_session.starts_at, program_session.ends_at, now):
        raise BusinessRuleError("Check-in is not open for this session")
    if await find_attendance(session, session_id, user.id) is not None:
        raise ConflictError("Already checked in to this session")

    status = determine_attendance_status(program_session.starts_at, now)
    late_minutes = max(0, calculate_late_minutes(program_session.starts_at, now))
    attendance = Attendance(
        session_id=session_id,
        user_id=user.id,
        status=status.value,
        checked_at=now,
        late_minutes=late_minutes if status == AttendanceStatus.late else None,
    )
    session.add(attendance)
    await session.flush()

    points = 0
    badges: List[str] = []
    if status in (AttendanceStatus.present, AttendanceStatus.late):
        points = settings.points.attendance
        if points:
            label = program_session.title or f"{program_session.session_no}회차"
            await add_points(session, user, points, PointCategory.attendance, f"출석: {label}")
        _, badges = await award_xp(session, user.id, XP_ATTENDANCE)
        badges += await check_and_award_badges(session, user.id)

    await session.commit()
    await session.refresh(attendance)
    logger.info(f"User {user.id} checked in to session {session_id} as {status.value}")
    return CheckInOutcome(
        attendance=attendance,
        message=get_check_in_message(status, late_minutes),
        points_awarded=points,
        badges=badges,
    )


async def mark_attendance(
    session: AsyncSession,
    session_id: int,
    user_id: int,
    status: AttendanceStatus,
    note: Optional[str] = None,
) -> Attendance:
    """Create or overwrite a participant's attendance. No points are granted."""
    await get_session_or_404(session, session_id)
    if await session.get(User, user_id) is None:
        raise NotFoundError(f"User {user_id} not found")

    attendance = await find_attendance(session, session_id, user_id)
    if attendance is None:
        attendance = Attendance(session_id=session_id, user_id=user_id, checked_at=utc_now())
    attendance.status = status.value
    attendance.note = note
    if status != AttendanceStatus.late:
        attendance.late_minutes = None
    session.add(attendance)
    await session.commit()
    await session.refresh(attendance)
    return attendance


async def list_session_attendance(session: AsyncSession, session_id: int) -> List[Attendance]:
    await get_session_or_404(session, session_id)
    result = await session.execute(
        select(Attendance).where(Attendance.session_id == session_id).order_by(Attendance.checked_at.asc())
    )
    return list(result.scalars().all())


async def my_attendance(
    session: AsyncSession, user: User, program_id: int
) -> Tuple[List[Attendance], AttendanceStats]:
    await get_program_or_404(session, program_id)
    result = await session.execute(
        select(Attendance)
        .join(ProgramSession, ProgramSession.id == Attendance.session_id)
        .where(ProgramSession.program_id == program_id, Attendance.user_id == user.id)
        .order_by(ProgramSession.session_no.asc())
    )
    records = list(result.scalars().all())
    return records, calculate_attendance_stats(record.status for record in records)
