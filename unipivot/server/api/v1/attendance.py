"""
Attendance Endpoints.

Participants check in to a session during its check-in window; staff can
record attendance manually for anyone.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.programs import (
    AttendanceMark,
    AttendanceRead,
    AttendanceStatsRead,
    CheckInResponse,
    CheckInWindow,
    MyAttendanceResponse,
)
from unipivot.core.rules.attendance import can_check_in, check_in_window, get_remaining_check_in_time
from unipivot.server.deps import get_current_user, require_staff
from unipivot.server.services import attendance as attendance_service

router = APIRouter(tags=["attendance"])


@router.get(
    "/sessions/{session_id}/window",
    response_model=CheckInWindow,
    summary="Get Check-in Window",
    description="When check-in opens and closes for a session, and the seconds left right now.",
    responses={404: {"description": "Session not found"}},
)
async def get_check_in_window(session_id: int, session: AsyncSession = Depends(get_session)) -> CheckInWindow:
    program_session = await attendance_service.get_session_or_404(session, session_id)
    now = utc_now()
    opens_at, closes_at = check_in_window(program_session.starts_at, program_session.ends_at)
    return CheckInWindow(
        session_id=program_session.id,
        opens_at=opens_at,
        closes_at=closes_at,
        is_open=can_check_in(program_session.starts_at, program_session.ends_at, now),
        remaining_seconds=get_remaining_check_in_time(program_session.starts_at, program_session.ends_at, now),
    )


@router.post(
    "/sessions/{session_id}/check-in",
    response_model=CheckInResponse,
    summary="Check In",
    description=(
        "Check the signed-in participant in to a session. Arriving up to 10 minutes late counts as "
        "PRESENT, up to 15 minutes as LATE, later as ABSENT. PRESENT and LATE earn attendance points."
    ),
    responses={
        400: {"description": "Check-in window is closed"},
        403: {"description": "Not an approved participant"},
        404: {"description": "Session not found"},
        409: {"description": "Already checked in"},
    },
)
async def check_in(
    session_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> CheckInResponse:
    outcome = await attendance_service.check_in(session, current_user, session_id)
    return CheckInResponse(
        attendance=AttendanceRead.model_validate(outcome.attendance),
        message=outcome.message,
        points_awarded=outcome.points_awarded,
    )


@router.put(
    "/sessions/{session_id}",
    response_model=AttendanceRead,
    summary="Record Attendance",
    description="Create or overwrite the attendance of a participant. No points are granted.",
    responses={403: {"description": "STAFF grade required"}, 404: {"description": "Session or user not found"}},
)
async def mark_attendance(
    session_id: int,
    data: AttendanceMark,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> AttendanceRead:
    """
    Record attendance for one participant.

    - **user_id**: Participant.
    - **status**: PRESENT, LATE, ABSENT or EXCUSED.
    - **note**: Optional remark, e.g. the excuse.
    """
    attendance = await attendance_service.mark_attendance(session, session_id, data.user_id, data.status, data.note)
    return AttendanceRead.model_validate(attendance)


@router.get(
    "/sessions/{session_id}",
    response_model=List[AttendanceRead],
    summary="List Session Attendance",
    responses={403: {"description": "STAFF grade required"}, 404: {"description": "Session not found"}},
)
async def list_session_attendance(
    session_id: int,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> List[AttendanceRead]:
    records = await attendance_service.list_session_attendance(session, session_id)
    return [AttendanceRead.model_validate(r) for r in records]


@router.get(
    "/programs/{program_id}/me",
    response_model=MyAttendanceResponse,
    summary="My Attendance",
    description="The signed-in user's attendance in a program with summary statistics.",
    responses={404: {"description": "Program not found"}},
)
async def my_attendance(
    program_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MyAttendanceResponse:
    records, stats = await attendance_service.my_attendance(session, current_user, program_id)
    return MyAttendanceResponse(
        records=[AttendanceRead.model_validate(r) for r in records],
        stats=AttendanceStatsRead(**asdict(stats)),
    )
