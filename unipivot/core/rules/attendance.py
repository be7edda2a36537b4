"""
Attendance rules.

Check-ins are graded by how many minutes after the session start they happen.
Check-in opens 30 minutes before the start and closes at the session end, or
two hours after the start when the session has no end time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional

from unipivot.core.models.domain.enums import AttendanceStatus

from .numbers import round_half_up

PRESENT_GRACE_MINUTES = 10
LATE_LIMIT_MINUTES = 15
CHECK_IN_OPENS_BEFORE = timedelta(minutes=30)
DEFAULT_SESSION_LENGTH = timedelta(hours=2)

ATTENDANCE_LABELS = {
    AttendanceStatus.present: "출석",
    AttendanceStatus.late: "지각",
    AttendanceStatus.absent: "결석",
    AttendanceStatus.excused: "공결",
}

ATTENDANCE_COLORS = {
    AttendanceStatus.present: "bg-green-100 text-green-800",
    AttendanceStatus.late: "bg-yellow-100 text-yellow-800",
    AttendanceStatus.absent: "bg-red-100 text-red-800",
    AttendanceStatus.excused: "bg-blue-100 text-blue-800",
}


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    late: int
    absent: int
    excused: int
    attendance_rate: int


def calculate_late_minutes(session_start: datetime, check_in: datetime) -> int:
    """Whole minutes between start and check-in; negative when early."""
    return math.floor((check_in - session_start).total_seconds() / 60)


def determine_attendance_status(session_start: datetime, check_in: datetime) -> AttendanceStatus:
    late = calculate_late_minutes(session_start, check_in)
    if late <= PRESENT_GRACE_MINUTES:
        return AttendanceStatus.present
    if late <= LATE_LIMIT_MINUTES:
        return AttendanceStatus.late
    return AttendanceStatus.absent


def check_in_window(session_start: datetime, session_end: Optional[datetime]) -> tuple[datetime, datetime]:
    """Return the inclusive (opens, closes) check-in window of a session."""
    closes = session_end if session_end is not None else session_start + DEFAULT_SESSION_LENGTH
    return session_start - CHECK_IN_OPENS_BEFORE, closes


def can_check_in(session_start: datetime, session_end: Optional[datetime], now: datetime) -> bool:
    opens, closes = check_in_window(session_start, session_end)
    return opens <= now <= closes


def get_remaining_check_in_time(session_start: datetime, session_end: Optional[datetime], now: datetime) -> int:
    """Seconds left until check-in closes, never negative."""
    _, closes = check_in_window(session_start, session_end)
    return max(0, int((closes - now).total_seconds()))


def calculate_attendance_stats(statuses: Iterable[AttendanceStatus | str]) -> AttendanceStats:
    """
    Summarize attendance records.

    Late and excused records count as attended for the rate, which is a
    rounded percentage and 0 for an empty input.
    """
    counts = {status: 0 for status in AttendanceStatus}
    total = 0
    for status in statuses:
        counts[AttendanceStatus(status)] += 1
        total += 1
    attended = counts[AttendanceStatus.present] + counts[AttendanceStatus.late] + counts[AttendanceStatus.excused]
    rate = round_half_up(attended / total * 100) if total else 0
    return AttendanceStats(
        total=total,
        present=counts[AttendanceStatus.present],
        late=counts[AttendanceStatus.late],
        absent=counts[AttendanceStatus.absent],
        excused=counts[AttendanceStatus.excused],
        attendance_rate=rate,
    )


def get_attendance_label(status: AttendanceStatus | str) -> str:
    return ATTENDANCE_LABELS[AttendanceStatus(status)]


def get_attendance_color(status: AttendanceStatus | str) -> str:
    return ATTENDANCE_COLORS[AttendanceStatus(status)]


def get_check_in_message(status: AttendanceStatus | str, late_minutes: Optional[int] = None) -> str:
    status = AttendanceStatus(status)
    if status == AttendanceStatus.present:
        return "출석이 완료되었습니다."
    if status == AttendanceStatus.late:
        return f"{late_minutes or 0}분 지각으로 처리되었습니다."
    if status == AttendanceStatus.absent:
        return "출석 가능 시간이 지나 결석으로 처리되었습니다."
    return "공결로 처리되었습니다."
