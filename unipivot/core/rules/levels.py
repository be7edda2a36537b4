"""
Badge and level rules.

Badges are awarded from a user's activity statistics. Experience points (XP)
raise the user's level; reaching level 5, 10 and 20 awards a badge too.

Level ``L`` requires ``50 * L * (L - 1)`` XP, so level 2 needs 100 XP,
level 3 needs 300 XP and level 5 needs 1000 XP.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from unipivot.core.models.domain.enums import BadgeCategory

from .numbers import round_half_up

XP_STEP = 50
STREAK_MAX_GAP = timedelta(days=14)
PERFECT_ATTENDANCE_MIN_SESSIONS = 4
LEVEL_BADGES = {5: "LEVEL_5", 10: "LEVEL_10", 20: "LEVEL_20"}
PRAISED_PARTICIPANT = "PRAISED_PARTICIPANT"


@dataclass(frozen=True)
class BadgeDefinition:
    code: str
    name: str
    description: str
    icon: str
    category: BadgeCategory


BADGE_DEFINITIONS: list[BadgeDefinition] = [
    BadgeDefinition(
        "ATTENDANCE_STREAK_5", "꾸준한 독서인", "5회 연속 출석", "🔥", BadgeCategory.attendance
    ),
    BadgeDefinition(
        "ATTENDANCE_STREAK_10", "열혈 독서인", "10회 연속 출석", "💪", BadgeCategory.attendance
    ),
    BadgeDefinition(
        "PERFECT_ATTENDANCE", "개근왕", "4회 이상 모든 회차 출석", "👑", BadgeCategory.attendance
    ),
    BadgeDefinition(
        "REPORT_WRITER_5", "기록하는 독서인", "5개 이상 독후감 작성", "✍️", BadgeCategory.report
    ),
    BadgeDefinition(
        "REPORT_WRITER_20", "독후감 마스터", "20개 이상 독후감 작성", "📚", BadgeCategory.report
    ),
    BadgeDefinition("BOOK_LOVER_5", "책 애호가", "5권 이상 읽기", "📖", BadgeCategory.reading),
    BadgeDefinition("BOOK_LOVER_20", "다독가", "20권 이상 읽기", "🏆", BadgeCategory.reading),
    BadgeDefinition("LEVEL_5", "성장하는 독서인", "레벨 5 달성", "⭐", BadgeCategory.level),
    BadgeDefinition("LEVEL_10", "숙련된 독서인", "레벨 10 달성", "🌟", BadgeCategory.level),
    BadgeDefinition("LEVEL_20", "전설의 독서인", "레벨 20 달성", "💫", BadgeCategory.level),
    BadgeDefinition(
        PRAISED_PARTICIPANT, "모범 참가자", "한 프로그램에서 칭찬 카드 3장 이상", "👏", BadgeCategory.community
    ),
]


@dataclass(frozen=True)
class UserStats:
    """Activity statistics used to decide which badges a user has earned."""

    total_sessions: int = 0
    present_sessions: int = 0
    attendance_streak: int = 0
    report_count: int = 0
    books_read: int = 0

    @property
    def attendance_rate(self) -> int:
        if self.total_sessions == 0:
            return 0
        return round_half_up(self.present_sessions / self.total_sessions * 100)


BADGE_CONDITIONS: list[tuple[str, Callable[[UserStats], bool]]] = [
    ("ATTENDANCE_STREAK_5", lambda s: s.attendance_streak >= 5),
    ("ATTENDANCE_STREAK_10", lambda s: s.attendance_streak >= 10),
    (
        "PERFECT_ATTENDANCE",
        lambda s: s.attendance_rate >= 100 and s.total_sessions >= PERFECT_ATTENDANCE_MIN_SESSIONS,
    ),
    ("REPORT_WRITER_5", lambda s: s.report_count >= 5),
    ("REPORT_WRITER_20", lambda s: s.report_count >= 20),
    ("BOOK_LOVER_5", lambda s: s.books_read >= 5),
    ("BOOK_LOVER_20", lambda s: s.books_read >= 20),
]


def xp_for_level(level: int) -> int:
    """Total XP needed to reach ``level``."""
    return XP_STEP * level * (level - 1)


def calculate_level(xp: int) -> int:
    level = 1
    while xp >= xp_for_level(level + 1):
        level += 1
    return level


def level_badges(level: int) -> list[str]:
    """Level badge codes earned at ``level``."""
    return [code for threshold, code in sorted(LEVEL_BADGES.items()) if level >= threshold]


def earned_badges(stats: UserStats) -> list[str]:
    return [code for code, check in BADGE_CONDITIONS if check(stats)]


def calculate_attendance_streak(check_ins: Iterable[Optional[datetime]]) -> int:
    """
    Count consecutive check-ins ending with the most recent one.

    Two check-ins are consecutive when they are at most 14 days apart.
    """
    ordered = sorted((c for c in check_ins if c is not None), reverse=True)
    if not ordered:
        return 0
    streak = 1
    for newer, older in zip(ordered, ordered[1:]):
        if newer - older > STREAK_MAX_GAP:
            break
        streak += 1
    return streak
