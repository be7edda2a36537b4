"""Unit tests for levels, badges and attendance streaks."""

from datetime import datetime, timedelta

from unipivot.core.rules.levels import (
    BADGE_DEFINITIONS,
    UserStats,
    calculate_attendance_streak,
    calculate_level,
    earned_badges,
    level_badges,
    xp_for_level,
)


class TestLevels:
    def test_xp_thresholds(self):
        assert xp_for_level(1) == 0
        assert xp_for_level(2) == 100
        assert xp_for_level(3) == 300
        assert xp_for_level(5) == 1000

    def test_calculate_level(self):
        assert calculate_level(0) == 1
        assert calculate_level(99) == 1
        assert calculate_level(100) == 2
        assert calculate_level(1000) == 5

    def test_level_badges(self):
        assert level_badges(4) == []
        assert level_badges(10) == ["LEVEL_5", "LEVEL_10"]


class TestBadges:
    def test_badge_codes_are_unique(self):
        codes = [badge.code for badge in BADGE_DEFINITIONS]
        assert len(codes) == len(set(codes))

    def test_earned_badges(self):
        stats = UserStats(total_sessions=4, present_sessions=4, attendance_streak=5, report_count=5, books_read=2)
        assert set(earned_badges(stats)) == {"ATTENDANCE_STREAK_5", "PERFECT_ATTENDANCE", "REPORT_WRITER_5"}

    def test_perfect_attendance_needs_enough_sessions(self):
        stats = UserStats(total_sessions=3, present_sessions=3)
        assert "PERFECT_ATTENDANCE" not in earned_badges(stats)

    def test_attendance_rate_rounds_half_up(self):
        assert UserStats(total_sessions=8, present_sessions=5).attendance_rate == 63
        assert UserStats().attendance_rate == 0


class TestAttendanceStreak:
    def test_empty(self):
        assert calculate_attendance_streak([]) == 0
        assert calculate_attendance_streak([None]) == 0

    def test_gap_over_two_weeks_breaks_streak(self):
        latest = datetime(2026, 5, 1)
        check_ins = [latest, latest - timedelta(days=7), latest - timedelta(days=14), latest - timedelta(days=30)]
        assert calculate_attendance_streak(check_ins) == 3

    def test_order_does_not_matter(self):
        base = datetime(2026, 5, 1)
        check_ins = [base - timedelta(days=7), base, base - timedelta(days=14)]
        assert calculate_attendance_streak(check_ins) == 3
