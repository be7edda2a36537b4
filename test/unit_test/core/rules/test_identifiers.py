"""Unit tests for slugs and receipt numbers."""

import re
import time
from datetime import datetime, timezone

import pytest

from unipivot.core.rules.identifiers import generate_receipt_number, generate_slug, to_base36

NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
NOW_MILLIS = int(NOW.timestamp() * 1000)


class TestBase36:
    def test_known_values(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "z"
        assert to_base36(36) == "10"

    def test_negative_values_are_rejected(self):
        with pytest.raises(ValueError):
            to_base36(-1)


class TestSlug:
    def test_ascii_title_gets_timestamp_suffix(self):
        slug = generate_slug("Spring Book Club 2026!", NOW)
        assert slug == f"spring-book-club-2026-{to_base36(NOW_MILLIS)}"

    def test_non_ascii_characters_are_dropped(self):
        slug = generate_slug("독서모임 Season 3", NOW)
        assert slug.startswith("season-3-")

    def test_title_without_ascii_falls_back_to_prefix(self):
        assert generate_slug("독서모임", NOW) == f"program-{NOW_MILLIS}"
        assert generate_slug("공지", NOW, prefix="post") == f"post-{NOW_MILLIS}"


class TestReceiptNumber:
    def test_format(self):
        number = generate_receipt_number(1234567, NOW)
        assert re.fullmatch(r"2026-[0-9A-Z]+-234567", number)

    def test_explicit_year(self):
        assert generate_receipt_number(7, NOW, year=2025).startswith("2025-")


class TestNaiveTimestamps:
    def test_naive_value_is_read_as_utc(self, monkeypatch):
        monkeypatch.setenv("TZ", "Asia/Seoul")
        if hasattr(time, "tzset"):
            time.tzset()
        try:
            naive = NOW.replace(tzinfo=None)
            assert generate_slug("Book Club", naive) == generate_slug("Book Club", NOW)
            assert generate_receipt_number(1, naive) == generate_receipt_number(1, NOW)
        finally:
            monkeypatch.undo()
            if hasattr(time, "tzset"):
                time.tzset()
