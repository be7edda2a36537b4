"""Human readable identifiers: URL slugs and donation receipt numbers."""

from __future__ import annotations

import re
import string
from datetime import datetime, timezone
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def _millis(now: datetime) -> int:
    # naive values are UTC, never local time
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return int(now.timestamp() * 1000)


def generate_slug(title: str, now: datetime, prefix: str = "program") -> str:
    """
    Build a URL slug from a title.

    Non-ASCII characters (Hangul titles are common) are dropped; a base36
    timestamp suffix keeps slugs unique. Titles without any ASCII letters or
    digits fall back to ``<prefix>-<millis>``.
    """
    slug = _NON_SLUG.sub("-", title.lower()).strip("-")
    if not slug:
        return f"{prefix}-{_millis(now)}"
    return f"{slug}-{to_base36(_millis(now))}"


def generate_receipt_number(donation_id: int | str, now: datetime, year: Optional[int] = None) -> str:
    """Receipt number in the form ``YYYY-<BASE36 TIMESTAMP>-<LAST 6 OF ID>``."""
    short_id = str(donation_id)[-6:].upper()
    return f"{year or now.year}-{to_base36(_millis(now)).upper()}-{short_id}"
