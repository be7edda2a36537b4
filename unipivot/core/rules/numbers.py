"""Rounding shared by the percentage and amount rules."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (62.5 -> 63, -2.5 -> -2)."""
    return math.floor(value + 0.5)
