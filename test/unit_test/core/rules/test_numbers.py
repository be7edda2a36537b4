"""Unit tests for half-up rounding."""

import pytest

from unipivot.core.rules.numbers import round_half_up


@pytest.mark.parametrize(
    "value,expected",
    [(62.5, 63), (12.5, 13), (22.5, 23), (0.5, 1), (2.4999, 2), (-2.5, -2), (100.0, 100)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_result_is_int():
    assert isinstance(round_half_up(1.5), int)
