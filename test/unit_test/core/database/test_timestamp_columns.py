"""Timestamp columns store naive UTC values."""

from datetime import datetime

import pytest
from sqlalchemy import DateTime

from unipivot.core.database import Base
from unipivot.core.database import entities  # noqa: F401
from unipivot.core.database.base import as_naive_utc, utc_now

TIMESTAMP_COLUMNS = [
    column
    for table in Base.metadata.sorted_tables
    for column in table.columns
    if isinstance(column.type, DateTime) or column.name.endswith(("_at", "_date"))
]


def test_timestamp_columns_found():
    assert len(TIMESTAMP_COLUMNS) > 40


@pytest.mark.parametrize("column", TIMESTAMP_COLUMNS, ids=lambda c: f"{c.table.name}.{c.name}")
def test_timestamp_column_is_plain_naive_datetime(column):
    assert type(column.type) is DateTime
    assert column.type.timezone is False


def test_utc_now_is_naive():
    assert utc_now().tzinfo is None
    assert as_naive_utc(datetime.fromisoformat("2026-01-01T09:00:00+09:00")) == datetime(2026, 1, 1, 0, 0)
