"""
Point ledger entity model.

Append-only ledger of point changes. ``balance`` snapshots the user's balance
right after the entry was applied.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class PointHistory(Base, table=True):
    """One point earn/spend entry.

    Table: point_histories
    """

    __tablename__ = "point_histories"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    amount: int = Field(description="Signed amount, negative for spending")
    type: str = Field(max_length=8)
    category: str = Field(max_length=16, index=True)
    description: str = Field(max_length=255)
    balance: int = Field(description="Balance after this entry")
    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)

    def __repr__(self) -> str:
        return f"PointHistory(id={self.id}, user_id={self.user_id}, amount={self.amount}, balance={self.balance})"
