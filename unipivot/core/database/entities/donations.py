"""Donation entity model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from unipivot.core.models.domain.enums import DonationMethod, DonationStatus, DonationType

from ..base import Base, utc_now


class Donation(Base, table=True):
    """A donation, optionally linked to a signed-in donor.

    Table: donations
    """

    __tablename__ = "donations"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True, ondelete="SET NULL")
    donor_name: Optional[str] = Field(default=None, max_length=100)
    donor_email: Optional[str] = Field(default=None, max_length=255)

    amount: int = Field(gt=0)
    type: str = Field(default=DonationType.one_time.value, max_length=16)
    method: str = Field(default=DonationMethod.card.value, max_length=16)
    message: Optional[str] = Field(default=None)
    anonymous: bool = Field(default=False)
    status: str = Field(default=DonationStatus.pending.value, max_length=16, index=True)

    receipt_number: Optional[str] = Field(default=None, max_length=64, unique=True)
    receipt_issued_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)

    def __repr__(self) -> str:
        return f"Donation(id={self.id}, amount={self.amount}, status={self.status})"
