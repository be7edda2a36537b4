"""
Program entity models.

Programs are the reading clubs, seminars and debates the organization runs.
Each program is split into dated sessions that members check in to.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field

from unipivot.core.models.domain.enums import ProgramStatus, ProgramType, RefundPolicyType

from ..base import Base, utc_now


class ProgramBase(Base):
    """Editable program fields."""

    title: str = Field(max_length=200)
    type: str = Field(default=ProgramType.bookclub.value, max_length=32, index=True)
    description: Optional[str] = Field(default=None)
    content: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None, max_length=500)
    capacity: int = Field(default=20, ge=0)
    fee: int = Field(default=0, ge=0)
    location: Optional[str] = Field(default=None, max_length=255)
    is_online: bool = Field(default=False)
    start_date: Optional[datetime] = Field(default=None, sa_type=DateTime)
    end_date: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # Deposit collected up front and refunded by attendance/report policy
    deposit_amount: int = Field(default=0, ge=0)
    refund_policy_type: str = Field(default=RefundPolicyType.attendance_only.value, max_length=32)
    survey_required: bool = Field(default=False)


class Program(ProgramBase, table=True):
    """Persistent program.

    Table: programs
    """

    __tablename__ = "programs"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(max_length=255, unique=True, index=True)
    status: str = Field(default=ProgramStatus.draft.value, max_length=16, index=True)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)

    def __repr__(self) -> str:
        return f"Program(id={self.id}, slug={self.slug}, status={self.status})"


class ProgramSession(Base, table=True):
    """A single dated meeting of a program.

    Table: program_sessions
    """

    __tablename__ = "program_sessions"
    __table_args__ = (
        UniqueConstraint("program_id", "session_no", name="uq_program_sessions_program_no"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    program_id: int = Field(foreign_key="programs.id", index=True, ondelete="CASCADE")
    session_no: int = Field(ge=1)
    title: Optional[str] = Field(default=None, max_length=200)
    starts_at: datetime = Field(sa_type=DateTime)
    ends_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    location: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
