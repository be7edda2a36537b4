"""
Registration and attendance entity models.

A registration ties a user to a program and carries the approval workflow and
the deposit lifecycle. Attendance rows record one check-in per session.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import Field

from unipivot.core.models.domain.enums import AttendanceStatus, DepositStatus, RegistrationStatus

from ..base import Base, utc_now


class Registration(Base, table=True):
    """Application of a user to a program.

    Table: registrations
    """

    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("user_id", "program_id", name="uq_registrations_user_program"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    program_id: int = Field(foreign_key="programs.id", index=True, ondelete="CASCADE")

    status: str = Field(default=RegistrationStatus.pending.value, max_length=16, index=True)
    motivation: Optional[str] = Field(default=None)
    note: Optional[str] = Field(default=None, description="Organizer note on approval")
    reject_reason: Optional[str] = Field(default=None)
    processed_by: Optional[int] = Field(default=None, foreign_key="users.id", ondelete="SET NULL")
    processed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # Deposit lifecycle
    deposit_status: str = Field(default=DepositStatus.none.value, max_length=16)
    deposit_paid_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    refund_amount: Optional[int] = Field(default=None)
    refunded_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    survey_submitted: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=DateTime)

    def __repr__(self) -> str:
        return f"Registration(id={self.id}, user_id={self.user_id}, program_id={self.program_id}, status={self.status})"


class Attendance(Base, table=True):
    """Check-in record for one user in one session.

    Table: attendances
    """

    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("session_id", "user_id", name="uq_attendances_session_user"),
        {"extend_existing": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: int = Field(foreign_key="program_sessions.id", index=True, ondelete="CASCADE")
    user_id: int = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    status: str = Field(default=AttendanceStatus.present.value, max_length=16)
    checked_at: Optional[datetime] = Field(default=None, sa_type=DateTime)
    late_minutes: Optional[int] = Field(default=None)
    note: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime)
