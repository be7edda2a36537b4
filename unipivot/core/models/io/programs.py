"""
Program, session, registration and attendance I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from unipivot.core.models.domain.enums import (
    AttendanceStatus,
    DepositStatus,
    ProgramStatus,
    ProgramType,
    RefundPolicyType,
    RegistrationStatus,
)

from .common import UTCDateTime


class ProgramCreate(BaseModel):
    """Schema for creating a program. New programs start as DRAFT."""

    title: str = Field(min_length=1, max_length=200)
    type: ProgramType = ProgramType.bookclub
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    capacity: int = Field(default=20, ge=0)
    fee: int = Field(default=0, ge=0)
    location: Optional[str] = None
    is_online: bool = False
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    deposit_amount: int = Field(default=0, ge=0)
    refund_policy_type: RefundPolicyType = RefundPolicyType.attendance_only
    survey_required: bool = False


class ProgramUpdate(BaseModel):
    """Schema for partially updating a program, including its status."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[ProgramType] = None
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    fee: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None
    is_online: Optional[bool] = None
    status: Optional[ProgramStatus] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    deposit_amount: Optional[int] = Field(default=None, ge=0)
    refund_policy_type: Optional[RefundPolicyType] = None
    survey_required: Optional[bool] = None


class ProgramRead(BaseModel):
    id: int
    title: str
    slug: str
    type: ProgramType
    status: ProgramStatus
    description: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    capacity: int
    fee: int
    location: Optional[str] = None
    is_online: bool
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    deposit_amount: int
    refund_policy_type: RefundPolicyType
    survey_required: bool
    created_at: datetime

    class Config:
        from_attributes = True


class ProgramDetail(ProgramRead):
    """Program with live registration figures."""

    approved_count: int = 0
    remaining_seats: int = 0


class ProgramCompletion(BaseModel):
    program: ProgramRead
    completed_participants: int
    promoted_members: int


class SessionCreate(BaseModel):
    session_no: int = Field(ge=1)
    title: Optional[str] = None
    starts_at: UTCDateTime
    ends_at: Optional[UTCDateTime] = None
    location: Optional[str] = None


class SessionUpdate(BaseModel):
    title: Optional[str] = None
    starts_at: Optional[UTCDateTime] = None
    ends_at: Optional[UTCDateTime] = None
    location: Optional[str] = None


class SessionRead(BaseModel):
    id: int
    program_id: int
    session_no: int
    title: Optional[str] = None
    starts_at: datetime
    ends_at: Optional[datetime] = None
    location: Optional[str] = None

    class Config:
        from_attributes = True


class RegistrationCreate(BaseModel):
    motivation: Optional[str] = None


class RegistrationRead(BaseModel):
    id: int
    user_id: int
    program_id: int
    status: RegistrationStatus
    motivation: Optional[str] = None
    note: Optional[str] = None
    reject_reason: Optional[str] = None
    processed_by: Optional[int] = None
    processed_at: Optional[datetime] = None
    deposit_status: DepositStatus
    deposit_paid_at: Optional[datetime] = None
    refund_amount: Optional[int] = None
    refunded_at: Optional[datetime] = None
    survey_submitted: bool
    created_at: datetime

    class Config:
        from_attributes = True


class RegistrationStatusUpdate(BaseModel):
    """Approve, reject, waitlist or cancel a registration."""

    status: RegistrationStatus
    reason: Optional[str] = Field(default=None, description="Rejection reason")
    note: Optional[str] = Field(default=None, description="Organizer note")


class BulkRegistrationStatusUpdate(RegistrationStatusUpdate):
    ids: List[int] = Field(min_length=1)


class BulkUpdateResult(BaseModel):
    updated: int


class RegistrationListResponse(BaseModel):
    items: List[RegistrationRead]
    total: int
    page: int
    limit: int
    status_counts: Dict[str, int]


class AttendanceRead(BaseModel):
    id: int
    session_id: int
    user_id: int
    status: AttendanceStatus
    checked_at: Optional[datetime] = None
    late_minutes: Optional[int] = None
    note: Optional[str] = None

    class Config:
        from_attributes = True


class CheckInResponse(BaseModel):
    attendance: AttendanceRead
    message: str
    points_awarded: int = 0


class AttendanceMark(BaseModel):
    """Organizer-recorded attendance."""

    user_id: int
    status: AttendanceStatus
    note: Optional[str] = None


class AttendanceStatsRead(BaseModel):
    total: int
    present: int
    late: int
    absent: int
    excused: int
    attendance_rate: int


class MyAttendanceResponse(BaseModel):
    records: List[AttendanceRead]
    stats: AttendanceStatsRead


class RefundPolicyRead(BaseModel):
    min_attendance: int
    min_report: Optional[int] = None
    refund_rate: int
    label: str


class RefundEligibility(BaseModel):
    registration_id: int
    user_id: int
    deposit_amount: int
    deposit_status: DepositStatus
    total_sessions: int
    attended_sessions: int
    approved_reports: int
    attendance_rate: int
    report_rate: int
    refund_rate: int
    refund_amount: int
    formatted_amount: str
    eligible: bool
    reason: str
    ineligible_reason: Optional[str] = None
    status_label: str
    status_color: str
    matched_policy: Optional[RefundPolicyRead] = None


class CheckInWindow(BaseModel):
    session_id: int
    opens_at: datetime
    closes_at: datetime
    is_open: bool
    remaining_seconds: int


class RefundProcessResult(BaseModel):
    registration: RegistrationRead
    formatted_amount: str
