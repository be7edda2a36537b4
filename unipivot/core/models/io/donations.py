"""
Donation and point I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from unipivot.core.models.domain.enums import (
    DonationMethod,
    DonationStatus,
    DonationType,
    PointCategory,
    PointType,
)


class DonationCreate(BaseModel):
    amount: int = Field(gt=0, description="Amount in KRW")
    type: DonationType = DonationType.one_time
    method: DonationMethod = DonationMethod.card
    message: Optional[str] = None
    anonymous: bool = False
    donor_name: Optional[str] = Field(default=None, max_length=100, description="Used when not signed in")
    donor_email: Optional[str] = Field(default=None, max_length=255)


class DonationRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    donor_name: Optional[str] = None
    amount: int
    type: DonationType
    method: DonationMethod
    message: Optional[str] = None
    anonymous: bool
    status: DonationStatus
    receipt_number: Optional[str] = None
    receipt_issued_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class DonationStatusUpdate(BaseModel):
    status: DonationStatus


class DonationSummary(BaseModel):
    completed_total: int
    completed_count: int
    pending_count: int


class DonationListResponse(BaseModel):
    items: List[DonationRead]
    total: int
    page: int
    limit: int
    summary: DonationSummary


class DonationReceipt(BaseModel):
    donation_id: int
    receipt_number: str
    issued_at: datetime
    donor_name: str
    donor_email: Optional[str] = None
    amount: int
    formatted_amount: str
    donation_type: DonationType
    donation_date: datetime
    organization_name: str
    organization_registration_number: Optional[str] = None
    organization_representative: Optional[str] = None
    organization_address: Optional[str] = None
    organization_contact: Optional[str] = None


class PointHistoryRead(BaseModel):
    id: int
    user_id: int
    amount: int
    type: PointType
    category: PointCategory
    description: str
    balance: int
    created_at: datetime

    class Config:
        from_attributes = True


class PointsSummary(BaseModel):
    balance: int
    earned_this_month: int
    spent_this_month: int


class PointAdjustment(BaseModel):
    """Admin point grant (positive) or deduction (negative)."""

    amount: int = Field(description="Signed amount, must not be zero")
    description: str = Field(min_length=1, max_length=255)
    category: PointCategory = PointCategory.admin
