"""
Donation Endpoints.

Anyone can pledge a donation; administrators confirm payment, which credits
thank-you points to signed-in donors, and donors download their receipt.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.domain.enums import DonationStatus
from unipivot.core.models.io.donations import (
    DonationCreate,
    DonationListResponse,
    DonationRead,
    DonationReceipt,
    DonationStatusUpdate,
    DonationSummary,
)
from unipivot.server.deps import get_current_user, get_optional_user, require_admin
from unipivot.server.services import donations as donation_service

router = APIRouter(tags=["donations"])


@router.post(
    "",
    response_model=DonationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Donation",
    description="Record a PENDING donation. Signing in is optional; anonymous donors give a name and email.",
    response_description="The recorded donation.",
    responses={201: {"description": "Donation recorded"}, 422: {"description": "Invalid amount"}},
)
async def create_donation(
    data: DonationCreate,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> DonationRead:
    """
    Pledge a donation.

    - **amount**: Amount in KRW, greater than zero.
    - **type**: ONE_TIME or REGULAR.
    - **method**: CARD or BANK_TRANSFER.
    - **anonymous**: Hide the donor name in public listings.
    """
    donation = await donation_service.create_donation(session, data, user)
    return DonationRead.model_validate(donation)


@router.get(
    "/me",
    response_model=List[DonationRead],
    summary="My Donations",
)
async def my_donations(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> List[DonationRead]:
    donations = await donation_service.my_donations(session, current_user)
    return [DonationRead.model_validate(d) for d in donations]


@router.get(
    "/summary",
    response_model=DonationSummary,
    summary="Donation Summary",
    description="Total and count of completed donations, and the number still pending.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def summary(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> DonationSummary:
    return await donation_service.donation_summary(session)


@router.get(
    "",
    response_model=DonationListResponse,
    summary="List Donations",
    description="Donations newest first, with the completed summary.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_donations(
    status_filter: Optional[DonationStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> DonationListResponse:
    items, total = await donation_service.list_donations(session, status_filter, page, limit)
    return DonationListResponse(
        items=[DonationRead.model_validate(d) for d in items],
        total=total,
        page=page,
        limit=limit,
        summary=await donation_service.donation_summary(session),
    )


@router.patch(
    "/{donation_id}/status",
    response_model=DonationRead,
    summary="Update Donation Status",
    description="Confirm, cancel or refund a donation. The first confirmation credits donation points.",
    responses={403: {"description": "ADMIN grade required"}, 404: {"description": "Donation not found"}},
)
async def update_status(
    donation_id: int,
    data: DonationStatusUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> DonationRead:
    donation = await donation_service.update_donation_status(session, donation_id, data.status)
    return DonationRead.model_validate(donation)


@router.post(
    "/{donation_id}/receipt",
    response_model=DonationReceipt,
    summary="Issue Receipt",
    description=(
        "Issue the donation receipt of a completed donation. The receipt number is generated once "
        "and reused on later requests."
    ),
    responses={
        400: {"description": "Donation not completed"},
        403: {"description": "Not the donor"},
        404: {"description": "Donation not found"},
    },
)
async def issue_receipt(
    donation_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DonationReceipt:
    return await donation_service.issue_receipt(session, current_user, donation_id)
