"""
Donation service: pledges, status changes, donor points and receipts.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.donations import Donation
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import AsyncQueryBuilder
from unipivot.core.exceptions import BusinessRuleError, NotFoundError, PermissionDeniedError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import DonationStatus, PointCategory
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.donations import DonationCreate, DonationReceipt, DonationSummary
from unipivot.core.rules.deposits import format_currency
from unipivot.core.rules.grades import is_admin
from unipivot.core.rules.identifiers import generate_receipt_number
from unipivot.server.core.config import settings

from .activity import ActivityAction, log_activity
from .points import add_points

logger = get_logger(__name__)


async def get_donation_or_404(session: AsyncSession, donation_id: int) -> Donation:
    donation = await session.get(Donation, donation_id)
    if donation is None:
        raise NotFoundError(f"Donation {donation_id} not found")
    return donation


async def create_donation(session: AsyncSession, data: DonationCreate, user: Optional[User] = None) -> Donation:
    """Record a PENDING donation; anonymous donors are allowed."""
    donation = Donation(**column_values(data), status=DonationStatus.pending.value)
    if user is not None:
        donation.user_id = user.id
        donation.donor_name = data.donor_name or user.name
        donation.donor_email = data.donor_email or user.email
    session.add(donation)
    await session.flush()
    if user is not None:
        await log_activity(
            session,
            user.id,
            ActivityAction.DONATION,
            target="donation",
            target_id=donation.id,
            details={"amount": donation.amount, "type": donation.type},
        )
    await session.commit()
    await session.refresh(donation)
    logger.info(f"Donation {donation.id} of {donation.amount} recorded")
    return donation


async def my_donations(session: AsyncSession, user: User) -> List[Donation]:
    result = await session.execute(
        select(Donation).where(Donation.user_id == user.id).order_by(Donation.created_at.desc(), Donation.id.desc())
    )
    return list(result.scalars().all())


async def donation_summary(session: AsyncSession) -> DonationSummary:
    completed = (
        await session.execute(
            select(func.coalesce(func.sum(Donation.amount), 0), func.count(Donation.id)).where(
                Donation.status == DonationStatus.completed.value
            )
        )
    ).one()
    pending = (
        await session.execute(
            select(func.count(Donation.id)).where(Donation.status == DonationStatus.pending.value)
        )
    ).scalar_one()
    return DonationSummary(completed_total=int(completed[0]), completed_count=completed[1], pending_count=pending)


async def list_donations(
    session: AsyncSession, status: Optional[DonationStatus] = None, page: int = 1, limit: int = 20
) -> Tuple[List[Donation], int]:
    conditions = [Donation.status == status.value] if status is not None else []
    stmt = select(Donation).where(*conditions).order_by(Donation.created_at.desc(), Donation.id.desc())
    stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_offset(page, limit))
    items = list((await session.execute(stmt)).scalars().all())
    total = (await session.execute(select(func.count(Donation.id)).where(*conditions))).scalar_one()
    return items, total


async def update_donation_status(session: AsyncSession, donation_id: int, status: DonationStatus) -> Donation:
    """
    Change the status of a donation.

    The first transition to COMPLETED credits ``points.donation_rate`` of the
    amount to the signed-in donor.
    """
    donation = await get_donation_or_404(session, donation_id)
    completing = status == DonationStatus.completed and donation.status != DonationStatus.completed
    donation.status = status.value
    session.add(donation)

    if completing and donation.user_id is not None:
        points = int(donation.amount * settings.points.donation_rate)
        donor = await session.get(User, donation.user_id)
        if donor is not None and points > 0:
            description = f"후원 감사 포인트 ({format_currency(donation.amount)})"
            await add_points(session, donor, points, PointCategory.donation, description)
    await session.commit()
    await session.refresh(donation)
    return donation


async def issue_receipt(session: AsyncSession, user: User, donation_id: int) -> DonationReceipt:
    """Issue (or re-issue) the donation receipt of a COMPLETED donation."""
    donation = await get_donation_or_404(session, donation_id)
    if donation.user_id != user.id and not is_admin(user.role):
        raise PermissionDeniedError("Receipts can only be issued to the donor")
    if donation.status != DonationStatus.completed:
        raise BusinessRuleError("Receipts are only issued for completed donations")

    if donation.receipt_number is None:
        now = utc_now()
        donation.receipt_number = generate_receipt_number(donation.id, now)
        donation.receipt_issued_at = now
        session.add(donation)
        await session.commit()
        await session.refresh(donation)
        logger.info(f"Issued receipt {donation.receipt_number} for donation {donation.id}")

    organization = settings.organization
    return DonationReceipt(
        donation_id=donation.id,
        receipt_number=donation.receipt_number,
        issued_at=donation.receipt_issued_at,
        donor_name=donation.donor_name or "익명",
        donor_email=donation.donor_email,
        amount=donation.amount,
        formatted_amount=format_currency(donation.amount),
        donation_type=donation.type,
        donation_date=donation.created_at,
        organization_name=organization.name,
        organization_registration_number=organization.registration_number,
        organization_representative=organization.representative,
        organization_address=organization.address,
        organization_contact=organization.contact_email,
    )
