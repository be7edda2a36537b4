"""
Program registration service.

Registrations are approved automatically while seats remain and queue as
PENDING once the program is full. Organizers process them individually or in
bulk; every status change is written to the activity log.
"""

from __future__ import annotations

import csv
import io
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.programs import Program
from unipivot.core.database.entities.registrations import Registration
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import AsyncQueryBuilder
from unipivot.core.exceptions import BusinessRuleError, ConflictError, NotFoundError, PermissionDeniedError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import DepositStatus, ProgramStatus, RegistrationStatus
from unipivot.core.rules.deposits import format_currency

from .activity import ActivityAction, log_activity
from .evaluation import check_participation_permission
from .programs import count_approved, get_program_or_404

logger = get_logger(__name__)

REGISTRATION_LABELS = {
    RegistrationStatus.pending.value: "검토중",
    RegistrationStatus.approved.value: "승인",
    RegistrationStatus.rejected.value: "거절",
    RegistrationStatus.waitlist.value: "대기",
    RegistrationStatus.cancelled.value: "취소",
}

DEPOSIT_LABELS = {
    DepositStatus.none.value: "-",
    DepositStatus.paid.value: "입금 완료",
    DepositStatus.refunded.value: "반환 완료",
    DepositStatus.forfeited.value: "몰수",
}

CSV_HEADER = ["이름", "이메일", "연락처", "출신", "신청 상태", "보증금", "신청 동기", "신청일"]


async def find_registration(session: AsyncSession, user_id: int, program_id: int) -> Optional[Registration]:
    result = await session.execute(
        select(Registration).where(Registration.user_id == user_id, Registration.program_id == program_id)
    )
    return result.scalars().first()


async def get_registration_or_404(session: AsyncSession, registration_id: int) -> Registration:
    registration = await session.get(Registration, registration_id)
    if registration is None:
        raise NotFoundError(f"Registration {registration_id} not found")
    return registration


async def register_for_program(
    session: AsyncSession, user: User, program_id: int, motivation: Optional[str] = None
) -> Registration:
    """
    Register a user for an OPEN program.

    A previously cancelled registration is reopened instead of creating a
    second row.

    Raises:
        NotFoundError: Program does not exist
        ConflictError: User already holds an active registration
        BusinessRuleError: Program is not open
        PermissionDeniedError: Participation is restricted or banned
    """
    program = await get_program_or_404(session, program_id)
    existing = await find_registration(session, user.id, program_id)
    if existing is not None and existing.status != RegistrationStatus.cancelled:
        raise ConflictError("Already registered for this program")
    if program.status != ProgramStatus.open:
        raise BusinessRuleError("Program is not open for registration")

    permission = await check_participation_permission(session, user.id, program_id)
    if not permission.allowed:
        detail = f": {permission.reason}" if permission.reason else ""
        raise PermissionDeniedError(f"Participation is {permission.status.value.lower()}{detail}")

    approved = await count_approved(session, program_id)
    status = RegistrationStatus.approved if approved < program.capacity else RegistrationStatus.pending

    registration = existing or Registration(user_id=user.id, program_id=program_id)
    registration.status = status.value
    registration.motivation = motivation
    registration.reject_reason = None
    registration.processed_by = None
    registration.processed_at = None
    session.add(registration)
    await session.flush()

    await log_activity(
        session,
        user.id,
        ActivityAction.PROGRAM_REGISTER,
        target="program",
        target_id=program_id,
        details={"registration_id": registration.id, "status": status.value},
    )
    await session.commit()
    await session.refresh(registration)
    logger.info(f"User {user.id} registered for program {program_id} as {status.value}")
    return registration


async def cancel_registration(session: AsyncSession, user: User, program_id: int) -> Registration:
    registration = await find_registration(session, user.id, program_id)
    if registration is None or registration.status == RegistrationStatus.cancelled:
        raise NotFoundError("Registration not found")
    registration.status = RegistrationStatus.cancelled.value
    session.add(registration)
    await log_activity(
        session, user.id, ActivityAction.PROGRAM_CANCEL, target="program", target_id=program_id
    )
    await session.commit()
    await session.refresh(registration)
    return registration


async def _apply_status(
    session: AsyncSession,
    registration: Registration,
    actor: User,
    status: RegistrationStatus,
    reason: Optional[str],
    note: Optional[str],
) -> None:
    registration.status = status.value
    registration.processed_by = actor.id
    registration.processed_at = utc_now()
    if status == RegistrationStatus.rejected:
        registration.reject_reason = reason
    if note is not None:
        registration.note = note
    session.add(registration)
    await log_activity(
        session,
        actor.id,
        ActivityAction.registration(status.value),
        target="registration",
        target_id=registration.id,
        details={"user_id": registration.user_id, "program_id": registration.program_id, "reason": reason},
    )


async def update_registration_status(
    session: AsyncSession,
    actor: User,
    registration_id: int,
    status: RegistrationStatus,
    reason: Optional[str] = None,
    note: Optional[str] = None,
) -> Registration:
    registration = await get_registration_or_404(session, registration_id)
    await _apply_status(session, registration, actor, status, reason, note)
    await session.commit()
    await session.refresh(registration)
    logger.info(f"Registration {registration_id} set to {status.value} by user={actor.id}")
    return registration


async def bulk_update_registration_status(
    session: AsyncSession,
    actor: User,
    registration_ids: Sequence[int],
    status: RegistrationStatus,
    reason: Optional[str] = None,
    note: Optional[str] = None,
) -> int:
    """Apply one status to many registrations; unknown ids are skipped."""
    result = await session.execute(select(Registration).where(Registration.id.in_(set(registration_ids))))
    registrations = list(result.scalars().all())
    for registration in registrations:
        await _apply_status(session, registration, actor, status, reason, note)
    await session.commit()
    logger.info(f"Bulk set {len(registrations)} registrations to {status.value} by user={actor.id}")
    return len(registrations)


async def confirm_deposit_paid(session: AsyncSession, actor: User, registration_id: int) -> Registration:
    registration = await get_registration_or_404(session, registration_id)
    program = await get_program_or_404(session, registration.program_id)
    if program.deposit_amount <= 0:
        raise BusinessRuleError("Program does not collect a deposit")
    if registration.deposit_status != DepositStatus.none:
        raise BusinessRuleError(f"Deposit is already {registration.deposit_status}")

    registration.deposit_status = DepositStatus.paid.value
    registration.deposit_paid_at = utc_now()
    session.add(registration)
    await log_activity(
        session,
        actor.id,
        ActivityAction.DEPOSIT_PAID,
        target="registration",
        target_id=registration.id,
        details={"amount": program.deposit_amount},
    )
    await session.commit()
    await session.refresh(registration)
    return registration


async def status_counts(session: AsyncSession, program_id: int) -> Dict[str, int]:
    stmt = (
        select(Registration.status, func.count(Registration.id))
        .where(Registration.program_id == program_id)
        .group_by(Registration.status)
    )
    counts = {status.value: 0 for status in RegistrationStatus}
    for status, count in (await session.execute(stmt)).all():
        counts[status] = count
    return counts


async def list_program_registrations(
    session: AsyncSession,
    program_id: int,
    status: Optional[RegistrationStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Registration], int, Dict[str, int]]:
    await get_program_or_404(session, program_id)
    conditions = [Registration.program_id == program_id]
    if status is not None:
        conditions.append(Registration.status == status.value)

    stmt = select(Registration).where(*conditions).order_by(Registration.created_at.asc(), Registration.id.asc())
    stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_offset(page, limit))
    items = list((await session.execute(stmt)).scalars().all())
    total = (
        await session.execute(select(func.count(Registration.id)).where(*conditions))
    ).scalar_one()
    return items, total, await status_counts(session, program_id)


async def my_registrations(session: AsyncSession, user: User) -> List[Registration]:
    result = await session.execute(
        select(Registration)
        .where(Registration.user_id == user.id)
        .order_by(Registration.created_at.desc(), Registration.id.desc())
    )
    return list(result.scalars().all())


async def export_registrations_csv(session: AsyncSession, program_id: int) -> Tuple[Program, str]:
    """Registrations of a program as CSV text with Korean headers and labels."""
    program = await get_program_or_404(session, program_id)
    result = await session.execute(
        select(Registration, User)
        .join(User, User.id == Registration.user_id)
        .where(Registration.program_id == program_id)
        .order_by(Registration.created_at.asc(), Registration.id.asc())
    )

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for registration, user in result.all():
        deposit = DEPOSIT_LABELS.get(registration.deposit_status, registration.deposit_status)
        if registration.deposit_status != DepositStatus.none:
            deposit = f"{deposit} ({format_currency(program.deposit_amount)})"
        writer.writerow(
            [
                user.name,
                user.email,
                user.phone or "",
                user.origin or "",
                REGISTRATION_LABELS.get(registration.status, registration.status),
                deposit,
                registration.motivation or "",
                registration.created_at.strftime("%Y-%m-%d %H:%M"),
            ]
        )
    return program, buffer.getvalue()
