"""
Deposit refund service.

Refund amounts are computed from stored attendance, approved book reports and
the registration's survey flag using ``unipivot.core.rules.deposits``.
"""

from __future__ import annotations

from typing import List

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.programs import Program, ProgramSession
from unipivot.core.database.entities.registrations import Attendance, Registration
from unipivot.core.database.entities.reports import BookReport
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import BusinessRuleError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import AttendanceStatus, DepositStatus, RegistrationStatus, ReportStatus
from unipivot.core.models.io.programs import RefundEligibility, RefundPolicyRead
from unipivot.core.rules.deposits import (
    DepositCalculationInput,
    calculate_refund,
    format_currency,
    get_refund_status_label,
)

from .activity import ActivityAction, log_activity
from .programs import get_program_or_404
from .registrations import get_registration_or_404

logger = get_logger(__name__)

ATTENDED = (AttendanceStatus.present.value, AttendanceStatus.late.value, AttendanceStatus.excused.value)


async def _count(session: AsyncSession, stmt) -> int:
    return (await session.execute(stmt)).scalar_one()


async def refund_eligibility(session: AsyncSession, program: Program, registration: Registration) -> RefundEligibility:
    total_sessions = await _count(
        session, select(func.count(ProgramSession.id)).where(ProgramSession.program_id == program.id)
    )
    attended_sessions = await _count(
        session,
        select(func.count(Attendance.id))
        .join(ProgramSession, ProgramSession.id == Attendance.session_id)
        .where(
            ProgramSession.program_id == program.id,
            Attendance.user_id == registration.user_id,
            Attendance.status.in_(ATTENDED),
        ),
    )
    report_filter = (BookReport.program_id == program.id, BookReport.author_id == registration.user_id)
    submitted_reports = await _count(
        session,
        select(func.count(BookReport.id)).where(
            *report_filter,
            BookReport.status.in_((ReportStatus.submitted.value, ReportStatus.approved.value)),
        ),
    )
    approved_reports = await _count(
        session,
        select(func.count(BookReport.id)).where(*report_filter, BookReport.status == ReportStatus.approved.value),
    )

    result = calculate_refund(
        DepositCalculationInput(
            deposit_amount=program.deposit_amount,
            refund_policy_type=program.refund_policy_type,
            total_sessions=total_sessions,
            attended_sessions=attended_sessions,
            submitted_reports=submitted_reports,
            approved_reports=approved_reports,
            survey_submitted=registration.survey_submitted,
            survey_required=program.survey_required,
            attended=attended_sessions > 0,
        )
    )

    refund_amount = result.refund_amount
    refund_rate = result.refund_rate
    eligible = result.eligible
    ineligible_reason = result.ineligible_reason
    if registration.deposit_status == DepositStatus.forfeited:
        refund_amount, refund_rate, eligible = 0, 0, False
        ineligible_reason = "경고 누적으로 보증금이 몰수되었습니다."
    elif program.deposit_amount <= 0:
        eligible = False
        ineligible_reason = "보증금이 없는 프로그램입니다."

    status = get_refund_status_label(refund_rate)
    matched = result.matched_policy
    return RefundEligibility(
        registration_id=registration.id,
        user_id=registration.user_id,
        deposit_amount=program.deposit_amount,
        deposit_status=registration.deposit_status,
        total_sessions=total_sessions,
        attended_sessions=attended_sessions,
        approved_reports=approved_reports,
        attendance_rate=result.attendance_rate,
        report_rate=result.report_rate,
        refund_rate=refund_rate,
        refund_amount=refund_amount,
        formatted_amount=format_currency(refund_amount),
        eligible=eligible,
        reason=result.reason,
        ineligible_reason=ineligible_reason,
        status_label=status["label"],
        status_color=status["color"],
        matched_policy=(
            RefundPolicyRead(
                min_attendance=matched.min_attendance,
                min_report=matched.min_report,
                refund_rate=matched.refund_rate,
                label=matched.label,
            )
            if matched
            else None
        ),
    )


async def program_refund_status(session: AsyncSession, program_id: int) -> List[RefundEligibility]:
    """Refund eligibility of every approved participant of a program."""
    program = await get_program_or_404(session, program_id)
    result = await session.execute(
        select(Registration)
        .where(Registration.program_id == program_id, Registration.status == RegistrationStatus.approved.value)
        .order_by(Registration.id.asc())
    )
    return [await refund_eligibility(session, program, registration) for registration in result.scalars().all()]


async def process_refund(session: AsyncSession, actor: User, registration_id: int) -> Registration:
    """Record the computed refund and mark the deposit REFUNDED."""
    registration = await get_registration_or_404(session, registration_id)
    if registration.deposit_status == DepositStatus.forfeited:
        raise BusinessRuleError("Deposit was forfeited and cannot be refunded")
    if registration.deposit_status != DepositStatus.paid:
        raise BusinessRuleError("Deposit has not been paid")

    program = await get_program_or_404(session, registration.program_id)
    eligibility = await refund_eligibility(session, program, registration)

    registration.refund_amount = eligibility.refund_amount
    registration.deposit_status = DepositStatus.refunded.value
    registration.refunded_at = utc_now()
    session.add(registration)
    await log_activity(
        session,
        actor.id,
        ActivityAction.DEPOSIT_REFUNDED,
        target="registration",
        target_id=registration.id,
        details={"amount": eligibility.refund_amount, "rate": eligibility.refund_rate},
    )
    await session.commit()
    await session.refresh(registration)
    logger.info(f"Refunded {eligibility.refund_amount} for registration {registration.id}")
    return registration
