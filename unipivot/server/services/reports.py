"""
Book report service.

Members write reports (earning report points and XP), submit them for review
and organizers approve or reject them. Approved reports count towards the
deposit refund of the program they belong to.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.programs import Program, ProgramSession
from unipivot.core.database.entities.reports import BookReport
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import AsyncQueryBuilder
from unipivot.core.exceptions import BusinessRuleError, NotFoundError, PermissionDeniedError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import PointCategory, ReportStatus, Visibility
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.content import BookReportCreate, BookReportReview, BookReportUpdate
from unipivot.core.rules.grades import can_write
from unipivot.server.core.config import settings

from .activity import ActivityAction, log_activity
from .badges import XP_REPORT, award_xp, check_and_award_badges
from .points import add_points

logger = get_logger(__name__)

REVIEW_OUTCOMES = (ReportStatus.approved, ReportStatus.rejected)


async def get_report_or_404(session: AsyncSession, report_id: int) -> BookReport:
    report = await session.get(BookReport, report_id)
    if report is None:
        raise NotFoundError(f"Book report {report_id} not found")
    return report


def _ensure_author(report: BookReport, user: User) -> None:
    if report.author_id != user.id:
        raise PermissionDeniedError("Only the author can modify this book report")


async def create_report(session: AsyncSession, author: User, data: BookReportCreate) -> BookReport:
    if not can_write("report", author.role):
        raise PermissionDeniedError("Only members can write book reports")
    if data.program_id is not None and await session.get(Program, data.program_id) is None:
        raise NotFoundError(f"Program {data.program_id} not found")
    if data.session_id is not None:
        program_session = await session.get(ProgramSession, data.session_id)
        if program_session is None or (data.program_id is not None and program_session.program_id != data.program_id):
            raise NotFoundError(f"Session {data.session_id} not found")

    report = BookReport(**column_values(data), author_id=author.id, status=ReportStatus.draft.value)
    session.add(report)
    await session.flush()

    if settings.points.report:
        description = f"독후감 작성: {data.book_title}"
        await add_points(session, author, settings.points.report, PointCategory.report, description)
    await award_xp(session, author.id, XP_REPORT)
    await check_and_award_badges(session, author.id)
    await session.commit()
    await session.refresh(report)
    logger.info(f"User {author.id} wrote book report {report.id}")
    return report


async def update_report(session: AsyncSession, user: User, report_id: int, data: BookReportUpdate) -> BookReport:
    report = await get_report_or_404(session, report_id)
    _ensure_author(report, user)
    for key, value in column_values(data, exclude_unset=True).items():
        setattr(report, key, value)
    session.add(report)
    await session.commit()
    await session.refresh(report)
    return report


async def delete_report(session: AsyncSession, user: User, report_id: int) -> None:
    report = await get_report_or_404(session, report_id)
    _ensure_author(report, user)
    await session.delete(report)
    await session.commit()


async def submit_report(session: AsyncSession, user: User, report_id: int) -> BookReport:
    """Send a draft or rejected report for review."""
    report = await get_report_or_404(session, report_id)
    _ensure_author(report, user)
    if report.status not in (ReportStatus.draft, ReportStatus.rejected):
        raise BusinessRuleError(f"A {report.status} report cannot be submitted")
    report.status = ReportStatus.submitted.value
    session.add(report)
    await log_activity(session, user.id, ActivityAction.REPORT_SUBMITTED, target="book_report", target_id=report.id)
    await session.commit()
    await session.refresh(report)
    return report


async def review_report(session: AsyncSession, reviewer: User, report_id: int, data: BookReportReview) -> BookReport:
    if data.status not in REVIEW_OUTCOMES:
        raise BusinessRuleError("Review status must be APPROVED or REJECTED")
    report = await get_report_or_404(session, report_id)
    if report.status != ReportStatus.submitted:
        raise BusinessRuleError("Only submitted reports can be reviewed")
    report.status = data.status.value
    report.review_note = data.review_note
    report.reviewed_by = reviewer.id
    report.reviewed_at = utc_now()
    session.add(report)
    await session.commit()
    await session.refresh(report)
    logger.info(f"Book report {report.id} {data.status.value} by user={reviewer.id}")
    return report


async def my_reports(session: AsyncSession, user: User) -> List[BookReport]:
    result = await session.execute(
        select(BookReport)
        .where(BookReport.author_id == user.id)
        .order_by(BookReport.created_at.desc(), BookReport.id.desc())
    )
    return list(result.scalars().all())


async def public_reports(
    session: AsyncSession, page: int = 1, limit: int = 20, program_id: Optional[int] = None
) -> Tuple[List[BookReport], int]:
    """PUBLIC reports that have left the draft stage."""
    conditions = [
        BookReport.visibility == Visibility.public.value,
        BookReport.status != ReportStatus.draft.value,
    ]
    if program_id is not None:
        conditions.append(BookReport.program_id == program_id)
    stmt = select(BookReport).where(*conditions).order_by(BookReport.created_at.desc(), BookReport.id.desc())
    stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_offset(page, limit))
    items = list((await session.execute(stmt)).scalars().all())
    total = (await session.execute(select(func.count(BookReport.id)).where(*conditions))).scalar_one()
    return items, total


async def list_reports_for_review(
    session: AsyncSession, status: ReportStatus = ReportStatus.submitted
) -> List[BookReport]:
    result = await session.execute(
        select(BookReport).where(BookReport.status == status.value).order_by(BookReport.created_at.asc())
    )
    return list(result.scalars().all())
