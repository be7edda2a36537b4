"""
Book Report Endpoints.

Members write book reports, optionally tied to a program session, and submit
them for review. Staff approve or reject submitted reports; approved reports
count towards the deposit refund.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import NotFoundError
from unipivot.core.models.domain.enums import ReportStatus, Visibility
from unipivot.core.models.io.common import Page
from unipivot.core.models.io.content import (
    BookReportCreate,
    BookReportRead,
    BookReportReview,
    BookReportUpdate,
)
from unipivot.core.rules.grades import is_staff
from unipivot.server.deps import get_current_user, get_optional_user, require_staff
from unipivot.server.services import reports as report_service

router = APIRouter(tags=["reports"])


@router.post(
    "",
    response_model=BookReportRead,
    status_code=status.HTTP_201_CREATED,
    summary="Write Book Report",
    description="Create a DRAFT book report. Requires the MEMBER grade and earns report points.",
    responses={
        201: {"description": "Report created"},
        403: {"description": "MEMBER grade required"},
        404: {"description": "Program or session not found"},
    },
)
async def create_report(
    data: BookReportCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> BookReportRead:
    """
    Write a book report.

    - **book_title** / **book_author**: The book.
    - **title** / **content**: The report itself.
    - **visibility**: PUBLIC reports appear in the public listing once submitted.
    - **program_id** / **session_id**: Link to the program session it belongs to.
    """
    report = await report_service.create_report(session, current_user, data)
    return BookReportRead.model_validate(report)


@router.get(
    "",
    response_model=Page[BookReportRead],
    summary="List Public Book Reports",
    description="PUBLIC reports that are no longer drafts, newest first.",
)
async def list_public_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    program_id: Optional[int] = None,
    session: AsyncSession = Depends(get_session),
) -> Page[BookReportRead]:
    items, total = await report_service.public_reports(session, page, limit, program_id)
    return Page[BookReportRead](
        items=[BookReportRead.model_validate(r) for r in items], total=total, page=page, limit=limit
    )


@router.get("/me", response_model=List[BookReportRead], summary="My Book Reports")
async def my_reports(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> List[BookReportRead]:
    reports = await report_service.my_reports(session, current_user)
    return [BookReportRead.model_validate(r) for r in reports]


@router.get(
    "/review-queue",
    response_model=List[BookReportRead],
    summary="Review Queue",
    description="Reports waiting for review (or with another status), oldest first.",
    responses={403: {"description": "STAFF grade required"}},
)
async def review_queue(
    status_filter: ReportStatus = Query(ReportStatus.submitted, alias="status"),
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> List[BookReportRead]:
    reports = await report_service.list_reports_for_review(session, status_filter)
    return [BookReportRead.model_validate(r) for r in reports]


@router.get(
    "/{report_id}",
    response_model=BookReportRead,
    summary="Get Book Report",
    description="Private reports and drafts are only visible to their author and staff.",
    responses={404: {"description": "Report not found"}},
)
async def get_report(
    report_id: int,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> BookReportRead:
    report = await report_service.get_report_or_404(session, report_id)
    publicly_visible = report.visibility == Visibility.public and report.status != ReportStatus.draft
    privileged = user is not None and (user.id == report.author_id or is_staff(user.role))
    if not (publicly_visible or privileged):
        raise NotFoundError(f"Book report {report_id} not found")
    return BookReportRead.model_validate(report)


@router.patch(
    "/{report_id}",
    response_model=BookReportRead,
    summary="Update Book Report",
    responses={403: {"description": "Not the author"}, 404: {"description": "Report not found"}},
)
async def update_report(
    report_id: int,
    data: BookReportUpdate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> BookReportRead:
    report = await report_service.update_report(session, current_user, report_id, data)
    return BookReportRead.model_validate(report)


@router.delete(
    "/{report_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Book Report",
    responses={
        204: {"description": "Report deleted"},
        403: {"description": "Not the author"},
        404: {"description": "Report not found"},
    },
)
async def delete_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> None:
    await report_service.delete_report(session, current_user, report_id)


@router.post(
    "/{report_id}/submit",
    response_model=BookReportRead,
    summary="Submit Book Report",
    description="Send a draft or rejected report for review.",
    responses={400: {"description": "Report already submitted or approved"}, 403: {"description": "Not the author"}},
)
async def submit_report(
    report_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> BookReportRead:
    report = await report_service.submit_report(session, current_user, report_id)
    return BookReportRead.model_validate(report)


@router.post(
    "/{report_id}/review",
    response_model=BookReportRead,
    summary="Review Book Report",
    description="Approve or reject a submitted report with an optional note.",
    responses={
        400: {"description": "Invalid outcome or report not submitted"},
        403: {"description": "STAFF grade required"},
        404: {"description": "Report not found"},
    },
)
async def review_report(
    report_id: int,
    data: BookReportReview,
    current_user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> BookReportRead:
    report = await report_service.review_report(session, current_user, report_id, data)
    return BookReportRead.model_validate(report)
