"""
Registration Endpoints.

Members apply to programs; staff review the applications, confirm deposits
and export the participant list.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.domain.enums import RegistrationStatus
from unipivot.core.models.io.programs import (
    BulkRegistrationStatusUpdate,
    BulkUpdateResult,
    RegistrationCreate,
    RegistrationListResponse,
    RegistrationRead,
    RegistrationStatusUpdate,
)
from unipivot.server.deps import get_current_user, require_staff
from unipivot.server.services import registrations as registration_service

router = APIRouter(tags=["registrations"])


@router.post(
    "/programs/{program_id}/registrations",
    response_model=RegistrationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register for Program",
    description=(
        "Apply to an OPEN program. The application is approved immediately while seats remain, "
        "otherwise it waits as PENDING for staff review."
    ),
    response_description="The registration.",
    responses={
        201: {"description": "Registered"},
        400: {"description": "Program is not open"},
        403: {"description": "Participation restricted"},
        404: {"description": "Program not found"},
        409: {"description": "Already registered"},
    },
)
async def register(
    program_id: int,
    data: Optional[RegistrationCreate] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> RegistrationRead:
    """
    Register the signed-in user for a program.

    - **motivation**: Optional free text shown to the organizers.
    """
    registration = await registration_service.register_for_program(
        session, current_user, program_id, data.motivation if data else None
    )
    return RegistrationRead.model_validate(registration)


@router.delete(
    "/programs/{program_id}/registrations/me",
    response_model=RegistrationRead,
    summary="Cancel Registration",
    description="Cancel the signed-in user's registration. The user may register again later.",
    responses={404: {"description": "Registration not found"}},
)
async def cancel(
    program_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> RegistrationRead:
    registration = await registration_service.cancel_registration(session, current_user, program_id)
    return RegistrationRead.model_validate(registration)


@router.get(
    "/programs/{program_id}/registrations",
    response_model=RegistrationListResponse,
    summary="List Program Registrations",
    description="Registrations of a program in application order, with counts per status.",
    responses={403: {"description": "STAFF grade required"}, 404: {"description": "Program not found"}},
)
async def list_program_registrations(
    program_id: int,
    status_filter: Optional[RegistrationStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> RegistrationListResponse:
    items, total, counts = await registration_service.list_program_registrations(
        session, program_id, status_filter, page, limit
    )
    return RegistrationListResponse(
        items=[RegistrationRead.model_validate(r) for r in items],
        total=total,
        page=page,
        limit=limit,
        status_counts=counts,
    )


@router.get(
    "/programs/{program_id}/registrations/export",
    summary="Export Registrations",
    description="Download the registrations of a program as CSV.",
    response_description="CSV file.",
    responses={
        200: {"content": {"text/csv": {}}, "description": "CSV export"},
        404: {"description": "Program not found"},
    },
)
async def export_registrations(
    program_id: int,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> Response:
    program, content = await registration_service.export_registrations_csv(session, program_id)
    # BOM so spreadsheet tools detect UTF-8
    return Response(
        content="\ufeff" + content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="program-{program.id}-registrations.csv"'},
    )


@router.get(
    "/registrations/me",
    response_model=List[RegistrationRead],
    summary="My Registrations",
    description="Registrations of the signed-in user, newest first.",
)
async def my_registrations(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> List[RegistrationRead]:
    registrations = await registration_service.my_registrations(session, current_user)
    return [RegistrationRead.model_validate(r) for r in registrations]


@router.patch(
    "/registrations/bulk-status",
    response_model=BulkUpdateResult,
    summary="Bulk Update Registration Status",
    description="Apply one status to several registrations. Unknown ids are skipped.",
    responses={403: {"description": "STAFF grade required"}},
)
async def bulk_update_status(
    data: BulkRegistrationStatusUpdate,
    current_user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> BulkUpdateResult:
    updated = await registration_service.bulk_update_registration_status(
        session, current_user, data.ids, data.status, data.reason, data.note
    )
    return BulkUpdateResult(updated=updated)


@router.patch(
    "/registrations/{registration_id}/status",
    response_model=RegistrationRead,
    summary="Update Registration Status",
    description="Approve, reject or cancel a registration. Every change is written to the activity log.",
    responses={403: {"description": "STAFF grade required"}, 404: {"description": "Registration not found"}},
)
async def update_status(
    registration_id: int,
    data: RegistrationStatusUpdate,
    current_user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> RegistrationRead:
    """
    Change the status of one registration.

    - **status**: New status.
    - **reason**: Rejection reason, stored when rejecting.
    - **note**: Internal organizer note.
    """
    registration = await registration_service.update_registration_status(
        session, current_user, registration_id, data.status, data.reason, data.note
    )
    return RegistrationRead.model_validate(registration)


@router.post(
    "/registrations/{registration_id}/deposit-paid",
    response_model=RegistrationRead,
    summary="Confirm Deposit Payment",
    responses={
        400: {"description": "No deposit required or already processed"},
        404: {"description": "Registration not found"},
    },
)
async def confirm_deposit(
    registration_id: int,
    current_user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> RegistrationRead:
    registration = await registration_service.confirm_deposit_paid(session, current_user, registration_id)
    return RegistrationRead.model_validate(registration)
