"""
Program Endpoints.

Administrators create and maintain programs and their sessions; the public
listing only shows OPEN programs, and drafts are never visible by slug.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import NotFoundError
from unipivot.core.models.domain.enums import ProgramStatus, ProgramType
from unipivot.core.models.io.common import Page
from unipivot.core.models.io.programs import (
    ProgramCompletion,
    ProgramCreate,
    ProgramDetail,
    ProgramRead,
    ProgramUpdate,
    SessionCreate,
    SessionRead,
    SessionUpdate,
)
from unipivot.core.rules.grades import is_staff
from unipivot.server.deps import get_optional_user, require_admin
from unipivot.server.services import programs as program_service

router = APIRouter(tags=["programs"])


@router.post(
    "",
    response_model=ProgramRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Program",
    description="Create a program in DRAFT status. The slug is generated from the title and creation time.",
    response_description="The created program.",
    responses={201: {"description": "Program created"}, 403: {"description": "ADMIN grade required"}},
)
async def create_program(
    data: ProgramCreate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ProgramRead:
    """
    Create a new program.

    - **title**: Program title, also the base of the slug.
    - **type**: BOOKCLUB, SEMINAR, KMOVE, DEBATE or OTHER.
    - **capacity**: Seats that are approved automatically on registration.
    - **deposit_amount**: Refundable deposit in KRW, 0 for none.
    - **refund_policy_type**: How the deposit refund is calculated.
    """
    program = await program_service.create_program(session, data)
    return ProgramRead.model_validate(program)


@router.get(
    "",
    response_model=Page[ProgramRead],
    summary="List Programs (Admin)",
    description="List every program, newest first, including drafts.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_programs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    program_type: Optional[ProgramType] = Query(None, alias="type"),
    status_filter: Optional[ProgramStatus] = Query(None, alias="status"),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Page[ProgramRead]:
    items, total = await program_service.list_programs(session, page, limit, search, program_type, status_filter)
    return Page[ProgramRead](
        items=[ProgramRead.model_validate(p) for p in items], total=total, page=page, limit=limit
    )


@router.get(
    "/public",
    response_model=Page[ProgramRead],
    summary="List Open Programs",
    description="Programs that currently accept registrations.",
)
async def list_open_programs(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    program_type: Optional[ProgramType] = Query(None, alias="type"),
    session: AsyncSession = Depends(get_session),
) -> Page[ProgramRead]:
    items, total = await program_service.list_programs(
        session, page, limit, program_type=program_type, status=ProgramStatus.open
    )
    return Page[ProgramRead](
        items=[ProgramRead.model_validate(p) for p in items], total=total, page=page, limit=limit
    )


@router.get(
    "/slug/{slug}",
    response_model=ProgramDetail,
    summary="Get Program by Slug",
    description="Public program page data with the number of remaining seats.",
    responses={404: {"description": "Program not found or still a draft"}},
)
async def get_program_by_slug(slug: str, session: AsyncSession = Depends(get_session)) -> ProgramDetail:
    program = await program_service.get_program_by_slug(session, slug)
    return await program_service.program_detail(session, program)


@router.get(
    "/{program_id}",
    response_model=ProgramDetail,
    summary="Get Program",
    description="Program with live registration figures. Drafts are only visible to staff.",
    responses={404: {"description": "Program not found"}},
)
async def get_program(
    program_id: int,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> ProgramDetail:
    program = await program_service.get_program_or_404(session, program_id)
    if program.status == ProgramStatus.draft and (user is None or not is_staff(user.role)):
        raise NotFoundError(f"Program {program_id} not found")
    return await program_service.program_detail(session, program)


@router.patch(
    "/{program_id}",
    response_model=ProgramRead,
    summary="Update Program",
    description="Partially update a program, for example to open or close registration.",
    responses={
        400: {"description": "Completion must go through the completion endpoint"},
        404: {"description": "Program not found"},
    },
)
async def update_program(
    program_id: int,
    data: ProgramUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ProgramRead:
    program = await program_service.update_program(session, program_id, data)
    return ProgramRead.model_validate(program)


@router.delete(
    "/{program_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Program",
    responses={204: {"description": "Program deleted"}, 404: {"description": "Program not found"}},
)
async def delete_program(
    program_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await program_service.delete_program(session, program_id)


@router.post(
    "/{program_id}/complete",
    response_model=ProgramCompletion,
    summary="Complete Program",
    description=(
        "Mark the program COMPLETED. Approved participants receive completion points and XP, and "
        "USER accounts that qualify are promoted to MEMBER."
    ),
    responses={400: {"description": "Program already completed"}, 404: {"description": "Program not found"}},
)
async def complete_program(
    program_id: int,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ProgramCompletion:
    return await program_service.complete_program(session, program_id, current_user)


@router.get(
    "/{program_id}/sessions",
    response_model=List[SessionRead],
    summary="List Sessions",
    description="Sessions of a program ordered by session number.",
    responses={404: {"description": "Program not found"}},
)
async def list_sessions(program_id: int, session: AsyncSession = Depends(get_session)) -> List[SessionRead]:
    sessions = await program_service.list_sessions(session, program_id)
    return [SessionRead.model_validate(s) for s in sessions]


@router.post(
    "/{program_id}/sessions",
    response_model=SessionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Session",
    responses={
        201: {"description": "Session created"},
        404: {"description": "Program not found"},
        409: {"description": "Session number already used"},
    },
)
async def create_session(
    program_id: int,
    data: SessionCreate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SessionRead:
    """
    Add a session to a program.

    - **session_no**: 1-based number, unique within the program.
    - **starts_at**: Start time; check-in opens 30 minutes before it.
    - **ends_at**: End time; check-in closes then (or two hours after the start when omitted).
    """
    program_session = await program_service.create_session(session, program_id, data)
    return SessionRead.model_validate(program_session)


@router.patch(
    "/{program_id}/sessions/{session_id}",
    response_model=SessionRead,
    summary="Update Session",
    responses={404: {"description": "Session not found"}},
)
async def update_session(
    program_id: int,
    session_id: int,
    data: SessionUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> SessionRead:
    program_session = await program_service.update_session(session, program_id, session_id, data)
    return SessionRead.model_validate(program_session)


@router.delete(
    "/{program_id}/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Session",
    responses={204: {"description": "Session deleted"}, 404: {"description": "Session not found"}},
)
async def delete_session(
    program_id: int,
    session_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await program_service.delete_session(session, program_id, session_id)
