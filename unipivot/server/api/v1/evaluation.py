"""
Participant Evaluation Endpoints.

Staff issue warning and praise cards to program participants and restrict
participation per program or, for administrators, globally.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.community import (
    CardCreate,
    CardIssueResult,
    CardRead,
    ParticipantSummary,
    PermissionCheck,
    PermissionRead,
    PermissionSet,
)
from unipivot.server.deps import get_current_user, require_staff
from unipivot.server.services import evaluation as evaluation_service

router = APIRouter(tags=["evaluation"])


@router.post(
    "/programs/{program_id}/cards",
    response_model=CardIssueResult,
    status_code=status.HTTP_201_CREATED,
    summary="Issue Card",
    responses={
        201: {"description": "Card issued"},
        403: {"description": "STAFF grade required"},
        404: {"description": "Program or registration not found"},
    },
)
async def issue_card(
    program_id: int,
    data: CardCreate,
    current_user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> CardIssueResult:
    """
    Issue a warning or praise card to a registered participant.

    - **type**: WARNING or PRAISE.
    - **session_id**: Optional session the card relates to.

    A third warning in the same program forfeits a paid deposit; a third
    praise awards the praised participant badge.
    """
    return await evaluation_service.issue_card(session, current_user, program_id, data)


@router.get(
    "/programs/{program_id}/cards",
    response_model=List[CardRead],
    summary="List Cards",
)
async def list_cards(
    program_id: int,
    user_id: Optional[int] = None,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> List[CardRead]:
    cards = await evaluation_service.list_cards(session, program_id, user_id)
    return [CardRead.model_validate(c) for c in cards]


@router.get(
    "/programs/{program_id}/participants/{user_id}/summary",
    response_model=ParticipantSummary,
    summary="Participant Summary",
    description="Cards of one participant in a program together with their effective permission.",
)
async def participant_summary(
    program_id: int,
    user_id: int,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> ParticipantSummary:
    cards, warnings, praises, permission = await evaluation_service.participant_summary(
        session, program_id, user_id
    )
    return ParticipantSummary(
        user_id=user_id,
        program_id=program_id,
        warning_count=warnings,
        praise_count=praises,
        cards=[CardRead.model_validate(c) for c in cards],
        permission=permission,
    )


@router.put(
    "/permissions",
    response_model=PermissionRead,
    summary="Set Participation Permission",
    responses={
        403: {"description": "Global permissions require the ADMIN grade"},
        404: {"description": "User or program not found"},
    },
)
async def set_permission(
    data: PermissionSet,
    current_user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> PermissionRead:
    """
    Create or replace a participation permission.

    - **program_id**: Omit for a global permission (ADMIN only).
    - **status**: ALLOWED, RESTRICTED or BANNED.
    - **expires_at**: Optional end of the permission.
    """
    permission = await evaluation_service.set_participation_permission(session, current_user, data)
    return PermissionRead.model_validate(permission)


@router.get(
    "/permissions/check",
    response_model=PermissionCheck,
    summary="Check Participation Permission",
    description="Effective status of a user; the strictest unexpired permission wins.",
)
async def check_permission(
    user_id: int,
    program_id: Optional[int] = None,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> PermissionCheck:
    return await evaluation_service.check_participation_permission(session, user_id, program_id)


@router.get(
    "/me/permission",
    response_model=PermissionCheck,
    summary="My Participation Permission",
)
async def my_permission(
    program_id: Optional[int] = None,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> PermissionCheck:
    return await evaluation_service.check_participation_permission(session, current_user.id, program_id)
