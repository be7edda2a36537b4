"""
Point Ledger Endpoints.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.donations import PointAdjustment, PointHistoryRead, PointsSummary
from unipivot.server.deps import get_current_user, require_admin
from unipivot.server.services import points as point_service
from unipivot.server.services import users as user_service

router = APIRouter(tags=["points"])


@router.get(
    "/me",
    response_model=PointsSummary,
    summary="My Points",
    description="Current balance and this month's earned and spent points.",
)
async def my_points(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> PointsSummary:
    return await point_service.get_points_summary(session, current_user)


@router.get(
    "/me/history",
    response_model=List[PointHistoryRead],
    summary="My Point History",
    description="Ledger entries, newest first. Each entry carries the balance after it was applied.",
)
async def my_history(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> List[PointHistoryRead]:
    entries = await point_service.get_point_history(session, current_user.id, limit, offset)
    return [PointHistoryRead.model_validate(e) for e in entries]


@router.get(
    "/users/{user_id}/history",
    response_model=List[PointHistoryRead],
    summary="User Point History",
    responses={403: {"description": "ADMIN grade required"}, 404: {"description": "User not found"}},
)
async def user_history(
    user_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[PointHistoryRead]:
    await user_service.get_user_or_404(session, user_id)
    entries = await point_service.get_point_history(session, user_id, limit, offset)
    return [PointHistoryRead.model_validate(e) for e in entries]


@router.post(
    "/users/{user_id}/adjust",
    response_model=PointHistoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Adjust Points",
    description="Credit or debit a user's points. A debit below zero is rejected.",
    responses={
        201: {"description": "Ledger entry created"},
        400: {"description": "Zero amount or insufficient balance"},
        403: {"description": "ADMIN grade required"},
        404: {"description": "User not found"},
    },
)
async def adjust_points(
    user_id: int,
    data: PointAdjustment,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> PointHistoryRead:
    """
    Manually adjust a user's balance.

    - **amount**: Signed amount; positive credits, negative debits.
    - **description**: Reason shown in the user's history.
    - **category**: Ledger category, ADMIN by default.
    """
    entry = await point_service.adjust_points(session, current_user, user_id, data)
    return PointHistoryRead.model_validate(entry)
