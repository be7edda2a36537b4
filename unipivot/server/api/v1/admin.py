"""
Admin Dashboard Endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import ActivityLogRepository
from unipivot.core.models.io.common import Page
from unipivot.core.models.io.community import ActivityLogRead, DashboardStats
from unipivot.server.deps import require_admin
from unipivot.server.services import activity as activity_service

router = APIRouter(tags=["admin"])


@router.get(
    "/dashboard",
    response_model=DashboardStats,
    summary="Dashboard Statistics",
    description=(
        "Total users, open programs, completed donations of the current month, pending "
        "registrations, and the latest users and activity entries."
    ),
    responses={403: {"description": "ADMIN grade required"}},
)
async def dashboard(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> DashboardStats:
    return await activity_service.dashboard_stats(session)


@router.get(
    "/activity",
    response_model=Page[ActivityLogRead],
    summary="List Activity",
    response_description="One page of activity entries, newest first.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_activity(
    user_id: Optional[int] = None,
    action: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Page[ActivityLogRead]:
    """
    List activity log entries.

    - **user_id**: Only entries of this user.
    - **action**: Exact action name, e.g. `DONATION` or `REGISTRATION_APPROVED`.
    """
    entries, total = await ActivityLogRepository(session).search(
        user_id=user_id, action=action, limit=limit, offset=(page - 1) * limit
    )
    return Page[ActivityLogRead](
        items=[ActivityLogRead.model_validate(e) for e in entries], total=total, page=page, limit=limit
    )
