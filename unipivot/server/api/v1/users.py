"""
User Administration Endpoints.

Administrators list accounts and change their grade and status. Grade
changes follow the rules in ``unipivot.core.rules.grades``.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.domain.enums import UserRole
from unipivot.core.models.io.common import Page
from unipivot.core.models.io.users import RoleChange, StatusChange, UserRead
from unipivot.server.deps import require_admin
from unipivot.server.services import users as user_service

router = APIRouter(tags=["users"])


@router.get(
    "",
    response_model=Page[UserRead],
    summary="List Users",
    description="List accounts, newest first, with optional name/email search and grade filter.",
    response_description="One page of users.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Page[UserRead]:
    """
    List users.

    - **page**: 1-based page number.
    - **limit**: Page size (max 100).
    - **search**: Case-insensitive substring of name or email.
    - **role**: Only users with this grade.
    """
    users, total = await user_service.list_users(session, page, limit, search, role)
    return Page[UserRead](items=[UserRead.model_validate(u) for u in users], total=total, page=page, limit=limit)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get User",
    responses={404: {"description": "User not found"}},
)
async def get_user(
    user_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    return UserRead.model_validate(await user_service.get_user_or_404(session, user_id))


@router.patch(
    "/{user_id}/role",
    response_model=UserRead,
    summary="Change User Grade",
    description=(
        "Change the grade of a user. Only a SUPER_ADMIN may change administrators, and nobody "
        "may grant a grade above their own."
    ),
    responses={
        200: {"description": "Grade changed"},
        403: {"description": "Grade change not permitted"},
        404: {"description": "User not found"},
    },
)
async def change_role(
    user_id: int,
    data: RoleChange,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    user = await user_service.change_role(session, current_user, user_id, data.role)
    return UserRead.model_validate(user)


@router.patch(
    "/{user_id}/status",
    response_model=UserRead,
    summary="Change User Status",
    description="Ban or re-activate an account. Banned users cannot log in.",
    responses={403: {"description": "Target grade too high"}, 404: {"description": "User not found"}},
)
async def change_status(
    user_id: int,
    data: StatusChange,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    user = await user_service.change_status(session, current_user, user_id, data.status)
    return UserRead.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete User",
    responses={
        204: {"description": "User deleted"},
        403: {"description": "Target grade too high"},
        404: {"description": "User not found"},
    },
)
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await user_service.delete_user(session, current_user, user_id)
