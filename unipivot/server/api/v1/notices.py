"""
Notice Endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.common import Page
from unipivot.core.models.io.content import NoticeCreate, NoticeRead, NoticeUpdate
from unipivot.core.rules.grades import is_admin
from unipivot.server.deps import get_optional_user, require_admin
from unipivot.server.services import content as content_service

router = APIRouter(tags=["notices"])


@router.get(
    "",
    response_model=Page[NoticeRead],
    summary="List Notices",
    description="Public notices, pinned ones first and then newest first. Administrators also see hidden notices.",
)
async def list_notices(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> Page[NoticeRead]:
    include_private = user is not None and is_admin(user.role)
    items, total = await content_service.list_notices(session, page, limit, include_private)
    return Page[NoticeRead](items=[NoticeRead.model_validate(n) for n in items], total=total, page=page, limit=limit)


@router.get(
    "/{notice_id}",
    response_model=NoticeRead,
    summary="Read Notice",
    description="Return a notice and count the view.",
    responses={404: {"description": "Notice not found"}},
)
async def read_notice(
    notice_id: int,
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> NoticeRead:
    include_private = user is not None and is_admin(user.role)
    notice = await content_service.view_notice(session, notice_id, include_private)
    return NoticeRead.model_validate(notice)


@router.post(
    "",
    response_model=NoticeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Notice",
    responses={201: {"description": "Notice created"}, 403: {"description": "ADMIN grade required"}},
)
async def create_notice(
    data: NoticeCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> NoticeRead:
    """
    Publish a notice.

    - **title** / **content**: Notice text.
    - **is_pinned**: Keep at the top of the list.
    - **is_public**: Hidden notices are only visible to administrators.
    """
    notice = await content_service.create_notice(session, current_user, data)
    return NoticeRead.model_validate(notice)


@router.patch(
    "/{notice_id}",
    response_model=NoticeRead,
    summary="Update Notice",
    responses={404: {"description": "Notice not found"}},
)
async def update_notice(
    notice_id: int,
    data: NoticeUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> NoticeRead:
    notice = await content_service.update_notice(session, notice_id, data)
    return NoticeRead.model_validate(notice)


@router.delete(
    "/{notice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Notice",
    responses={204: {"description": "Notice deleted"}, 404: {"description": "Notice not found"}},
)
async def delete_notice(
    notice_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await content_service.delete_notice(session, notice_id)
