"""
Announcement Banner Endpoints.

Every administrative write is recorded in the change history with a full
snapshot so that it can be rolled back later.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.site_design import AnnouncementBanner
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.site_design import BannerCreate, BannerRead, BannerUpdate
from unipivot.server.deps import RequestMeta, get_request_meta, require_admin
from unipivot.server.services import site_design as design_service

ENTITY_TYPE = "AnnouncementBanner"

router = APIRouter(tags=["banners"])


@router.get(
    "/active",
    response_model=List[BannerRead],
    summary="Active Banners",
    description=(
        "Banners to show on a page right now: active, inside their date window, matching the page "
        "rules, highest priority first."
    ),
)
async def active_banners(
    path: str = Query("/", description="Page path, e.g. /programs/bookclub"),
    session: AsyncSession = Depends(get_session),
) -> List[BannerRead]:
    banners = await design_service.active_banners(session, path)
    return [BannerRead.model_validate(b) for b in banners]


@router.get(
    "",
    response_model=List[BannerRead],
    summary="List Banners",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_banners(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[BannerRead]:
    banners = await design_service.list_all(
        session, AnnouncementBanner, AnnouncementBanner.priority.desc(), AnnouncementBanner.id.desc()
    )
    return [BannerRead.model_validate(b) for b in banners]


@router.get(
    "/{banner_id}",
    response_model=BannerRead,
    summary="Get Banner",
    responses={404: {"description": "Banner not found"}},
)
async def get_banner(
    banner_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> BannerRead:
    banner = await design_service.get_or_404(session, AnnouncementBanner, banner_id, "Banner")
    return BannerRead.model_validate(banner)


@router.post(
    "",
    response_model=BannerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Banner",
    responses={201: {"description": "Banner created"}, 403: {"description": "ADMIN grade required"}},
)
async def create_banner(
    data: BannerCreate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> BannerRead:
    """
    Create an announcement banner.

    - **type**: INFO, WARNING, SUCCESS, ERROR or PROMOTION.
    - **target_pages**: Path prefixes the banner is shown on; empty for every page.
    - **exclude_pages**: Path prefixes where it is never shown, overriding targets.
    - **start_date** / **end_date**: Optional display window.
    - **priority**: Higher values are shown first.
    """
    banner = AnnouncementBanner(**column_values(data))
    banner = await design_service.create_tracked(session, ENTITY_TYPE, banner, current_user, meta)
    return BannerRead.model_validate(banner)


@router.patch(
    "/{banner_id}",
    response_model=BannerRead,
    summary="Update Banner",
    responses={404: {"description": "Banner not found"}},
)
async def update_banner(
    banner_id: int,
    data: BannerUpdate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> BannerRead:
    banner = await design_service.get_or_404(session, AnnouncementBanner, banner_id, "Banner")
    changes = column_values(data, exclude_unset=True)
    banner = await design_service.update_tracked(session, ENTITY_TYPE, banner, changes, current_user, meta)
    return BannerRead.model_validate(banner)


@router.delete(
    "/{banner_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Banner",
    responses={204: {"description": "Banner deleted"}, 404: {"description": "Banner not found"}},
)
async def delete_banner(
    banner_id: int,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> None:
    banner = await design_service.get_or_404(session, AnnouncementBanner, banner_id, "Banner")
    await design_service.delete_tracked(session, ENTITY_TYPE, banner, current_user, meta)
