"""
SEO Settings Endpoints.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.site_design import SeoSetting
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.site_design import SeoSettingCreate, SeoSettingRead, SeoSettingUpdate
from unipivot.server.deps import RequestMeta, get_request_meta, require_admin
from unipivot.server.services import site_design as design_service

ENTITY_TYPE = "SEOSettings"

router = APIRouter(tags=["seo"])


@router.get(
    "/pages/{page_key}",
    response_model=SeoSettingRead,
    summary="SEO for Page",
    description="Active metadata for a page key, falling back to the 'default' entry.",
    responses={404: {"description": "Neither the page nor a default entry exists"}},
)
async def seo_for_page(page_key: str, session: AsyncSession = Depends(get_session)) -> SeoSettingRead:
    return SeoSettingRead.model_validate(await design_service.seo_for_page(session, page_key))


@router.get(
    "",
    response_model=List[SeoSettingRead],
    summary="List SEO Settings",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_settings(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[SeoSettingRead]:
    settings = await design_service.list_all(session, SeoSetting, SeoSetting.page_key.asc())
    return [SeoSettingRead.model_validate(s) for s in settings]


@router.post(
    "",
    response_model=SeoSettingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create SEO Setting",
    responses={201: {"description": "Created"}, 409: {"description": "Page key already configured"}},
)
async def create_setting(
    data: SeoSettingCreate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> SeoSettingRead:
    """
    Configure the metadata of a page.

    - **page_key**: Page identifier such as ``home`` or ``programs``; ``default`` is the fallback.
    - **title** / **description** / **keywords**: Standard meta tags.
    - **og_*** / **twitter_card**: Social sharing previews.
    - **robots**: Robots directive, ``index,follow`` by default.
    """
    setting = await design_service.create_tracked(
        session, ENTITY_TYPE, SeoSetting(**column_values(data)), current_user, meta
    )
    return SeoSettingRead.model_validate(setting)


@router.patch(
    "/{setting_id}",
    response_model=SeoSettingRead,
    summary="Update SEO Setting",
    responses={404: {"description": "Setting not found"}},
)
async def update_setting(
    setting_id: int,
    data: SeoSettingUpdate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> SeoSettingRead:
    setting = await design_service.get_or_404(session, SeoSetting, setting_id, "SEO setting")
    setting = await design_service.update_tracked(
        session, ENTITY_TYPE, setting, column_values(data, exclude_unset=True), current_user, meta
    )
    return SeoSettingRead.model_validate(setting)


@router.delete(
    "/{setting_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete SEO Setting",
    responses={204: {"description": "Deleted"}, 404: {"description": "Setting not found"}},
)
async def delete_setting(
    setting_id: int,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> None:
    setting = await design_service.get_or_404(session, SeoSetting, setting_id, "SEO setting")
    await design_service.delete_tracked(session, ENTITY_TYPE, setting, current_user, meta)
