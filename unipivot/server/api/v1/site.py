"""
Site Section and Site Setting Endpoints.

Sections are the editable blocks of the landing pages; settings are keyed
JSON values such as contact details or feature switches.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database import get_session
from unipivot.core.database.entities.site_design import SiteSection, SiteSetting
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import NotFoundError
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.site_design import (
    SiteSectionCreate,
    SiteSectionRead,
    SiteSectionUpdate,
    SiteSettingCreate,
    SiteSettingRead,
    SiteSettingUpdate,
)
from unipivot.server.deps import RequestMeta, get_request_meta, require_admin
from unipivot.server.services import site_design as design_service

SECTION_TYPE = "SiteSection"
SETTING_TYPE = "SiteSettings"

router = APIRouter(tags=["site"])


@router.get(
    "/sections",
    response_model=List[SiteSectionRead],
    summary="Visible Sections",
    description="Visible sections in display order.",
)
async def visible_sections(session: AsyncSession = Depends(get_session)) -> List[SiteSectionRead]:
    return [SiteSectionRead.model_validate(s) for s in await design_service.visible_sections(session)]


@router.get(
    "/sections/all",
    response_model=List[SiteSectionRead],
    summary="List All Sections",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_sections(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[SiteSectionRead]:
    sections = await design_service.list_all(session, SiteSection, SiteSection.sort_order.asc(), SiteSection.id.asc())
    return [SiteSectionRead.model_validate(s) for s in sections]


@router.post(
    "/sections",
    response_model=SiteSectionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Section",
    responses={201: {"description": "Section created"}, 409: {"description": "Section key already exists"}},
)
async def create_section(
    data: SiteSectionCreate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> SiteSectionRead:
    section = await design_service.create_tracked(
        session, SECTION_TYPE, SiteSection(**column_values(data)), current_user, meta
    )
    return SiteSectionRead.model_validate(section)


@router.patch(
    "/sections/{section_id}",
    response_model=SiteSectionRead,
    summary="Update Section",
    responses={404: {"description": "Section not found"}},
)
async def update_section(
    section_id: int,
    data: SiteSectionUpdate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> SiteSectionRead:
    section = await design_service.get_or_404(session, SiteSection, section_id, "Section")
    section = await design_service.update_tracked(
        session, SECTION_TYPE, section, column_values(data, exclude_unset=True), current_user, meta
    )
    return SiteSectionRead.model_validate(section)


@router.delete(
    "/sections/{section_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Section",
    responses={204: {"description": "Section deleted"}, 404: {"description": "Section not found"}},
)
async def delete_section(
    section_id: int,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> None:
    section = await design_service.get_or_404(session, SiteSection, section_id, "Section")
    await design_service.delete_tracked(session, SECTION_TYPE, section, current_user, meta)


@router.get(
    "/settings",
    response_model=List[SiteSettingRead],
    summary="List Settings",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_settings(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[SiteSettingRead]:
    settings = await design_service.list_all(session, SiteSetting, SiteSetting.category.asc(), SiteSetting.key.asc())
    return [SiteSettingRead.model_validate(s) for s in settings]


@router.get(
    "/settings/{key}",
    response_model=SiteSettingRead,
    summary="Get Setting",
    description="Public read of one setting by key.",
    responses={404: {"description": "Setting not found"}},
)
async def get_setting(key: str, session: AsyncSession = Depends(get_session)) -> SiteSettingRead:
    setting = (await session.execute(select(SiteSetting).where(SiteSetting.key == key))).scalars().first()
    if setting is None:
        raise NotFoundError(f"Setting '{key}' not found")
    return SiteSettingRead.model_validate(setting)


@router.post(
    "/settings",
    response_model=SiteSettingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Setting",
    responses={201: {"description": "Setting created"}, 409: {"description": "Key already exists"}},
)
async def create_setting(
    data: SiteSettingCreate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> SiteSettingRead:
    setting = await design_service.create_tracked(
        session, SETTING_TYPE, SiteSetting(**column_values(data)), current_user, meta
    )
    return SiteSettingRead.model_validate(setting)


@router.patch(
    "/settings/{setting_id}",
    response_model=SiteSettingRead,
    summary="Update Setting",
    responses={404: {"description": "Setting not found"}},
)
async def update_setting(
    setting_id: int,
    data: SiteSettingUpdate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> SiteSettingRead:
    setting = await design_service.get_or_404(session, SiteSetting, setting_id, "Setting")
    setting = await design_service.update_tracked(
        session, SETTING_TYPE, setting, column_values(data, exclude_unset=True), current_user, meta
    )
    return SiteSettingRead.model_validate(setting)


@router.delete(
    "/settings/{setting_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Setting",
    responses={204: {"description": "Setting deleted"}, 404: {"description": "Setting not found"}},
)
async def delete_setting(
    setting_id: int,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> None:
    setting = await design_service.get_or_404(session, SiteSetting, setting_id, "Setting")
    await design_service.delete_tracked(session, SETTING_TYPE, setting, current_user, meta)
