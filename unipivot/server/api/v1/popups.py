"""
Popup and Popup Template Endpoints.

Visitors report popup impressions, clicks, dismissals and conversions through
the public tracking endpoint; those counters stay out of the change history.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.site_design import Popup, PopupTemplate
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.site_design import (
    PopupCreate,
    PopupRead,
    PopupStats,
    PopupTemplateCreate,
    PopupTemplateRead,
    PopupTemplateUpdate,
    PopupTrack,
    PopupUpdate,
)
from unipivot.server.deps import RequestMeta, get_request_meta, require_admin
from unipivot.server.services import site_design as design_service

POPUP_TYPE = "Popup"
TEMPLATE_TYPE = "PopupTemplate"

router = APIRouter(tags=["popups"])


async def _check_template(session: AsyncSession, template_id: Optional[int]) -> None:
    if template_id is not None:
        await design_service.get_or_404(session, PopupTemplate, template_id, "Popup template")


@router.get(
    "/active",
    response_model=List[PopupRead],
    summary="Active Popups",
    description="Popups to show on a page right now, highest priority first.",
)
async def active_popups(
    path: str = Query("/", description="Page path"),
    session: AsyncSession = Depends(get_session),
) -> List[PopupRead]:
    return [PopupRead.model_validate(p) for p in await design_service.active_popups(session, path)]


@router.post(
    "/track",
    response_model=PopupStats,
    summary="Track Popup Interaction",
    description="Count one visitor interaction: show, click, close or conversion.",
    responses={404: {"description": "Popup not found"}},
)
async def track_popup(data: PopupTrack, session: AsyncSession = Depends(get_session)) -> PopupStats:
    popup = await design_service.record_popup_interaction(session, data.popup_id, data.interaction_type)
    return design_service.popup_stats(popup)


@router.get(
    "/templates",
    response_model=List[PopupTemplateRead],
    summary="List Popup Templates",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_templates(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[PopupTemplateRead]:
    templates = await design_service.list_all(session, PopupTemplate, PopupTemplate.name.asc())
    return [PopupTemplateRead.model_validate(t) for t in templates]


@router.post(
    "/templates",
    response_model=PopupTemplateRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Popup Template",
    responses={201: {"description": "Template created"}},
)
async def create_template(
    data: PopupTemplateCreate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> PopupTemplateRead:
    template = await design_service.create_tracked(
        session, TEMPLATE_TYPE, PopupTemplate(**column_values(data)), current_user, meta
    )
    return PopupTemplateRead.model_validate(template)


@router.patch(
    "/templates/{template_id}",
    response_model=PopupTemplateRead,
    summary="Update Popup Template",
    responses={404: {"description": "Template not found"}},
)
async def update_template(
    template_id: int,
    data: PopupTemplateUpdate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> PopupTemplateRead:
    template = await design_service.get_or_404(session, PopupTemplate, template_id, "Popup template")
    template = await design_service.update_tracked(
        session, TEMPLATE_TYPE, template, column_values(data, exclude_unset=True), current_user, meta
    )
    return PopupTemplateRead.model_validate(template)


@router.delete(
    "/templates/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Popup Template",
    responses={204: {"description": "Template deleted"}, 404: {"description": "Template not found"}},
)
async def delete_template(
    template_id: int,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> None:
    template = await design_service.get_or_404(session, PopupTemplate, template_id, "Popup template")
    await design_service.delete_tracked(session, TEMPLATE_TYPE, template, current_user, meta)


@router.get(
    "",
    response_model=List[PopupRead],
    summary="List Popups",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_popups(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[PopupRead]:
    popups = await design_service.list_all(session, Popup, Popup.priority.desc(), Popup.id.desc())
    return [PopupRead.model_validate(p) for p in popups]


@router.get(
    "/{popup_id}",
    response_model=PopupRead,
    summary="Get Popup",
    responses={404: {"description": "Popup not found"}},
)
async def get_popup(
    popup_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> PopupRead:
    return PopupRead.model_validate(await design_service.get_or_404(session, Popup, popup_id, "Popup"))


@router.get(
    "/{popup_id}/stats",
    response_model=PopupStats,
    summary="Popup Statistics",
    responses={404: {"description": "Popup not found"}},
)
async def get_popup_stats(
    popup_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> PopupStats:
    return design_service.popup_stats(await design_service.get_or_404(session, Popup, popup_id, "Popup"))


@router.post(
    "",
    response_model=PopupRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Popup",
    responses={201: {"description": "Popup created"}, 404: {"description": "Template not found"}},
)
async def create_popup(
    data: PopupCreate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> PopupRead:
    """
    Create a popup.

    - **trigger**: ON_LOAD, ON_DELAY, ON_SCROLL or ON_EXIT.
    - **trigger_value**: Delay in seconds or scroll percentage for the matching trigger.
    - **show_once**: Show at most once per visitor.
    - **template_id**: Optional layout template.
    """
    await _check_template(session, data.template_id)
    popup = await design_service.create_tracked(session, POPUP_TYPE, Popup(**column_values(data)), current_user, meta)
    return PopupRead.model_validate(popup)


@router.patch(
    "/{popup_id}",
    response_model=PopupRead,
    summary="Update Popup",
    responses={404: {"description": "Popup or template not found"}},
)
async def update_popup(
    popup_id: int,
    data: PopupUpdate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> PopupRead:
    popup = await design_service.get_or_404(session, Popup, popup_id, "Popup")
    changes = column_values(data, exclude_unset=True)
    await _check_template(session, changes.get("template_id"))
    popup = await design_service.update_tracked(session, POPUP_TYPE, popup, changes, current_user, meta)
    return PopupRead.model_validate(popup)


@router.delete(
    "/{popup_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Popup",
    responses={204: {"description": "Popup deleted"}, 404: {"description": "Popup not found"}},
)
async def delete_popup(
    popup_id: int,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> None:
    popup = await design_service.get_or_404(session, Popup, popup_id, "Popup")
    await design_service.delete_tracked(session, POPUP_TYPE, popup, current_user, meta)
