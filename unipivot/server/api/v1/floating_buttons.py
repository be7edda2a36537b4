"""
Floating Button Endpoints.

Administrative writes are tracked in the change history like every other
site design entity; impression and click counts are not.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.site_design import FloatingButton
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.site_design import (
    ButtonTrack,
    FloatingButtonCreate,
    FloatingButtonRead,
    FloatingButtonUpdate,
)
from unipivot.server.deps import RequestMeta, get_optional_user, get_request_meta, require_admin
from unipivot.server.services import site_design as design_service

ENTITY_TYPE = "FloatingButton"

router = APIRouter(tags=["floating-buttons"])


@router.get(
    "/active",
    response_model=List[FloatingButtonRead],
    summary="Active Floating Buttons",
    description="Floating buttons to show to the caller on a page right now, highest priority first.",
)
async def active_buttons(
    path: str = Query("/", description="Page path"),
    device: Optional[str] = Query(None, description="DESKTOP, MOBILE or TABLET"),
    user: Optional[User] = Depends(get_optional_user),
    session: AsyncSession = Depends(get_session),
) -> List[FloatingButtonRead]:
    role = user.role if user else None
    buttons = await design_service.active_floating_buttons(session, path, role=role, device=device)
    return [FloatingButtonRead.model_validate(b) for b in buttons]


@router.post(
    "/{button_id}/track",
    response_model=FloatingButtonRead,
    summary="Track Floating Button",
    responses={404: {"description": "Floating button not found"}},
)
async def track_button(
    button_id: int,
    data: ButtonTrack,
    session: AsyncSession = Depends(get_session),
) -> FloatingButtonRead:
    button = await design_service.record_button_interaction(session, button_id, data.action)
    return FloatingButtonRead.model_validate(button)


@router.get(
    "",
    response_model=List[FloatingButtonRead],
    summary="List Floating Buttons",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_buttons(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[FloatingButtonRead]:
    buttons = await design_service.list_all(
        session, FloatingButton, FloatingButton.priority.desc(), FloatingButton.id.desc()
    )
    return [FloatingButtonRead.model_validate(b) for b in buttons]


@router.get(
    "/{button_id}",
    response_model=FloatingButtonRead,
    summary="Get Floating Button",
    responses={404: {"description": "Floating button not found"}},
)
async def get_button(
    button_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> FloatingButtonRead:
    button = await design_service.get_or_404(session, FloatingButton, button_id, "Floating button")
    return FloatingButtonRead.model_validate(button)


@router.post(
    "",
    response_model=FloatingButtonRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Floating Button",
    responses={201: {"description": "Floating button created"}, 400: {"description": "Invalid layout or schedule"}},
)
async def create_button(
    data: FloatingButtonCreate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> FloatingButtonRead:
    """
    Create a floating button.

    - **position**: BOTTOM_RIGHT, BOTTOM_LEFT, TOP_RIGHT, TOP_LEFT or CUSTOM with **offset_x** / **offset_y**.
    - **is_scheduled**: Show only between **start_date** and **end_date**; a start date is required.
    - **target_roles**: Grades the button is shown to; empty for every visitor.
    - **max_display_count**: Hide the button after this many impressions.
    """
    values = column_values(data)
    design_service.check_button_values(values)
    button = await design_service.create_tracked(session, ENTITY_TYPE, FloatingButton(**values), current_user, meta)
    return FloatingButtonRead.model_validate(button)


@router.patch(
    "/{button_id}",
    response_model=FloatingButtonRead,
    summary="Update Floating Button",
    responses={400: {"description": "Invalid layout or schedule"}, 404: {"description": "Floating button not found"}},
)
async def update_button(
    button_id: int,
    data: FloatingButtonUpdate,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> FloatingButtonRead:
    button = await design_service.get_or_404(session, FloatingButton, button_id, "Floating button")
    changes = column_values(data, exclude_unset=True)
    design_service.check_button_values({**button.model_dump(), **changes})
    button = await design_service.update_tracked(session, ENTITY_TYPE, button, changes, current_user, meta)
    return FloatingButtonRead.model_validate(button)


@router.delete(
    "/{button_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Floating Button",
    responses={204: {"description": "Floating button deleted"}, 404: {"description": "Floating button not found"}},
)
async def delete_button(
    button_id: int,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> None:
    button = await design_service.get_or_404(session, FloatingButton, button_id, "Floating button")
    await design_service.delete_tracked(session, ENTITY_TYPE, button, current_user, meta)
