"""
Calendar Endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import as_naive_utc, get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.business import CalendarEventCreate, CalendarEventRead, CalendarEventUpdate
from unipivot.server.deps import require_admin
from unipivot.server.services import business as business_service

router = APIRouter(tags=["calendar"])


@router.get(
    "",
    response_model=List[CalendarEventRead],
    summary="List Events",
    description=(
        "Events overlapping the requested range, in start order. An event without an end date "
        "counts as a single moment."
    ),
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_events(
    start: Optional[datetime] = Query(None, description="Range start (inclusive)"),
    end: Optional[datetime] = Query(None, description="Range end (inclusive)"),
    project_id: Optional[int] = None,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[CalendarEventRead]:
    events = await business_service.list_events(
        session,
        as_naive_utc(start) if start else None,
        as_naive_utc(end) if end else None,
        project_id,
    )
    return [CalendarEventRead.model_validate(e) for e in events]


@router.get(
    "/{event_id}",
    response_model=CalendarEventRead,
    summary="Get Event",
    responses={404: {"description": "Event not found"}},
)
async def get_event(
    event_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> CalendarEventRead:
    return CalendarEventRead.model_validate(await business_service.get_event_or_404(session, event_id))


@router.post(
    "",
    response_model=CalendarEventRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Event",
    responses={
        201: {"description": "Event created"},
        400: {"description": "End before start"},
        404: {"description": "Project not found"},
    },
)
async def create_event(
    data: CalendarEventCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> CalendarEventRead:
    """
    Add an event to the calendar.

    - **type**: Free-form category such as MEETING, PROGRAM or DEADLINE.
    - **all_day**: Whole-day event; times are ignored by clients.
    - **project_id**: Optional project the event belongs to.
    """
    event = await business_service.create_event(session, current_user, data)
    return CalendarEventRead.model_validate(event)


@router.patch(
    "/{event_id}",
    response_model=CalendarEventRead,
    summary="Update Event",
    responses={400: {"description": "End before start"}, 404: {"description": "Event or project not found"}},
)
async def update_event(
    event_id: int,
    data: CalendarEventUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> CalendarEventRead:
    event = await business_service.update_event(session, event_id, data)
    return CalendarEventRead.model_validate(event)


@router.delete(
    "/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Event",
    responses={204: {"description": "Event deleted"}, 404: {"description": "Event not found"}},
)
async def delete_event(
    event_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await business_service.delete_event(session, event_id)
