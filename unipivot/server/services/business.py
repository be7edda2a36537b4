"""
Business management service: projects, calendar events and documents.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.entities.business import CalendarEvent, Document, Project
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import BusinessRuleError, NotFoundError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import ProjectStatus
from unipivot.core.models.io.business import (
    CalendarEventCreate,
    CalendarEventUpdate,
    DocumentCreate,
    DocumentUpdate,
    ProjectCreate,
    ProjectUpdate,
)
from unipivot.core.models.io.common import column_values

logger = get_logger(__name__)


async def _ensure_project(session: AsyncSession, project_id: Optional[int]) -> None:
    if project_id is not None:
        await get_project_or_404(session, project_id)


def _check_range(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start is not None and end is not None and end < start:
        raise BusinessRuleError("End date must not be before the start date")


async def _save(session: AsyncSession, entity):
    session.add(entity)
    await session.commit()
    await session.refresh(entity)
    return entity


async def list_projects(session: AsyncSession, status: Optional[ProjectStatus] = None) -> List[Project]:
    stmt = select(Project)
    if status is not None:
        stmt = stmt.where(Project.status == status.value)
    result = await session.execute(stmt.order_by(Project.created_at.desc(), Project.id.desc()))
    return list(result.scalars().all())


async def get_project_or_404(session: AsyncSession, project_id: int) -> Project:
    project = await session.get(Project, project_id)
    if project is None:
        raise NotFoundError(f"Project {project_id} not found")
    return project


async def create_project(session: AsyncSession, user: User, data: ProjectCreate) -> Project:
    _check_range(data.start_date, data.end_date)
    return await _save(session, Project(**column_values(data), created_by=user.id))


async def update_project(session: AsyncSession, project_id: int, data: ProjectUpdate) -> Project:
    project = await get_project_or_404(session, project_id)
    for key, value in column_values(data, exclude_unset=True).items():
        setattr(project, key, value)
    _check_range(project.start_date, project.end_date)
    return await _save(session, project)


async def delete_project(session: AsyncSession, project_id: int) -> None:
    """Delete a project; its events and documents stay, without a project."""
    project = await get_project_or_404(session, project_id)
    await session.execute(
        update(CalendarEvent).where(CalendarEvent.project_id == project_id).values(project_id=None)
    )
    await session.execute(update(Document).where(Document.project_id == project_id).values(project_id=None))
    await session.delete(project)
    await session.commit()
    logger.info(f"Deleted project {project_id}")


async def list_events(
    session: AsyncSession,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    project_id: Optional[int] = None,
) -> List[CalendarEvent]:
    """
    Events overlapping ``[start, end]``.

    An event without an end date is treated as a single point in time.
    """
    conditions = []
    if end is not None:
        conditions.append(CalendarEvent.start_date <= end)
    if start is not None:
        conditions.append(func.coalesce(CalendarEvent.end_date, CalendarEvent.start_date) >= start)
    if project_id is not None:
        conditions.append(CalendarEvent.project_id == project_id)
    result = await session.execute(
        select(CalendarEvent).where(*conditions).order_by(CalendarEvent.start_date.asc(), CalendarEvent.id.asc())
    )
    return list(result.scalars().all())


async def get_event_or_404(session: AsyncSession, event_id: int) -> CalendarEvent:
    event = await session.get(CalendarEvent, event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found")
    return event


async def create_event(session: AsyncSession, user: User, data: CalendarEventCreate) -> CalendarEvent:
    _check_range(data.start_date, data.end_date)
    await _ensure_project(session, data.project_id)
    return await _save(session, CalendarEvent(**column_values(data), created_by=user.id))


async def update_event(session: AsyncSession, event_id: int, data: CalendarEventUpdate) -> CalendarEvent:
    event = await get_event_or_404(session, event_id)
    changes = column_values(data, exclude_unset=True)
    await _ensure_project(session, changes.get("project_id"))
    for key, value in changes.items():
        setattr(event, key, value)
    _check_range(event.start_date, event.end_date)
    return await _save(session, event)


async def delete_event(session: AsyncSession, event_id: int) -> None:
    await session.delete(await get_event_or_404(session, event_id))
    await session.commit()


async def list_documents(session: AsyncSession, project_id: Optional[int] = None) -> List[Document]:
    stmt = select(Document)
    if project_id is not None:
        stmt = stmt.where(Document.project_id == project_id)
    result = await session.execute(stmt.order_by(Document.created_at.desc(), Document.id.desc()))
    return list(result.scalars().all())


async def get_document_or_404(session: AsyncSession, document_id: int) -> Document:
    document = await session.get(Document, document_id)
    if document is None:
        raise NotFoundError(f"Document {document_id} not found")
    return document


async def create_document(session: AsyncSession, user: User, data: DocumentCreate) -> Document:
    await _ensure_project(session, data.project_id)
    return await _save(session, Document(**column_values(data), uploaded_by=user.id))


async def update_document(session: AsyncSession, document_id: int, data: DocumentUpdate) -> Document:
    document = await get_document_or_404(session, document_id)
    changes = column_values(data, exclude_unset=True)
    await _ensure_project(session, changes.get("project_id"))
    for key, value in changes.items():
        setattr(document, key, value)
    return await _save(session, document)


async def delete_document(session: AsyncSession, document_id: int) -> None:
    await session.delete(await get_document_or_404(session, document_id))
    await session.commit()
