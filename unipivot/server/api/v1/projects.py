"""
Project Endpoints.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.domain.enums import ProjectStatus
from unipivot.core.models.io.business import ProjectCreate, ProjectRead, ProjectUpdate
from unipivot.server.deps import require_admin
from unipivot.server.services import business as business_service

router = APIRouter(tags=["projects"])


@router.get(
    "",
    response_model=List[ProjectRead],
    summary="List Projects",
    responses={403: {"description": "ADMIN grade required"}},
)
async def list_projects(
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[ProjectRead]:
    projects = await business_service.list_projects(session, status_filter)
    return [ProjectRead.model_validate(p) for p in projects]


@router.get(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Get Project",
    responses={404: {"description": "Project not found"}},
)
async def get_project(
    project_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ProjectRead:
    return ProjectRead.model_validate(await business_service.get_project_or_404(session, project_id))


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Project",
    responses={201: {"description": "Project created"}, 400: {"description": "End before start"}},
)
async def create_project(
    data: ProjectCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ProjectRead:
    project = await business_service.create_project(session, current_user, data)
    return ProjectRead.model_validate(project)


@router.patch(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Update Project",
    responses={400: {"description": "End before start"}, 404: {"description": "Project not found"}},
)
async def update_project(
    project_id: int,
    data: ProjectUpdate,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ProjectRead:
    project = await business_service.update_project(session, project_id, data)
    return ProjectRead.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Project",
    description="Delete a project. Its calendar events and documents are kept and detached from it.",
    responses={204: {"description": "Project deleted"}, 404: {"description": "Project not found"}},
)
async def delete_project(
    project_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await business_service.delete_project(session, project_id)
