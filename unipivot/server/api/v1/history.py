"""
Change History, Rollback and Restore Point Endpoints.

Every site design change is recorded in the change history. Administrators
can undo a single change, snapshot the whole design as a restore point and
later restore it. All endpoints require the ADMIN grade.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import as_naive_utc, get_session
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import ChangeHistoryRepository, RestorePointRepository
from unipivot.core.models.domain.enums import ChangeAction
from unipivot.core.models.io.common import Page
from unipivot.core.models.io.history import (
    BackupConfigRead,
    BackupConfigUpdate,
    ChangeHistoryDetail,
    ChangeHistoryRead,
    RestorePointCreate,
    RestorePointRead,
    RestorePointSummary,
    RestoreRequest,
    RestoreResult,
    RollbackRead,
    RollbackRequest,
)
from unipivot.server.deps import RequestMeta, get_request_meta, require_admin
from unipivot.server.services import history as history_service
from unipivot.server.services import restore as restore_service

router = APIRouter(tags=["history"])


@router.get(
    "",
    response_model=Page[ChangeHistoryRead],
    summary="Search Change History",
    description="Filter change history entries, newest first.",
    response_description="One page of history entries.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def search_history(
    entity_type: Optional[str] = None,
    action: Optional[ChangeAction] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> Page[ChangeHistoryRead]:
    """
    Search the change history.

    - **entity_type**: Exact entity type, e.g. `AnnouncementBanner`.
    - **action**: CREATE, UPDATE, DELETE or RESTORE.
    - **start_date** / **end_date**: Inclusive bounds on the change time.
    - **search**: Substring of the description, entity id or field name.
    """
    entries, total = await ChangeHistoryRepository(session).search(
        entity_type=entity_type,
        action=action.value if action else None,
        start_date=as_naive_utc(start_date) if start_date else None,
        end_date=as_naive_utc(end_date) if end_date else None,
        search=search,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return Page[ChangeHistoryRead](
        items=[ChangeHistoryRead.model_validate(e) for e in entries], total=total, page=page, limit=limit
    )


@router.get(
    "/entity/{entity_type}/{entity_id}",
    response_model=List[ChangeHistoryRead],
    summary="Entity History",
    description="All recorded changes of one entity, newest first.",
)
async def entity_history(
    entity_type: str,
    entity_id: str,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[ChangeHistoryRead]:
    entries = await ChangeHistoryRepository(session).for_entity(entity_type, entity_id)
    return [ChangeHistoryRead.model_validate(e) for e in entries]


@router.get(
    "/restore-points",
    response_model=List[RestorePointSummary],
    summary="List Restore Points",
    description="Restore points newest first, without their snapshots.",
)
async def list_restore_points(
    include_automatic: bool = True,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[RestorePointSummary]:
    points = await RestorePointRepository(session).list_points(include_automatic, limit, offset)
    return [RestorePointSummary.model_validate(p) for p in points]


@router.post(
    "/restore-points",
    response_model=RestorePointSummary,
    status_code=status.HTTP_201_CREATED,
    summary="Create Restore Point",
    description="Snapshot every site design table under a name.",
    responses={201: {"description": "Restore point created"}},
)
async def create_restore_point(
    data: RestorePointCreate,
    current_user: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> RestorePointSummary:
    point = await restore_service.create_restore_point(session, data.name, data.description, current_user)
    return RestorePointSummary.model_validate(point)


@router.get(
    "/restore-points/{point_id}",
    response_model=RestorePointRead,
    summary="Get Restore Point",
    responses={404: {"description": "Restore point not found"}},
)
async def get_restore_point(
    point_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> RestorePointRead:
    return RestorePointRead.model_validate(await restore_service.get_restore_point_or_404(session, point_id))


@router.delete(
    "/restore-points/{point_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Restore Point",
    responses={204: {"description": "Restore point deleted"}, 404: {"description": "Restore point not found"}},
)
async def delete_restore_point(
    point_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> None:
    await restore_service.delete_restore_point(session, point_id)


@router.post(
    "/restore-points/{point_id}/restore",
    response_model=RestoreResult,
    summary="Restore Site Design",
    responses={
        200: {"description": "Site design restored"},
        400: {"description": "Restore not confirmed"},
        404: {"description": "Restore point not found"},
    },
)
async def restore_point(
    point_id: int,
    data: RestoreRequest,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> RestoreResult:
    """
    Replace the current site design with a restore point.

    The current design is saved as an automatic backup first, and the whole
    replacement runs in one transaction.

    - **confirm_restore**: Must be `true`.
    """
    return await restore_service.restore_from_point(
        session, point_id, data.confirm_restore, current_user, meta.ip_address, meta.user_agent
    )


@router.get(
    "/backup-config",
    response_model=BackupConfigRead,
    summary="Get Backup Policy",
    description="Backup policy of an entity type, falling back to the configured defaults.",
)
async def get_backup_config(
    entity_type: str = restore_service.DEFAULT_ENTITY_TYPE,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> BackupConfigRead:
    return await restore_service.get_backup_config(session, entity_type)


@router.put(
    "/backup-config",
    response_model=BackupConfigRead,
    summary="Update Backup Policy",
)
async def update_backup_config(
    data: BackupConfigUpdate,
    entity_type: str = restore_service.DEFAULT_ENTITY_TYPE,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> BackupConfigRead:
    return await restore_service.update_backup_config(session, data, entity_type)


@router.get(
    "/{history_id}",
    response_model=ChangeHistoryDetail,
    summary="Get Change",
    description="One history entry with its field-level differences and rollback state.",
    responses={404: {"description": "History entry not found"}},
)
async def get_change(
    history_id: int,
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> ChangeHistoryDetail:
    return await history_service.history_detail(session, history_id)


@router.post(
    "/{history_id}/rollback",
    response_model=RollbackRead,
    summary="Roll Back Change",
    description=(
        "Undo one recorded change: a creation is deleted, an update is reverted and a deletion is "
        "recreated. Each change can be rolled back once."
    ),
    responses={
        200: {"description": "Change rolled back"},
        400: {"description": "Change cannot be rolled back"},
        404: {"description": "History entry not found"},
        409: {"description": "Rollback conflicts with current data"},
    },
)
async def rollback_change(
    history_id: int,
    data: RollbackRequest,
    current_user: User = Depends(require_admin),
    meta: RequestMeta = Depends(get_request_meta),
    session: AsyncSession = Depends(get_session),
) -> RollbackRead:
    rollback = await history_service.rollback_change(
        session, history_id, current_user, data.reason, meta.ip_address, meta.user_agent
    )
    return RollbackRead.model_validate(rollback)
