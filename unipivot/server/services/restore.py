"""
Restore points and automatic backups of the site design.

A restore point is a JSON snapshot of every site design table. Restoring one
replaces the current design in a single transaction, after saving the current
state as an automatic backup.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.history import BackupConfig, RestorePoint, Rollback
from unipivot.core.database.entities.site_design import (
    AnnouncementBanner,
    FloatingButton,
    Popup,
    PopupTemplate,
    SeoSetting,
    SiteSection,
    SiteSetting,
)
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import BackupConfigRepository, RestorePointRepository
from unipivot.core.exceptions import BusinessRuleError, NotFoundError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import ChangeAction, RollbackType
from unipivot.core.models.io.history import BackupConfigRead, BackupConfigUpdate, RestoreResult
from unipivot.server.core.config import settings

from .change_tracker import snapshot, sync_id_sequence, track_change

logger = get_logger(__name__)

# Snapshot keys in insert order; templates must exist before the popups using them
SNAPSHOT_TABLES: List[Tuple[str, Type[SQLModel]]] = [
    ("sections", SiteSection),
    ("settings", SiteSetting),
    ("banners", AnnouncementBanner),
    ("seo_settings", SeoSetting),
    ("popup_templates", PopupTemplate),
    ("popups", Popup),
    ("floating_buttons", FloatingButton),
]

DEFAULT_ENTITY_TYPE = "ALL"


async def build_snapshot(session: AsyncSession) -> Dict[str, Any]:
    data: Dict[str, Any] = {"timestamp": utc_now().isoformat()}
    for key, model in SNAPSHOT_TABLES:
        rows = (await session.execute(select(model).order_by(model.id))).scalars().all()
        data[key] = [snapshot(row) for row in rows]
    return data


async def _add_restore_point(
    session: AsyncSession,
    name: str,
    description: Optional[str] = None,
    user_id: Optional[int] = None,
    is_automatic: bool = False,
) -> RestorePoint:
    point = RestorePoint(
        name=name,
        description=description,
        snapshot=await build_snapshot(session),
        user_id=user_id,
        is_automatic=is_automatic,
    )
    return await RestorePointRepository(session).create(point)


async def create_restore_point(
    session: AsyncSession, name: str, description: Optional[str], user: User
) -> RestorePoint:
    """Snapshot the whole site design under a name."""
    point = await _add_restore_point(session, name, description, user.id)
    await session.commit()
    await session.refresh(point)
    logger.info(f"Restore point {point.id} '{name}' created by user={user.id}")
    return point


async def get_restore_point_or_404(session: AsyncSession, point_id: int) -> RestorePoint:
    point = await RestorePointRepository(session).get_by_id(point_id)
    if point is None:
        raise NotFoundError(f"Restore point {point_id} not found")
    return point


async def delete_restore_point(session: AsyncSession, point_id: int) -> None:
    await get_restore_point_or_404(session, point_id)
    await RestorePointRepository(session).delete(point_id)
    await session.commit()


async def restore_from_point(
    session: AsyncSession,
    point_id: int,
    confirm: bool,
    user: User,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> RestoreResult:
    """
    Replace every site design table with the contents of a restore point.

    Raises:
        BusinessRuleError: The restore was not confirmed
        NotFoundError: The restore point does not exist
    """
    if not confirm:
        raise BusinessRuleError("Restoring replaces the current site design; set confirm_restore to true")
    point = await get_restore_point_or_404(session, point_id)

    try:
        backup = await _add_restore_point(
            session,
            name=f"Automatic backup before restoring '{point.name}'",
            description=f"Site design before restore point #{point.id} was applied",
            user_id=user.id,
            is_automatic=True,
        )

        for _, model in reversed(SNAPSHOT_TABLES):
            for row in (await session.execute(select(model))).scalars().all():
                await session.delete(row)
        await session.flush()

        restored: Dict[str, int] = {}
        for key, model in SNAPSHOT_TABLES:
            rows = point.snapshot.get(key) or []
            for data in rows:
                session.add(model.model_validate(data))
            restored[key] = len(rows)
        await session.flush()
        for _, model in SNAPSHOT_TABLES:
            await sync_id_sequence(session, model)

        await track_change(
            session,
            "RestorePoint",
            point.id,
            ChangeAction.restore,
            current=restored,
            user_id=user.id,
            description=f"Restored restore point '{point.name}'",
            ip_address=ip_address,
            user_agent=user_agent,
        )
        session.add(
            Rollback(
                restore_point_id=point.id,
                rollback_type=RollbackType.restore_point.value,
                affected_entities=[
                    {"entity_type": key, "entity_id": "*", "action": ChangeAction.restore.value} for key in restored
                ],
                user_id=user.id,
                reason=f"Restore point #{point.id}",
            )
        )
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.error(f"Restoring restore point {point_id} failed, changes rolled back", exc_info=True)
        raise

    logger.info(f"Restore point {point_id} applied by user={user.id}: {restored}")
    return RestoreResult(restore_point_id=point_id, backup_id=backup.id, restored=restored)


async def get_backup_config(session: AsyncSession, entity_type: str = DEFAULT_ENTITY_TYPE) -> BackupConfigRead:
    """Stored backup policy of an entity type, or the configured defaults."""
    config = await BackupConfigRepository(session).get_by_entity_type(entity_type)
    if config is not None:
        return BackupConfigRead.model_validate(config)
    defaults = settings.backup
    return BackupConfigRead(
        entity_type=entity_type,
        enable_auto_backup=defaults.enable_auto_backup,
        backup_interval=defaults.backup_interval_hours,
        retention_days=defaults.retention_days,
        max_versions=defaults.max_versions,
        auto_cleanup=defaults.auto_cleanup,
    )


async def update_backup_config(
    session: AsyncSession, data: BackupConfigUpdate, entity_type: str = DEFAULT_ENTITY_TYPE
) -> BackupConfigRead:
    repo = BackupConfigRepository(session)
    config = await repo.get_by_entity_type(entity_type)
    if config is None:
        current = await get_backup_config(session, entity_type)
        config = BackupConfig(**current.model_dump())
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(config, key, value)
    config.updated_at = utc_now()
    session.add(config)
    await session.commit()
    await session.refresh(config)
    return BackupConfigRead.model_validate(config)


async def cleanup_old_backups(session: AsyncSession, retention_days: int, max_versions: int) -> int:
    """Delete automatic backups past the retention period or beyond ``max_versions``."""
    cutoff = utc_now() - timedelta(days=retention_days)
    deleted = 0
    for index, point in enumerate(await RestorePointRepository(session).automatic_points()):
        if index >= max_versions or point.created_at < cutoff:
            await session.delete(point)
            deleted += 1
    if deleted:
        await session.flush()
        logger.info(f"Cleaned up {deleted} automatic backups")
    return deleted


async def create_auto_backup(
    session: AsyncSession,
    entity_type: str,
    reason: Optional[str] = None,
    user_id: Optional[int] = None,
) -> Optional[RestorePoint]:
    """
    Take an automatic backup after a design change, if the policy allows.

    The stored policy of ``entity_type`` applies, falling back to the ``ALL``
    policy and then to the configured defaults. No backup is taken while the
    latest automatic backup is younger than ``backup_interval`` hours.
    """
    repo = BackupConfigRepository(session)
    stored = await repo.get_by_entity_type(entity_type)
    config = await get_backup_config(session, entity_type if stored is not None else DEFAULT_ENTITY_TYPE)
    if not config.enable_auto_backup:
        return None

    latest = await RestorePointRepository(session).latest_automatic()
    if latest is not None and config.backup_interval > 0:
        if utc_now() - latest.created_at < timedelta(hours=config.backup_interval):
            return None

    point = await _add_restore_point(
        session,
        name=f"Automatic backup ({entity_type})",
        description=reason,
        user_id=user_id,
        is_automatic=True,
    )
    if config.auto_cleanup:
        await cleanup_old_backups(session, config.retention_days, config.max_versions)
    logger.info(f"Automatic backup {point.id} taken after {entity_type} change")
    return point
