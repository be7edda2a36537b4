"""
Change tracking for site design entities.

Every create, update and delete of a site design entity is recorded as a
``ChangeHistory`` row holding JSON snapshots of the entity before and after
the change. The snapshots are what rollbacks and restore points are rebuilt from.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from unipivot.core.database.entities.history import ChangeHistory
from unipivot.core.database.entities.site_design import (
    AnnouncementBanner,
    FloatingButton,
    Popup,
    PopupTemplate,
    SeoSetting,
    SiteSection,
    SiteSetting,
)
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import ChangeAction
from unipivot.core.models.io.history import FieldChange

logger = get_logger(__name__)

# Entity type names as stored in the change history
DESIGN_ENTITIES: Dict[str, Type[SQLModel]] = {
    "AnnouncementBanner": AnnouncementBanner,
    "FloatingButton": FloatingButton,
    "Popup": Popup,
    "PopupTemplate": PopupTemplate,
    "SEOSettings": SeoSetting,
    "SiteSection": SiteSection,
    "SiteSettings": SiteSetting,
}

# Visitor engagement counters, written outside the change history
COUNTER_FIELDS = frozenset({"impression_count", "click_count", "dismiss_count", "conversion_count"})

# Timestamps change on every write and are not reported as field changes
IGNORED_FIELDS = frozenset({"created_at", "updated_at"}) | COUNTER_FIELDS


def snapshot(entity: SQLModel) -> Dict[str, Any]:
    """JSON-safe copy of every column of an entity."""
    return entity.model_dump(mode="json")


def _same(left: Any, right: Any) -> bool:
    return json.dumps(left, sort_keys=True, default=str) == json.dumps(right, sort_keys=True, default=str)


def compare_objects(previous: Optional[Dict[str, Any]], current: Optional[Dict[str, Any]]) -> List[FieldChange]:
    """
    List the fields that differ between two snapshots.

    Fields missing from one side compare as ``None``; nested values are
    compared structurally.
    """
    previous = previous or {}
    current = current or {}
    changes = []
    for field in sorted(set(previous) | set(current)):
        if field in IGNORED_FIELDS:
            continue
        before, after = previous.get(field), current.get(field)
        if not _same(before, after):
            changes.append(FieldChange(field=field, previous_value=before, new_value=after))
    return changes


def build_change(
    entity_type: str,
    entity_id: Any,
    action: ChangeAction,
    previous: Optional[Dict[str, Any]] = None,
    current: Optional[Dict[str, Any]] = None,
    user_id: Optional[int] = None,
    description: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    is_auto_save: bool = False,
) -> ChangeHistory:
    """Build the history row of one change; a single changed field is named in ``field_name``."""
    changes = compare_objects(previous, current) if action == ChangeAction.update else []
    return ChangeHistory(
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action.value,
        field_name=changes[0].field if len(changes) == 1 else None,
        previous_value=previous,
        new_value=current,
        full_snapshot=current if current is not None else previous,
        user_id=user_id,
        description=description or f"{action.value} {entity_type} #{entity_id}",
        is_auto_save=is_auto_save,
        ip_address=ip_address,
        user_agent=user_agent,
    )


async def track_change(
    session: AsyncSession, entity_type: str, entity_id: Any, action: ChangeAction, **kwargs: Any
) -> Optional[ChangeHistory]:
    """
    Record a change history entry in the caller's transaction.

    The entry is written inside a savepoint. A database error is logged and
    ``None`` is returned; the tracked change itself stays in the transaction.
    """
    entry = build_change(entity_type, entity_id, action, **kwargs)
    await session.flush()
    try:
        async with session.begin_nested():
            session.add(entry)
    except SQLAlchemyError as e:
        logger.error(f"Failed to track {action.value} of {entity_type} #{entity_id}: {e}", exc_info=True)
        return None
    logger.debug(f"Tracked {action.value} of {entity_type} #{entity_id}")
    return entry


async def sync_id_sequence(session: AsyncSession, model: Type[SQLModel]) -> None:
    """
    Move a PostgreSQL id sequence past rows inserted with explicit ids.

    The sequence never moves backwards; ids of deleted rows are not handed
    out again.
    """
    if session.get_bind().dialect.name != "postgresql":
        return
    table = model.__tablename__
    sequence = f"pg_get_serial_sequence('{table}', 'id')"
    await session.execute(
        text(
            f"SELECT setval({sequence}, "
            f"GREATEST(COALESCE((SELECT MAX(id) FROM {table}), 0), nextval({sequence}) - 1, 1), true)"
        )
    )
