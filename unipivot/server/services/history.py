"""
Change history queries and single-change rollback.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.history import ChangeHistory, Rollback
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import ChangeHistoryRepository, RollbackRepository
from unipivot.core.exceptions import BusinessRuleError, ConflictError, NotFoundError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import ChangeAction, RollbackType
from unipivot.core.models.io.history import ChangeHistoryDetail, ChangeHistoryRead

from .change_tracker import COUNTER_FIELDS, DESIGN_ENTITIES, compare_objects, snapshot, sync_id_sequence, track_change

logger = get_logger(__name__)

# Columns a rollback never overwrites on an existing row
PRESERVED_FIELDS = frozenset({"id", "created_at"}) | COUNTER_FIELDS


async def get_history_or_404(session: AsyncSession, history_id: int) -> ChangeHistory:
    entry = await ChangeHistoryRepository(session).get_by_id(history_id)
    if entry is None:
        raise NotFoundError(f"Change history {history_id} not found")
    return entry


async def history_detail(session: AsyncSession, history_id: int) -> ChangeHistoryDetail:
    entry = await get_history_or_404(session, history_id)
    changes = []
    if isinstance(entry.previous_value, dict) and isinstance(entry.new_value, dict):
        changes = compare_objects(entry.previous_value, entry.new_value)
    rolled_back = await RollbackRepository(session).for_history(history_id) is not None
    return ChangeHistoryDetail(
        **ChangeHistoryRead.model_validate(entry).model_dump(),
        changes=changes,
        rolled_back=rolled_back,
    )


def _is_recorded_entity(live: Dict[str, Any], recorded: Optional[Dict[str, Any]]) -> bool:
    """Whether the live row is the entity a history snapshot was taken of."""
    if not isinstance(recorded, dict) or "created_at" not in recorded:
        return True
    return live.get("created_at") == recorded["created_at"]


def _restore_fields(target: SQLModel, source: SQLModel) -> None:
    for field in type(source).model_fields:
        if field not in PRESERVED_FIELDS:
            setattr(target, field, getattr(source, field))
    if hasattr(target, "updated_at"):
        target.updated_at = utc_now()


async def rollback_change(
    session: AsyncSession,
    history_id: int,
    user: User,
    reason: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Rollback:
    """
    Undo one tracked change.

    A CREATE is undone by deleting the entity, an UPDATE by writing back the
    previous snapshot and a DELETE by recreating the entity from it. The undo
    is itself tracked, and a change can be rolled back only once.
    """
    entry = await get_history_or_404(session, history_id)
    if await RollbackRepository(session).for_history(history_id) is not None:
        raise BusinessRuleError(f"Change {history_id} has already been rolled back")
    if entry.action == ChangeAction.restore:
        raise BusinessRuleError("A restore cannot be rolled back; apply an earlier restore point instead")
    model = DESIGN_ENTITIES.get(entry.entity_type)
    if model is None:
        raise BusinessRuleError(f"Rollback is not supported for {entry.entity_type}")

    entity_id = int(entry.entity_id)
    current = await session.get(model, entity_id)
    before: Optional[Dict[str, Any]] = snapshot(current) if current is not None else None
    recorded = entry.new_value if entry.action == ChangeAction.create else entry.previous_value
    if before is not None and not _is_recorded_entity(before, recorded):
        raise ConflictError(
            f"{entry.entity_type} {entity_id} is no longer the entity changed in change {history_id}"
        )
    recreated = False

    if entry.action == ChangeAction.create:
        if current is None:
            raise BusinessRuleError(f"{entry.entity_type} {entity_id} no longer exists")
        await session.delete(current)
        inverse = ChangeAction.delete
    else:
        previous = entry.previous_value if isinstance(entry.previous_value, dict) else None
        if not previous:
            raise BusinessRuleError(f"Change {history_id} has no previous state to restore")
        restored = model.model_validate(previous)
        if current is None:
            session.add(restored)
            recreated = True
            inverse = ChangeAction.create
        elif entry.action == ChangeAction.delete:
            raise ConflictError(f"{entry.entity_type} {entity_id} already exists")
        else:
            _restore_fields(current, restored)
            session.add(current)
            inverse = ChangeAction.update

    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Rollback of change {history_id} conflicts with existing data: {e}")
        raise ConflictError(f"Rolling back change {history_id} conflicts with existing data") from e
    if recreated:
        await sync_id_sequence(session, model)

    after = None
    if inverse != ChangeAction.delete:
        after = snapshot(await session.get(model, entity_id))
    await track_change(
        session,
        entry.entity_type,
        entity_id,
        inverse,
        previous=before,
        current=after,
        user_id=user.id,
        description=f"Rollback of change #{history_id}",
        ip_address=ip_address,
        user_agent=user_agent,
    )
    rollback = Rollback(
        target_history_id=history_id,
        rollback_type=RollbackType.single.value,
        affected_entities=[
            {"entity_type": entry.entity_type, "entity_id": entry.entity_id, "action": inverse.value}
        ],
        user_id=user.id,
        reason=reason,
    )
    session.add(rollback)
    await session.commit()
    await session.refresh(rollback)
    logger.info(f"Change {history_id} rolled back by user={user.id} ({inverse.value})")
    return rollback
