"""
User administration service.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import AsyncQueryBuilder
from unipivot.core.exceptions import BusinessRuleError, NotFoundError, PermissionDeniedError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import UserRole, UserStatus
from unipivot.core.rules.grades import can_change_grade, grade_of

from .activity import ActivityAction, log_activity

logger = get_logger(__name__)


async def get_user_or_404(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


async def list_users(
    session: AsyncSession,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
) -> Tuple[List[User], int]:
    conditions = []
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    if role is not None:
        conditions.append(User.role == role.value)

    stmt = select(User).where(*conditions).order_by(User.created_at.desc(), User.id.desc())
    stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_offset(page, limit))
    users = list((await session.execute(stmt)).scalars().all())
    total = (await session.execute(select(func.count(User.id)).where(*conditions))).scalar_one()
    return users, total


async def change_role(session: AsyncSession, actor: User, user_id: int, new_role: UserRole) -> User:
    target = await get_user_or_404(session, user_id)
    if target.id == actor.id:
        raise BusinessRuleError("You cannot change your own role")
    if not can_change_grade(actor.role, target.role, new_role):
        raise PermissionDeniedError(f"You cannot change a {target.role} to {new_role.value}")
    previous = target.role
    target.role = new_role.value
    session.add(target)
    await log_activity(
        session,
        actor.id,
        ActivityAction.ROLE_CHANGED,
        target="user",
        target_id=target.id,
        details={"from": previous, "to": new_role.value},
    )
    await session.commit()
    await session.refresh(target)
    logger.info(f"User {target.id} role {previous} -> {new_role.value} by user={actor.id}")
    return target


async def change_status(session: AsyncSession, actor: User, user_id: int, status: UserStatus) -> User:
    target = await get_user_or_404(session, user_id)
    if target.id == actor.id:
        raise BusinessRuleError("You cannot change your own status")
    if grade_of(target.role) >= grade_of(actor.role):
        raise PermissionDeniedError("You cannot change the status of a user at or above your grade")
    target.status = status.value
    session.add(target)
    await log_activity(
        session,
        actor.id,
        ActivityAction.STATUS_CHANGED,
        target="user",
        target_id=target.id,
        details={"status": status.value},
    )
    await session.commit()
    await session.refresh(target)
    return target


async def delete_user(session: AsyncSession, actor: User, user_id: int) -> None:
    target = await get_user_or_404(session, user_id)
    if target.id == actor.id:
        raise BusinessRuleError("You cannot delete your own account here")
    if grade_of(target.role) >= grade_of(actor.role):
        raise PermissionDeniedError("You cannot delete a user at or above your grade")
    await session.delete(target)
    await session.commit()
    logger.info(f"User {user_id} deleted by user={actor.id}")
