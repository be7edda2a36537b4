"""
Point ledger service.

The user's ``points`` column and the ``point_histories`` ledger are always
changed together so that the ledger sums to the balance and every entry's
``balance`` equals the running total.
"""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.points import PointHistory
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import PointHistoryRepository
from unipivot.core.exceptions import BusinessRuleError, NotFoundError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import PointCategory, PointType
from unipivot.core.models.io.donations import PointAdjustment, PointsSummary

from .activity import ActivityAction, log_activity

logger = get_logger(__name__)


async def add_points(
    session: AsyncSession,
    user: User,
    amount: int,
    category: PointCategory | str,
    description: str,
) -> PointHistory:
    """
    Apply a signed point change to a user.

    Args:
        session: Active session, the caller commits
        user: Persistent user whose balance changes
        amount: Positive to earn, negative to spend
        category: Ledger category
        description: Human readable reason

    Returns:
        The new ledger entry

    Raises:
        BusinessRuleError: If amount is zero or spending exceeds the balance
    """
    if amount == 0:
        raise BusinessRuleError("Point amount must not be zero")
    new_balance = user.points + amount
    if new_balance < 0:
        raise BusinessRuleError(f"Insufficient points: balance {user.points}, requested {-amount}")

    user.points = new_balance
    session.add(user)
    entry = PointHistory(
        user_id=user.id,
        amount=amount,
        type=(PointType.earn if amount > 0 else PointType.spend).value,
        category=PointCategory(category).value,
        description=description,
        balance=new_balance,
    )
    entry = await PointHistoryRepository(session).create(entry)
    logger.info(f"Points {amount:+d} for user={user.id} ({category}), balance={new_balance}")
    return entry


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


async def get_points_summary(session: AsyncSession, user: User) -> PointsSummary:
    repo = PointHistoryRepository(session)
    since = month_start(utc_now())
    return PointsSummary(
        balance=user.points,
        earned_this_month=await repo.sum_since(user.id, PointType.earn.value, since),
        spent_this_month=await repo.sum_since(user.id, PointType.spend.value, since),
    )


async def get_point_history(
    session: AsyncSession, user_id: int, limit: int = 50, offset: int = 0
) -> List[PointHistory]:
    return await PointHistoryRepository(session).for_user(user_id, limit=limit, offset=offset)


async def adjust_points(session: AsyncSession, actor: User, user_id: int, data: PointAdjustment) -> PointHistory:
    """Manual credit or debit by an administrator."""
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    entry = await add_points(session, user, data.amount, data.category, data.description)
    await log_activity(
        session,
        actor.id,
        ActivityAction.POINTS_ADJUSTED,
        target="user",
        target_id=user.id,
        details={"amount": data.amount, "category": PointCategory(data.category).value},
    )
    await session.commit()
    await session.refresh(entry)
    return entry
