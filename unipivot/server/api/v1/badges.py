"""
Badge and Level Endpoints.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.models.io.common import MessageResponse
from unipivot.core.models.io.community import BadgeCheckResult, BadgeRead, ProfileRead, UserBadgeRead
from unipivot.core.rules.levels import xp_for_level
from unipivot.server.deps import get_current_user, require_admin
from unipivot.server.services import badges as badge_service

router = APIRouter(tags=["badges"])


@router.get(
    "",
    response_model=List[BadgeRead],
    summary="List Badges",
    description="Every badge that can be earned, grouped by category.",
)
async def list_badges(session: AsyncSession = Depends(get_session)) -> List[BadgeRead]:
    return [BadgeRead.model_validate(b) for b in await badge_service.list_badges(session)]


@router.get(
    "/me",
    response_model=List[UserBadgeRead],
    summary="My Badges",
    description="Badges earned by the caller, most recent first.",
)
async def my_badges(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> List[UserBadgeRead]:
    return [
        UserBadgeRead(badge=BadgeRead.model_validate(badge), program_id=held.program_id, earned_at=held.earned_at)
        for held, badge in await badge_service.user_badges(session, current_user.id)
    ]


@router.get(
    "/me/profile",
    response_model=ProfileRead,
    summary="My Level",
    response_description="Experience, level and the experience needed for the next level.",
)
async def my_profile(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProfileRead:
    profile = await badge_service.get_or_create_profile(session, current_user.id)
    await session.commit()
    return ProfileRead(
        user_id=profile.user_id,
        xp=profile.xp,
        level=profile.level,
        next_level_xp=xp_for_level(profile.level + 1),
    )


@router.post(
    "/me/check",
    response_model=BadgeCheckResult,
    summary="Check Activity Badges",
    description="Award every activity badge the caller now qualifies for. Safe to call repeatedly.",
)
async def check_badges(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> BadgeCheckResult:
    awarded = await badge_service.check_and_award_badges(session, current_user.id)
    await session.commit()
    return BadgeCheckResult(awarded=awarded)


@router.post(
    "/seed",
    response_model=MessageResponse,
    summary="Seed Badges",
    description="Insert any missing badge definitions.",
    responses={403: {"description": "ADMIN grade required"}},
)
async def seed_badges(
    _: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    added = await badge_service.seed_badges(session)
    await session.commit()
    return MessageResponse(message=f"{added} badges added")
