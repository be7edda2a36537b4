"""
Participant evaluation service.

Organizers issue warning and praise cards to program participants and can
restrict who may take part in programs, either for one program or globally.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.evaluation import ParticipantCard, ParticipationPermission
from unipivot.core.database.entities.programs import Program
from unipivot.core.database.entities.registrations import Registration
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import NotFoundError, PermissionDeniedError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import CardType, DepositStatus, PermissionStatus, RegistrationStatus, UserRole
from unipivot.core.models.io.community import CardCreate, CardIssueResult, CardRead, PermissionCheck, PermissionSet
from unipivot.core.rules.grades import has_grade
from unipivot.core.rules.levels import PRAISED_PARTICIPANT

from .activity import ActivityAction, log_activity
from .badges import award_badge

logger = get_logger(__name__)

CARDS_FOR_CONSEQUENCE = 3

_STRICTNESS = {
    PermissionStatus.allowed.value: 0,
    PermissionStatus.restricted.value: 1,
    PermissionStatus.banned.value: 2,
}


async def count_cards(session: AsyncSession, program_id: int, user_id: int, card_type: CardType) -> int:
    stmt = select(func.count(ParticipantCard.id)).where(
        ParticipantCard.program_id == program_id,
        ParticipantCard.user_id == user_id,
        ParticipantCard.type == card_type.value,
    )
    return (await session.execute(stmt)).scalar_one()


async def issue_card(session: AsyncSession, issuer: User, program_id: int, data: CardCreate) -> CardIssueResult:
    """
    Issue a warning or praise card to a participant.

    The third warning in a program forfeits a paid deposit; the third praise
    awards the ``PRAISED_PARTICIPANT`` badge.
    """
    if await session.get(Program, program_id) is None:
        raise NotFoundError(f"Program {program_id} not found")
    result = await session.execute(
        select(Registration).where(Registration.program_id == program_id, Registration.user_id == data.user_id)
    )
    registration = result.scalars().first()
    if registration is None or registration.status == RegistrationStatus.cancelled:
        raise NotFoundError(f"User {data.user_id} is not registered for program {program_id}")

    card = ParticipantCard(
        program_id=program_id,
        user_id=data.user_id,
        session_id=data.session_id,
        type=data.type.value,
        category=data.category,
        title=data.title,
        description=data.description,
        issued_by=issuer.id,
    )
    session.add(card)
    await session.flush()
    await log_activity(
        session,
        issuer.id,
        ActivityAction.CARD_ISSUED,
        target="participant_card",
        target_id=card.id,
        details={"user_id": data.user_id, "program_id": program_id, "type": data.type.value},
    )

    warnings = await count_cards(session, program_id, data.user_id, CardType.warning)
    praises = await count_cards(session, program_id, data.user_id, CardType.praise)

    forfeited = False
    badge_awarded = False
    if data.type == CardType.warning and warnings >= CARDS_FOR_CONSEQUENCE:
        if registration.deposit_status == DepositStatus.paid:
            registration.deposit_status = DepositStatus.forfeited.value
            session.add(registration)
            forfeited = True
            await log_activity(
                session,
                issuer.id,
                ActivityAction.DEPOSIT_FORFEITED,
                target="registration",
                target_id=registration.id,
                details={"warnings": warnings},
            )
            logger.warning(f"Deposit of registration {registration.id} forfeited after {warnings} warnings")
    if data.type == CardType.praise and praises >= CARDS_FOR_CONSEQUENCE:
        badge_awarded = await award_badge(session, data.user_id, PRAISED_PARTICIPANT, program_id=program_id)

    await session.commit()
    await session.refresh(card)
    return CardIssueResult(
        card=CardRead.model_validate(card),
        warning_count=warnings,
        praise_count=praises,
        deposit_forfeited=forfeited,
        badge_awarded=badge_awarded,
    )


async def list_cards(session: AsyncSession, program_id: int, user_id: Optional[int] = None) -> List[ParticipantCard]:
    stmt = select(ParticipantCard).where(ParticipantCard.program_id == program_id)
    if user_id is not None:
        stmt = stmt.where(ParticipantCard.user_id == user_id)
    stmt = stmt.order_by(ParticipantCard.created_at.desc(), ParticipantCard.id.desc())
    return list((await session.execute(stmt)).scalars().all())


async def set_participation_permission(
    session: AsyncSession, actor: User, data: PermissionSet
) -> ParticipationPermission:
    """Create or replace the permission of a user for one program or globally."""
    if data.program_id is None and not has_grade(actor.role, UserRole.admin):
        raise PermissionDeniedError("Only administrators can set global participation permissions")
    if await session.get(User, data.user_id) is None:
        raise NotFoundError(f"User {data.user_id} not found")
    if data.program_id is not None and await session.get(Program, data.program_id) is None:
        raise NotFoundError(f"Program {data.program_id} not found")

    stmt = select(ParticipationPermission).where(ParticipationPermission.user_id == data.user_id)
    if data.program_id is None:
        stmt = stmt.where(ParticipationPermission.program_id.is_(None))
    else:
        stmt = stmt.where(ParticipationPermission.program_id == data.program_id)
    permission = (await session.execute(stmt)).scalars().first()
    if permission is None:
        permission = ParticipationPermission(user_id=data.user_id, program_id=data.program_id)

    permission.status = data.status.value
    permission.reason = data.reason
    permission.expires_at = data.expires_at
    permission.set_by = actor.id
    permission.updated_at = utc_now()
    session.add(permission)
    await session.commit()
    await session.refresh(permission)
    logger.info(f"Participation of user={data.user_id} program={data.program_id} set to {data.status.value}")
    return permission


async def check_participation_permission(
    session: AsyncSession, user_id: int, program_id: Optional[int] = None
) -> PermissionCheck:
    """
    Effective participation status of a user.

    Global and program permissions both apply; expired entries are ignored and
    the strictest remaining status wins.
    """
    now = utc_now()
    scope = ParticipationPermission.program_id.is_(None)
    if program_id is not None:
        scope = or_(scope, ParticipationPermission.program_id == program_id)
    stmt = select(ParticipationPermission).where(
        ParticipationPermission.user_id == user_id,
        scope,
        or_(ParticipationPermission.expires_at.is_(None), ParticipationPermission.expires_at > now),
    )
    permissions = (await session.execute(stmt)).scalars().all()

    status = PermissionStatus.allowed
    reason = None
    for permission in permissions:
        if _STRICTNESS[permission.status] > _STRICTNESS[status.value]:
            status = PermissionStatus(permission.status)
            reason = permission.reason
    return PermissionCheck(
        user_id=user_id,
        program_id=program_id,
        status=status,
        allowed=status == PermissionStatus.allowed,
        reason=reason,
    )


async def participant_summary(
    session: AsyncSession, program_id: int, user_id: int
) -> Tuple[List[ParticipantCard], int, int, PermissionCheck]:
    cards = await list_cards(session, program_id, user_id)
    warnings = sum(1 for card in cards if card.type == CardType.warning)
    praises = sum(1 for card in cards if card.type == CardType.praise)
    permission = await check_participation_permission(session, user_id, program_id)
    return cards, warnings, praises, permission
