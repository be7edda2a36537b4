"""
Program service: creation with slugs, listing, sessions and completion.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.programs import Program, ProgramSession
from unipivot.core.database.entities.registrations import Registration
from unipivot.core.database.entities.users import User
from unipivot.core.database.repositories import AsyncQueryBuilder
from unipivot.core.exceptions import BusinessRuleError, ConflictError, NotFoundError
from unipivot.core.logging_config import get_logger
from unipivot.core.models.domain.enums import PointCategory, ProgramStatus, ProgramType, RegistrationStatus, UserRole
from unipivot.core.models.io.common import column_values
from unipivot.core.models.io.programs import (
    ProgramCompletion,
    ProgramCreate,
    ProgramDetail,
    ProgramRead,
    ProgramUpdate,
    SessionCreate,
    SessionUpdate,
)
from unipivot.core.rules.grades import should_upgrade_to_member
from unipivot.core.rules.identifiers import generate_slug
from unipivot.server.core.config import settings

from .activity import ActivityAction, log_activity
from .badges import XP_PROGRAM_COMPLETION, award_xp
from .points import add_points

logger = get_logger(__name__)


async def slug_exists(session: AsyncSession, slug: str) -> bool:
    result = await session.execute(select(Program.id).where(Program.slug == slug))
    return result.first() is not None


async def create_program(session: AsyncSession, data: ProgramCreate) -> Program:
    """Create a DRAFT program with a unique slug."""
    base_slug = generate_slug(data.title, utc_now())
    slug = base_slug
    suffix = 2
    while await slug_exists(session, slug):
        slug = f"{base_slug}-{suffix}"
        suffix += 1

    program = Program(**column_values(data), slug=slug, status=ProgramStatus.draft.value)
    session.add(program)
    await session.commit()
    await session.refresh(program)
    logger.info(f"Created program {program.id} ({program.slug})")
    return program


async def get_program_or_404(session: AsyncSession, program_id: int) -> Program:
    program = await session.get(Program, program_id)
    if program is None:
        raise NotFoundError(f"Program {program_id} not found")
    return program


async def count_approved(session: AsyncSession, program_id: int) -> int:
    stmt = select(func.count(Registration.id)).where(
        Registration.program_id == program_id,
        Registration.status == RegistrationStatus.approved.value,
    )
    return (await session.execute(stmt)).scalar_one()


async def program_detail(session: AsyncSession, program: Program) -> ProgramDetail:
    approved = await count_approved(session, program.id)
    return ProgramDetail(
        **ProgramRead.model_validate(program).model_dump(),
        approved_count=approved,
        remaining_seats=max(0, program.capacity - approved),
    )


async def count_completed_programs(session: AsyncSession, user_id: int) -> int:
    stmt = (
        select(func.count(Registration.id))
        .join(Program, Program.id == Registration.program_id)
        .where(
            Registration.user_id == user_id,
            Registration.status == RegistrationStatus.approved.value,
            Program.status == ProgramStatus.completed.value,
        )
    )
    return (await session.execute(stmt)).scalar_one()


async def complete_program(session: AsyncSession, program_id: int, actor: User) -> ProgramCompletion:
    """
    Mark a program COMPLETED and reward its approved participants.

    Every approved participant earns the completion points and XP. Plain
    USER accounts are promoted to MEMBER once they have completed enough
    programs.
    """
    program = await get_program_or_404(session, program_id)
    if program.status == ProgramStatus.completed:
        raise BusinessRuleError("Program is already completed")

    program.status = ProgramStatus.completed.value
    session.add(program)
    await session.flush()

    result = await session.execute(
        select(User)
        .join(Registration, Registration.user_id == User.id)
        .where(
            Registration.program_id == program_id,
            Registration.status == RegistrationStatus.approved.value,
        )
    )
    participants: List[User] = list(result.scalars().all())

    promoted = 0
    reward = settings.points.program_completion
    for user in participants:
        if reward:
            await add_points(session, user, reward, PointCategory.program, f"프로그램 수료: {program.title}")
        await award_xp(session, user.id, XP_PROGRAM_COMPLETION)
        completed = await count_completed_programs(session, user.id)
        if should_upgrade_to_member(user.role, completed):
            user.role = UserRole.member.value
            session.add(user)
            promoted += 1
            await log_activity(
                session,
                actor.id,
                ActivityAction.ROLE_CHANGED,
                target="user",
                target_id=user.id,
                details={"role": UserRole.member.value, "reason": "program_completion"},
            )

    await log_activity(
        session,
        actor.id,
        ActivityAction.PROGRAM_COMPLETED,
        target="program",
        target_id=program.id,
        details={"participants": len(participants), "promoted": promoted},
    )
    await session.commit()
    await session.refresh(program)
    logger.info(f"Program {program.id} completed: {len(participants)} participants, {promoted} promoted")
    return ProgramCompletion(
        program=ProgramRead.model_validate(program),
        completed_participants=len(participants),
        promoted_members=promoted,
    )


async def list_programs(
    session: AsyncSession,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    program_type: Optional[ProgramType] = None,
    status: Optional[ProgramStatus] = None,
) -> Tuple[List[Program], int]:
    """Programs newest first, filtered by title substring, type and status."""
    conditions = []
    if search:
        conditions.append(Program.title.ilike(f"%{search}%"))  # type: ignore[attr-defined]
    if program_type is not None:
        conditions.append(Program.type == program_type.value)
    if status is not None:
        conditions.append(Program.status == status.value)

    stmt = select(Program).where(*conditions).order_by(Program.created_at.desc(), Program.id.desc())
    stmt = AsyncQueryBuilder.apply_pagination(stmt, limit, AsyncQueryBuilder.page_offset(page, limit))
    items = list((await session.execute(stmt)).scalars().all())
    total = (await session.execute(select(func.count(Program.id)).where(*conditions))).scalar_one()
    return items, total


async def get_program_by_slug(session: AsyncSession, slug: str) -> Program:
    """Published program by slug; drafts are not visible to the public."""
    result = await session.execute(
        select(Program).where(Program.slug == slug, Program.status != ProgramStatus.draft.value)
    )
    program = result.scalars().first()
    if program is None:
        raise NotFoundError(f"Program '{slug}' not found")
    return program


async def update_program(session: AsyncSession, program_id: int, data: ProgramUpdate) -> Program:
    program = await get_program_or_404(session, program_id)
    changes = column_values(data, exclude_unset=True)
    if changes.get("status") == ProgramStatus.completed.value:
        raise BusinessRuleError("Use the completion endpoint to complete a program")
    for key, value in changes.items():
        setattr(program, key, value)
    session.add(program)
    await session.commit()
    await session.refresh(program)
    return program


async def delete_program(session: AsyncSession, program_id: int) -> None:
    program = await get_program_or_404(session, program_id)
    await session.delete(program)
    await session.commit()
    logger.info(f"Deleted program {program_id}")


async def list_sessions(session: AsyncSession, program_id: int) -> List[ProgramSession]:
    await get_program_or_404(session, program_id)
    result = await session.execute(
        select(ProgramSession)
        .where(ProgramSession.program_id == program_id)
        .order_by(ProgramSession.session_no.asc())
    )
    return list(result.scalars().all())


async def get_program_session_or_404(session: AsyncSession, program_id: int, session_id: int) -> ProgramSession:
    program_session = await session.get(ProgramSession, session_id)
    if program_session is None or program_session.program_id != program_id:
        raise NotFoundError(f"Session {session_id} not found")
    return program_session


async def _commit_session_row(session: AsyncSession, program_session: ProgramSession) -> ProgramSession:
    session.add(program_session)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise ConflictError(f"Session number {program_session.session_no} already exists") from e
    await session.refresh(program_session)
    return program_session


async def create_session(session: AsyncSession, program_id: int, data: SessionCreate) -> ProgramSession:
    await get_program_or_404(session, program_id)
    return await _commit_session_row(session, ProgramSession(program_id=program_id, **column_values(data)))


async def update_session(
    session: AsyncSession, program_id: int, session_id: int, data: SessionUpdate
) -> ProgramSession:
    program_session = await get_program_session_or_404(session, program_id, session_id)
    for key, value in column_values(data, exclude_unset=True).items():
        setattr(program_session, key, value)
    return await _commit_session_row(session, program_session)


async def delete_session(session: AsyncSession, program_id: int, session_id: int) -> None:
    program_session = await get_program_session_or_404(session, program_id, session_id)
    await session.delete(program_session)
    await session.commit()
