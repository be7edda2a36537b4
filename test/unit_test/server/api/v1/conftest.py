from datetime import timedelta
from typing import Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database.base import utc_now
from unipivot.core.database.entities.programs import Program, ProgramSession
from unipivot.core.models.domain.enums import ProgramStatus

ProgramFactory = Callable[..., Awaitable[Program]]
SessionFactory = Callable[..., Awaitable[ProgramSession]]


@pytest.fixture
def make_program(session: AsyncSession) -> ProgramFactory:
    """Insert a program directly, OPEN by default."""
    counter = {"n": 0}

    async def factory(status: ProgramStatus = ProgramStatus.open, **fields) -> Program:
        counter["n"] += 1
        fields.setdefault("title", f"Book Club {counter['n']}")
        program = Program(slug=f"book-club-{counter['n']}", status=status.value, **fields)
        session.add(program)
        await session.commit()
        await session.refresh(program)
        return program

    return factory


@pytest.fixture
def make_program_session(session: AsyncSession) -> SessionFactory:
    """Insert a session starting ``offset`` from now."""

    async def factory(program: Program, session_no: int = 1, offset: timedelta = timedelta(0)) -> ProgramSession:
        starts_at = utc_now() + offset
        program_session = ProgramSession(
            program_id=program.id,
            session_no=session_no,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(hours=2),
        )
        session.add(program_session)
        await session.commit()
        await session.refresh(program_session)
        return program_session

    return factory
