"""
Deposit Refund Endpoints.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from unipivot.core.database import get_session
from unipivot.core.database.entities.users import User
from unipivot.core.exceptions import NotFoundError
from unipivot.core.models.io.programs import (
    RefundEligibility,
    RefundPolicyRead,
    RefundProcessResult,
    RegistrationRead,
)
from unipivot.core.rules.deposits import DEFAULT_REFUND_POLICIES, format_currency
from unipivot.server.deps import get_current_user, require_staff
from unipivot.server.services import programs as program_service
from unipivot.server.services import refunds as refund_service
from unipivot.server.services import registrations as registration_service

router = APIRouter(tags=["refunds"])


@router.get(
    "/policies",
    response_model=Dict[str, List[RefundPolicyRead]],
    summary="List Refund Policies",
    description="Default refund tables per policy type, checked from the top; the first matching row applies.",
)
async def list_policies() -> Dict[str, List[RefundPolicyRead]]:
    return {
        policy_type.value: [RefundPolicyRead(**asdict(row)) for row in rows]
        for policy_type, rows in DEFAULT_REFUND_POLICIES.items()
    }


@router.get(
    "/programs/{program_id}",
    response_model=List[RefundEligibility],
    summary="Program Refund Status",
    description="Refund eligibility of every approved participant of a program.",
    responses={403: {"description": "STAFF grade required"}, 404: {"description": "Program not found"}},
)
async def program_refund_status(
    program_id: int,
    _: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> List[RefundEligibility]:
    return await refund_service.program_refund_status(session, program_id)


@router.get(
    "/programs/{program_id}/me",
    response_model=RefundEligibility,
    summary="My Refund Eligibility",
    description="How much of the deposit the signed-in user would get back right now.",
    responses={404: {"description": "Program or registration not found"}},
)
async def my_refund_eligibility(
    program_id: int,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> RefundEligibility:
    program = await program_service.get_program_or_404(session, program_id)
    registration = await registration_service.find_registration(session, current_user.id, program_id)
    if registration is None:
        raise NotFoundError("Registration not found")
    return await refund_service.refund_eligibility(session, program, registration)


@router.post(
    "/registrations/{registration_id}",
    response_model=RefundProcessResult,
    summary="Process Refund",
    description="Record the computed refund amount and mark the deposit REFUNDED. Forfeited deposits are refused.",
    responses={
        400: {"description": "Deposit not paid or forfeited"},
        403: {"description": "STAFF grade required"},
        404: {"description": "Registration not found"},
    },
)
async def process_refund(
    registration_id: int,
    current_user: User = Depends(require_staff),
    session: AsyncSession = Depends(get_session),
) -> RefundProcessResult:
    registration = await refund_service.process_refund(session, current_user, registration_id)
    return RefundProcessResult(
        registration=RegistrationRead.model_validate(registration),
        formatted_amount=format_currency(registration.refund_amount or 0),
    )
